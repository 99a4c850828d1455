"""Install command and search query recognition."""

import re

from ..knowledge import DEFAULT_TABLES, PatternTables
from ..schemas.events import PackageManager, ParsedPackage

_SCOPED_SPEC = re.compile(r"^(@[^@]+)@(.+)$")
_PLAIN_SPEC = re.compile(r"^([^@]+)@(.+)$")
_PIP_SPEC = re.compile(r"^([^=<>!~]+)(?:[=<>!~]+(.+))?$")
_REDIRECT = re.compile(r"^\d*>")
_QUOTES = "'\""


def _is_path(token: str) -> bool:
    return token == "." or token.startswith(("./", "../", "/", "~/"))


def parse_package_spec(spec: str, manager: PackageManager) -> tuple[str, str | None]:
    """Split a package specifier into name and version.

    npm, cargo and go split on the last ``@`` (scoped npm names keep their
    leading ``@``); pip splits at the first comparison operator.
    """
    if manager in (PackageManager.NPM, PackageManager.CARGO, PackageManager.GO):
        scoped = _SCOPED_SPEC.match(spec)
        if scoped:
            return scoped.group(1), scoped.group(2)
        plain = _PLAIN_SPEC.match(spec)
        if plain:
            return plain.group(1), plain.group(2)
        return spec, None

    if manager == PackageManager.PIP:
        match = _PIP_SPEC.match(spec)
        if match:
            return match.group(1), match.group(2)

    return spec, None


def format_package_spec(package: ParsedPackage) -> str:
    """Serialize a parsed package back into a command-line specifier."""
    if package.version is None:
        return package.name
    if package.manager == PackageManager.PIP:
        return f"{package.name}=={package.version}"
    if package.manager == PackageManager.GEM:
        return package.name
    return f"{package.name}@{package.version}"


def _split_package_args(
    args: str,
    manager: PackageManager,
    tables: PatternTables,
) -> list[ParsedPackage]:
    """Tokenize an argument string into packages, dropping flags and their values."""
    value_flags = tables.value_flags.get(manager, frozenset())
    packages: list[ParsedPackage] = []
    skip_next = False

    for part in args.split():
        token = part.strip(_QUOTES)
        if skip_next:
            skip_next = False
            continue
        if token.startswith("-"):
            skip_next = token in value_flags
            continue
        if not token or _REDIRECT.match(token) or _is_path(token):
            continue
        name, version = parse_package_spec(token, manager)
        if name:
            packages.append(ParsedPackage(name=name, version=version, manager=manager))

    return packages


def parse_install_command(
    command: str,
    tables: PatternTables | None = None,
) -> list[ParsedPackage]:
    """Extract packages from an install command.

    Every pattern of every manager is tried; matches are concatenated in
    manager-table then pattern-table order.

    Args:
        command: Shell command string
        tables: Pattern tables (built-in snapshot by default)

    Returns:
        Parsed packages, empty for non-install commands
    """
    tables = tables or DEFAULT_TABLES
    results: list[ParsedPackage] = []

    for manager, patterns in tables.install_patterns:
        for pattern in patterns:
            match = pattern.search(command)
            if match and match.group(1):
                results.extend(_split_package_args(match.group(1).strip(), manager, tables))

    return results


def is_install_command(command: str, tables: PatternTables | None = None) -> bool:
    """Whether any install pattern matches, even if no package survives parsing."""
    tables = tables or DEFAULT_TABLES
    return any(
        pattern.search(command) for _, patterns in tables.install_patterns for pattern in patterns
    )


def is_proactive_search_query(text: str, tables: PatternTables | None = None) -> bool:
    """Whether a query reads as a deliberate comparison or alternatives search."""
    tables = tables or DEFAULT_TABLES
    return any(pattern.search(text) for pattern in tables.proactive_search_patterns)


def extract_alternatives(
    text: str | None,
    limit: int = 10,
    min_length: int = 3,
    tables: PatternTables | None = None,
) -> list[str]:
    """Pull plausible package names out of search or fetch output.

    Returns unique names in first-seen order, at most ``limit``.
    """
    if not text:
        return []
    tables = tables or DEFAULT_TABLES

    candidates: list[str] = []
    for token in tables.alternative_token_pattern.findall(text):
        if len(token) < min_length or token in tables.stop_words or token in candidates:
            continue
        candidates.append(token)
        if len(candidates) >= limit:
            break
    return candidates
