"""Immutable lookup tables injected into the classifier and risk scorer."""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

import yaml
from pydantic import BaseModel, Field, ValidationError

from ..exceptions import KnowledgeBaseError
from ..schemas.analysis import RiskFactor
from ..schemas.events import PackageManager
from . import tables


@dataclass(frozen=True, slots=True)
class PatternTables:
    """Compiled regexes and file lists used to recognize events."""

    install_patterns: tuple[tuple[PackageManager, tuple[re.Pattern[str], ...]], ...]
    value_flags: Mapping[PackageManager, frozenset[str]]
    proactive_search_patterns: tuple[re.Pattern[str], ...]
    instruction_files: tuple[str, ...]
    manifest_files: tuple[str, ...]
    alternative_token_pattern: re.Pattern[str]
    stop_words: frozenset[str]

    @classmethod
    def default(cls) -> "PatternTables":
        """Build tables from the built-in snapshot."""
        return cls(
            install_patterns=tuple(
                (manager, tuple(re.compile(pattern) for pattern in patterns))
                for manager, patterns in tables.INSTALL_PATTERNS
            ),
            value_flags=MappingProxyType(
                {manager: frozenset(flags) for manager, flags in tables.VALUE_FLAGS.items()}
            ),
            proactive_search_patterns=tuple(
                re.compile(pattern, re.IGNORECASE) for pattern in tables.PROACTIVE_SEARCH_PATTERNS
            ),
            instruction_files=tuple(tables.INSTRUCTION_FILES),
            manifest_files=tuple(tables.MANIFEST_FILES),
            alternative_token_pattern=re.compile(tables.ALTERNATIVE_TOKEN_PATTERN),
            stop_words=frozenset(tables.STOP_WORDS),
        )


@dataclass(frozen=True, slots=True)
class KnowledgeBase:
    """Curated package knowledge: training weight, known issues, aliases."""

    high_training_weight: Mapping[PackageManager, frozenset[str]]
    known_issues: Mapping[str, RiskFactor]
    directive_aliases: Mapping[str, tuple[str, ...]]

    @classmethod
    def default(cls) -> "KnowledgeBase":
        """Build the knowledge base from the built-in snapshot."""
        return cls.from_document(KnowledgeBaseDocument())

    @classmethod
    def from_document(cls, document: "KnowledgeBaseDocument") -> "KnowledgeBase":
        """Freeze a validated document into lookup tables."""
        return cls(
            high_training_weight=MappingProxyType(
                {
                    manager: frozenset(names)
                    for manager, names in document.high_training_weight.items()
                }
            ),
            known_issues=MappingProxyType(dict(document.known_issues)),
            directive_aliases=MappingProxyType(
                {name: tuple(terms) for name, terms in document.directive_aliases.items()}
            ),
        )

    def is_high_training_weight(self, name: str, manager: PackageManager) -> bool:
        """Whether ``name`` is a default pick for ``manager``.

        Go modules also match by path suffix, so ``github.com/gin-gonic/gin``
        matches the ``gin-gonic/gin`` entry.
        """
        names = self.high_training_weight.get(manager, frozenset())
        if name in names:
            return True
        if manager == PackageManager.GO:
            return any(name.endswith(f"/{entry}") for entry in names)
        return False

    def directive_terms(self, name: str) -> tuple[str, ...]:
        """Terms that name this package in human-written instructions."""
        return (name, *self.directive_aliases.get(name, ()))


def _default_training_weight() -> dict[PackageManager, list[str]]:
    return {manager: list(names) for manager, names in tables.HIGH_TRAINING_WEIGHT_PACKAGES.items()}


def _default_known_issues() -> dict[str, RiskFactor]:
    return {name: RiskFactor(**issue) for name, issue in tables.KNOWN_ISSUES.items()}


def _default_aliases() -> dict[str, list[str]]:
    return {name: list(terms) for name, terms in tables.DIRECTIVE_ALIASES.items()}


class KnowledgeBaseDocument(BaseModel):
    """On-disk knowledge base layout. Omitted sections keep the built-in data."""

    high_training_weight: dict[PackageManager, list[str]] = Field(
        default_factory=_default_training_weight,
        description="Default-pick packages per manager",
    )
    known_issues: dict[str, RiskFactor] = Field(
        default_factory=_default_known_issues,
        description="Canonical risk factor per known-problematic package",
    )
    directive_aliases: dict[str, list[str]] = Field(
        default_factory=_default_aliases,
        description="Technology names that refer to a package in instructions",
    )


def load_knowledge_base(path: Path) -> KnowledgeBase:
    """Load a knowledge base from a YAML file.

    Args:
        path: YAML document with any of the ``KnowledgeBaseDocument`` sections

    Returns:
        Frozen KnowledgeBase

    Raises:
        KnowledgeBaseError: If the file cannot be read or fails validation
    """
    try:
        with path.open() as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise KnowledgeBaseError(f"Cannot read knowledge base {path}: {exc}") from exc

    try:
        document = KnowledgeBaseDocument.model_validate(data or {})
    except ValidationError as exc:
        raise KnowledgeBaseError(f"Invalid knowledge base {path}: {exc}") from exc
    return KnowledgeBase.from_document(document)


DEFAULT_TABLES = PatternTables.default()
DEFAULT_KNOWLEDGE_BASE = KnowledgeBase.default()
