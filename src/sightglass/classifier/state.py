"""Rolling scan state threaded through a session's classification pass."""

from dataclasses import dataclass, replace

from ..knowledge import PatternTables
from ..schemas.events import Action, RawEvent


def path_matches(path: str, names: tuple[str, ...]) -> bool:
    """Whether ``path`` is one of ``names`` or ends in ``/name``."""
    normalized = path.strip().replace("\\", "/")
    return any(normalized == name or normalized.endswith(f"/{name}") for name in names)


def is_instruction_read(event: RawEvent, tables: PatternTables) -> bool:
    """File read of an agent instruction file (CLAUDE.md, .cursorrules, ...)."""
    return event.action == Action.FILE_READ and path_matches(event.raw, tables.instruction_files)


def is_manifest_read(event: RawEvent, tables: PatternTables) -> bool:
    """File read of a dependency manifest (package.json, Cargo.toml, ...)."""
    return event.action == Action.FILE_READ and path_matches(event.raw, tables.manifest_files)


@dataclass(frozen=True, slots=True)
class ScanState:
    """What a session has revealed so far.

    Instruction and manifest contents only ever grow within a session.
    """

    instruction_contents: tuple[str, ...] = ()
    manifest_contents: tuple[str, ...] = ()
    last_failure: RawEvent | None = None

    def advance(self, event: RawEvent, tables: PatternTables) -> "ScanState":
        """Return the state after observing ``event``."""
        state = self
        if event.result:
            if is_instruction_read(event, tables):
                state = replace(state, instruction_contents=(*state.instruction_contents, event.result))
            if is_manifest_read(event, tables):
                state = replace(state, manifest_contents=(*state.manifest_contents, event.result))
        if event.is_failed_bash:
            state = replace(state, last_failure=event)
        return state

    def instructions_mention(self, terms: tuple[str, ...]) -> bool:
        """Case-insensitive substring match of any term in instruction content."""
        return _mentioned(terms, self.instruction_contents)

    def manifests_mention(self, name: str) -> bool:
        """Case-insensitive substring match of ``name`` in manifest content."""
        return _mentioned((name,), self.manifest_contents)


def _mentioned(terms: tuple[str, ...], contents: tuple[str, ...]) -> bool:
    lowered = [term.lower() for term in terms if term]
    return any(term in content.lower() for content in contents for term in lowered)
