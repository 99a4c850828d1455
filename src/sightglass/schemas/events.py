"""Event schemas for agent tool calls and their classification."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..config import settings


class Agent(str, Enum):
    """Coding agents whose tool calls can be analyzed."""

    CLAUDE_CODE = "claude-code"
    CODEX = "codex"
    CURSOR = "cursor"
    WINDSURF = "windsurf"
    COPILOT = "copilot"
    UNKNOWN = "unknown"


class Action(str, Enum):
    """Kind of tool call an agent performed."""

    BASH = "bash"
    WEB_SEARCH = "web_search"
    WEB_FETCH = "web_fetch"
    FILE_READ = "file_read"
    FILE_WRITE = "file_write"


class DiscoveryType(str, Enum):
    """Inferred reason a dependency was chosen."""

    TRAINING_RECALL = "TRAINING_RECALL"
    CONTEXT_INHERITANCE = "CONTEXT_INHERITANCE"
    REACTIVE_SEARCH = "REACTIVE_SEARCH"
    PROACTIVE_SEARCH = "PROACTIVE_SEARCH"
    USER_DIRECTED = "USER_DIRECTED"
    UNKNOWN = "UNKNOWN"


class PackageManager(str, Enum):
    """Package ecosystems recognized in install commands."""

    NPM = "npm"
    PIP = "pip"
    CARGO = "cargo"
    GO = "go"
    GEM = "gem"


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO timestamp, treating naive values as UTC.

    Returns None instead of raising for unparseable input.
    """
    try:
        parsed = datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


class RawEvent(BaseModel):
    """One observed agent action, normalized by a collector."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Unique event identifier")
    session_id: str = Field(description="Agent session the event belongs to")
    timestamp: str = Field(description="ISO timestamp, non-decreasing within a session")
    agent: Agent = Field(default=Agent.UNKNOWN, description="Originating agent")
    action: Action = Field(description="Tool call kind")
    raw: str = Field(description="Command string, URL, file path, or search query")
    result: str | None = Field(default=None, description="Tool output (truncated)")
    exit_code: int | None = Field(default=None, description="Exit code for bash commands")
    cwd: str | None = Field(default=None, description="Working directory")

    @field_validator("result")
    @classmethod
    def truncate_result(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value[: settings.ingest.max_result_chars]

    @property
    def occurred_at(self) -> datetime | None:
        """Parsed timestamp, or None when it cannot be parsed."""
        return parse_timestamp(self.timestamp)

    @property
    def is_failed_bash(self) -> bool:
        """Whether this is a shell command that exited non-zero."""
        return self.action == Action.BASH and self.exit_code is not None and self.exit_code != 0

    @property
    def is_search_action(self) -> bool:
        """Whether this is a web search or fetch."""
        return self.action in (Action.WEB_SEARCH, Action.WEB_FETCH)


class ParsedPackage(BaseModel):
    """A package reference extracted from an install command."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Package name as written in the command")
    version: str | None = Field(default=None, description="Requested version, if any")
    manager: PackageManager = Field(description="Package manager that installs it")


class ClassifiedEvent(RawEvent):
    """A RawEvent annotated with its discovery classification."""

    classification: DiscoveryType = Field(description="Inferred discovery type")
    confidence: int = Field(ge=0, le=100, description="Classification confidence (0-100)")
    package_name: str | None = Field(default=None, description="Primary installed package")
    package_version: str | None = Field(default=None, description="Primary package version")
    package_manager: PackageManager | None = Field(default=None, description="Package manager")
    is_install: bool = Field(default=False, description="Event is a dependency install")
    is_search: bool = Field(default=False, description="Event is a web search or fetch")
    abandoned: bool = Field(default=False, description="Command failed and was given up")
    alternatives: list[str] = Field(
        default_factory=list,
        description="Candidate package names surfaced by nearby searches",
    )

    @model_validator(mode="after")
    def check_flags(self) -> "ClassifiedEvent":
        if self.is_install and self.is_search:
            raise ValueError("an event cannot be both an install and a search")
        if not self.is_install and (
            self.package_name is not None
            or self.package_version is not None
            or self.package_manager is not None
        ):
            raise ValueError("package fields are only set on install events")
        return self

    @classmethod
    def from_raw(cls, event: RawEvent, **annotations: object) -> "ClassifiedEvent":
        """Build a classified event carrying every field of ``event``."""
        raw_fields = event.model_dump(include=set(RawEvent.model_fields))
        return cls(**raw_fields, **annotations)
