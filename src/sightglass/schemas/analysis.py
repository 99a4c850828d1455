"""Analysis result schemas: decision chains, risk findings, and reports.

Derived values (risk level, chain event sets) use @computed_field or plain
properties so they can never drift from the data they summarize.
"""

from enum import Enum

from pydantic import BaseModel, Field, computed_field

from .events import ClassifiedEvent, DiscoveryType


class RiskFactorType(str, Enum):
    """Category of a risk finding."""

    VULNERABILITY = "vulnerability"
    DEPRECATED = "deprecated"
    UNMAINTAINED = "unmaintained"
    BLOAT = "bloat"
    LICENSE = "license"
    TRAINING_BIAS = "training_bias"


class RiskSeverity(str, Enum):
    """Severity of a single risk factor."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class RiskLevel(str, Enum):
    """Overall risk of an installed package."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


SEVERITY_RANK: dict[RiskSeverity, int] = {
    RiskSeverity.INFO: 0,
    RiskSeverity.WARNING: 1,
    RiskSeverity.ERROR: 2,
    RiskSeverity.CRITICAL: 3,
}

LEVEL_BY_RANK: dict[int, RiskLevel] = {
    0: RiskLevel.LOW,
    1: RiskLevel.MEDIUM,
    2: RiskLevel.HIGH,
    3: RiskLevel.CRITICAL,
}


def calculate_risk_level(factors: list["RiskFactor"]) -> RiskLevel:
    """Map the highest factor severity onto a risk level.

    critical -> critical, error -> high, warning -> medium, info only -> low.
    """
    if not factors:
        return RiskLevel.LOW
    max_rank = max(SEVERITY_RANK[factor.severity] for factor in factors)
    return LEVEL_BY_RANK[max_rank]


class RiskFactor(BaseModel):
    """One reason an installed package deserves attention."""

    type: RiskFactorType = Field(description="Finding category")
    severity: RiskSeverity = Field(description="Finding severity")
    detail: str = Field(description="Human-readable explanation")
    source: str | None = Field(default=None, description="Citation (advisory URL, etc)")
    suggested_alternative: str | None = Field(
        default=None,
        description="Package to consider instead",
    )


class RiskAssessment(BaseModel):
    """Risk findings for one installed package."""

    package_name: str = Field(description="Installed package")
    package_version: str = Field(default="unknown", description="Installed version")
    factors: list[RiskFactor] = Field(min_length=1, description="Findings (never empty)")

    @computed_field
    @property
    def risk_level(self) -> RiskLevel:
        """Overall level derived from the most severe factor."""
        return calculate_risk_level(self.factors)


class RiskStats(BaseModel):
    """Aggregate counts over a list of risk assessments."""

    total: int = 0
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    vulnerabilities: int = 0
    deprecated: int = 0
    bloat: int = 0


class DecisionChain(BaseModel):
    """One episode ending in a chosen (or attempted) dependency."""

    id: str = Field(description="Deterministic chain identifier")
    session_id: str = Field(description="Session the chain belongs to")
    root_event: ClassifiedEvent = Field(description="Install attempt that opened the chain")
    sub_decisions: list[ClassifiedEvent] = Field(
        default_factory=list,
        description="Installs that followed the root within the same episode",
    )
    search_events: list[ClassifiedEvent] = Field(
        default_factory=list,
        description="Searches and fetches adjacent to the root",
    )
    abandoned_choices: list[ClassifiedEvent] = Field(
        default_factory=list,
        description="Failed installs superseded within this chain",
    )
    final_selection: ClassifiedEvent = Field(description="Install representing the outcome")
    chain_order: int = Field(ge=1, description="1-based position among the session's chains")

    def event_ids(self) -> set[str]:
        """Ids of every event this chain references."""
        events = [
            self.root_event,
            self.final_selection,
            *self.sub_decisions,
            *self.search_events,
            *self.abandoned_choices,
        ]
        return {event.id for event in events}


class ChainStats(BaseModel):
    """Aggregate statistics over decision chains."""

    total_chains: int = 0
    chains_with_search: int = 0
    chains_with_abandoned: int = 0
    average_sub_decisions: float = 0.0
    no_deliberation_rate: int = Field(
        default=0,
        description="Percentage of chains with no search at all",
    )


def empty_distribution() -> dict[DiscoveryType, int]:
    """Zeroed count for every discovery type."""
    return {discovery_type: 0 for discovery_type in DiscoveryType}


class AnalysisReport(BaseModel):
    """Complete analysis of an event list."""

    session_id: str | None = None
    agent: str | None = None
    total_events: int = 0
    classified_events: list[ClassifiedEvent] = Field(default_factory=list)
    install_events: list[ClassifiedEvent] = Field(default_factory=list)
    classification_distribution: dict[DiscoveryType, int] = Field(
        default_factory=empty_distribution,
        description="Install count per discovery type",
    )
    risk_assessments: list[RiskAssessment] = Field(default_factory=list)
    risk_stats: RiskStats = Field(default_factory=RiskStats)
    chains: list[DecisionChain] = Field(default_factory=list)
    chain_stats: ChainStats = Field(default_factory=ChainStats)
    alternatives_never_considered: int = Field(
        default=0,
        description="Kept training-recall installs with no alternatives surfaced",
    )

    @property
    def kept_installs(self) -> list[ClassifiedEvent]:
        """Install events that were not abandoned."""
        return [event for event in self.install_events if not event.abandoned]
