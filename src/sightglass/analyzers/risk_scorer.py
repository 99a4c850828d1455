"""Risk scoring for installed packages."""

import logging
from collections.abc import Mapping, Sequence

from ..config import RiskSettings
from ..config import settings as default_settings
from ..knowledge import DEFAULT_KNOWLEDGE_BASE, KnowledgeBase
from ..schemas.analysis import (
    RiskAssessment,
    RiskFactor,
    RiskFactorType,
    RiskLevel,
    RiskSeverity,
    RiskStats,
)
from ..schemas.events import ClassifiedEvent, DiscoveryType

logger = logging.getLogger(__name__)

Advisories = Mapping[str, Sequence[RiskFactor]]


class RiskScorer:
    """Attach risk factors to kept installs.

    Args:
        knowledge: Package knowledge base (built-in snapshot by default)
        settings: Scoring thresholds (``settings.risk`` by default)
    """

    def __init__(
        self,
        knowledge: KnowledgeBase | None = None,
        settings: RiskSettings | None = None,
    ) -> None:
        self.knowledge = knowledge or DEFAULT_KNOWLEDGE_BASE
        self.settings = settings or default_settings.risk

    def score(
        self,
        events: Sequence[ClassifiedEvent],
        advisories: Advisories | None = None,
    ) -> list[RiskAssessment]:
        """Score every non-abandoned install that names a package.

        Args:
            events: Classified events in any order
            advisories: Extra factors per package name from an external lookup

        Returns:
            One assessment per install with at least one factor, in input order
        """
        assessments: list[RiskAssessment] = []

        for event in events:
            if not event.is_install or event.abandoned or not event.package_name:
                continue

            factors = self.factors_for(event, advisories)
            if factors:
                assessments.append(
                    RiskAssessment(
                        package_name=event.package_name,
                        package_version=event.package_version or "unknown",
                        factors=factors,
                    )
                )

        logger.debug("Scored %d risk assessments", len(assessments))
        return assessments

    def factors_for(
        self,
        event: ClassifiedEvent,
        advisories: Advisories | None = None,
    ) -> list[RiskFactor]:
        """Collect the risk factors that apply to one install."""
        factors: list[RiskFactor] = []
        name = event.package_name or ""

        known_issue = self.knowledge.known_issues.get(name)
        if known_issue is not None:
            factors.append(known_issue)

        if advisories:
            factors.extend(advisories.get(name, ()))

        if (
            event.classification == DiscoveryType.TRAINING_RECALL
            and event.confidence >= self.settings.training_bias_min_confidence
        ):
            factors.append(
                RiskFactor(
                    type=RiskFactorType.TRAINING_BIAS,
                    severity=RiskSeverity.INFO,
                    detail=(
                        f"Installed via training recall ({event.confidence}% confidence) "
                        "with no alternatives considered."
                    ),
                )
            )

        return factors


def score_risks(
    events: Sequence[ClassifiedEvent],
    scorer: RiskScorer | None = None,
    advisories: Advisories | None = None,
) -> list[RiskAssessment]:
    """Score risks with the given scorer, or a default one."""
    return (scorer or RiskScorer()).score(events, advisories=advisories)


def get_risk_stats(assessments: Sequence[RiskAssessment]) -> RiskStats:
    """Count assessments per risk level and per notable factor type."""

    def with_factor(factor_type: RiskFactorType) -> int:
        return sum(
            1
            for assessment in assessments
            if any(factor.type == factor_type for factor in assessment.factors)
        )

    def at_level(level: RiskLevel) -> int:
        return sum(1 for assessment in assessments if assessment.risk_level == level)

    return RiskStats(
        total=len(assessments),
        critical=at_level(RiskLevel.CRITICAL),
        high=at_level(RiskLevel.HIGH),
        medium=at_level(RiskLevel.MEDIUM),
        low=at_level(RiskLevel.LOW),
        vulnerabilities=with_factor(RiskFactorType.VULNERABILITY),
        deprecated=with_factor(RiskFactorType.DEPRECATED),
        bloat=with_factor(RiskFactorType.BLOAT),
    )
