"""End-to-end analysis: classify, chain, score, summarize."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from .analyzers.chain_builder import ChainBuilder, get_chain_stats
from .analyzers.risk_scorer import Advisories, RiskScorer, get_risk_stats
from .classifier import PatternClassifier
from .ingest import group_by_session
from .schemas.analysis import AnalysisReport, empty_distribution
from .schemas.events import ClassifiedEvent, DiscoveryType, RawEvent

logger = logging.getLogger(__name__)


def _count_unconsidered(installs: list[ClassifiedEvent]) -> int:
    return sum(
        1
        for event in installs
        if not event.abandoned
        and event.classification == DiscoveryType.TRAINING_RECALL
        and not event.alternatives
    )


def analyze_events(
    events: Sequence[RawEvent],
    *,
    classifier: PatternClassifier | None = None,
    chain_builder: ChainBuilder | None = None,
    risk_scorer: RiskScorer | None = None,
    advisories: Advisories | None = None,
    session_id: str | None = None,
    agent: str | None = None,
) -> AnalysisReport:
    """Run the full analysis over an event list.

    Args:
        events: Raw events, chronological within each session
        classifier: Classifier to use (default tables and knowledge)
        chain_builder: Chain builder to use (default windows)
        risk_scorer: Risk scorer to use (default knowledge)
        advisories: Extra risk factors per package name
        session_id: Session label for the report
        agent: Agent label for the report

    Returns:
        AnalysisReport covering every event
    """
    classifier = classifier or PatternClassifier()
    chain_builder = chain_builder or ChainBuilder()
    risk_scorer = risk_scorer or RiskScorer()

    classified = classifier.classify(events)
    installs = [event for event in classified if event.is_install]

    distribution = empty_distribution()
    for event in installs:
        distribution[event.classification] += 1

    assessments = risk_scorer.score(classified, advisories=advisories)
    chains = chain_builder.build(classified)

    logger.debug(
        "Analyzed %d events: %d installs, %d chains, %d risk assessments",
        len(classified),
        len(installs),
        len(chains),
        len(assessments),
    )

    return AnalysisReport(
        session_id=session_id,
        agent=agent,
        total_events=len(classified),
        classified_events=classified,
        install_events=installs,
        classification_distribution=distribution,
        risk_assessments=assessments,
        risk_stats=get_risk_stats(assessments),
        chains=chains,
        chain_stats=get_chain_stats(chains),
        alternatives_never_considered=_count_unconsidered(installs),
    )


def analyze_sessions(
    events: Sequence[RawEvent],
    **kwargs,
) -> dict[str, AnalysisReport]:
    """Analyze each session separately.

    Keyword arguments are passed to ``analyze_events``; the session id and
    agent labels come from the events themselves.
    """
    reports: dict[str, AnalysisReport] = {}
    for session_id, session_events in group_by_session(events).items():
        reports[session_id] = analyze_events(
            session_events,
            session_id=session_id,
            agent=session_events[0].agent.value,
            **kwargs,
        )
    return reports
