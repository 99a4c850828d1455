"""Machine-readable analysis report."""

import json
from datetime import UTC, datetime

from ..schemas.analysis import AnalysisReport


def build_json_payload(report: AnalysisReport, generated_at: datetime | None = None) -> dict:
    """Assemble the JSON report structure.

    Args:
        report: Completed analysis
        generated_at: Report timestamp (now, in UTC, by default)

    Returns:
        Dict with ``meta``, ``distribution``, ``installs``, ``risks``,
        ``chains`` and ``summary`` sections
    """
    generated_at = generated_at or datetime.now(UTC)

    return {
        "meta": {
            "session_id": report.session_id,
            "agent": report.agent,
            "total_events": report.total_events,
            "generated_at": generated_at.isoformat(),
        },
        "distribution": {
            discovery_type.value: count
            for discovery_type, count in report.classification_distribution.items()
        },
        "installs": [
            {
                "package": event.package_name,
                "version": event.package_version,
                "manager": event.package_manager.value if event.package_manager else None,
                "classification": event.classification.value,
                "confidence": event.confidence,
            }
            for event in report.kept_installs
        ],
        "risks": [
            {
                "package": assessment.package_name,
                "version": assessment.package_version,
                "level": assessment.risk_level.value,
                "factors": [
                    {
                        "type": factor.type.value,
                        "severity": factor.severity.value,
                        "detail": factor.detail,
                        "source": factor.source,
                        "alternative": factor.suggested_alternative,
                    }
                    for factor in assessment.factors
                ],
            }
            for assessment in report.risk_assessments
        ],
        "chains": [
            {
                "id": chain.id,
                "session_id": chain.session_id,
                "order": chain.chain_order,
                "root": chain.root_event.package_name,
                "final": chain.final_selection.package_name,
                "sub_decisions": [event.package_name for event in chain.sub_decisions],
                "searches": len(chain.search_events),
                "abandoned": [event.package_name for event in chain.abandoned_choices],
            }
            for chain in report.chains
        ],
        "summary": {
            "alternatives_never_considered": report.alternatives_never_considered,
            "risk_stats": report.risk_stats.model_dump(),
            "chain_stats": report.chain_stats.model_dump(),
        },
    }


def format_json_report(report: AnalysisReport, generated_at: datetime | None = None) -> str:
    """Serialize a report as indented JSON."""
    return json.dumps(build_json_payload(report, generated_at), indent=2)
