"""Human-readable terminal report."""

from __future__ import annotations

from collections.abc import Sequence

import click

from ..schemas.analysis import AnalysisReport, DecisionChain, RiskSeverity
from ..schemas.events import DiscoveryType

RULE = "─" * 50
BAR_WIDTH = 25

TYPE_LABELS: dict[DiscoveryType, str] = {
    DiscoveryType.TRAINING_RECALL: "Training Recall",
    DiscoveryType.CONTEXT_INHERITANCE: "Context Inherit",
    DiscoveryType.REACTIVE_SEARCH: "Reactive Search",
    DiscoveryType.PROACTIVE_SEARCH: "Proactive Search",
    DiscoveryType.USER_DIRECTED: "User Directed",
    DiscoveryType.UNKNOWN: "Unknown",
}

TYPE_COLORS: dict[DiscoveryType, str] = {
    DiscoveryType.TRAINING_RECALL: "blue",
    DiscoveryType.CONTEXT_INHERITANCE: "yellow",
    DiscoveryType.REACTIVE_SEARCH: "red",
    DiscoveryType.PROACTIVE_SEARCH: "green",
    DiscoveryType.USER_DIRECTED: "green",
    DiscoveryType.UNKNOWN: "white",
}

SEVERITY_STYLES: dict[RiskSeverity, tuple[str, str]] = {
    RiskSeverity.CRITICAL: ("⬤", "red"),
    RiskSeverity.ERROR: ("⚠", "red"),
    RiskSeverity.WARNING: ("⚠", "yellow"),
    RiskSeverity.INFO: ("ℹ", "blue"),
}


def _heading(text: str) -> str:
    return click.style(f"  {text}", bold=True)


def _dim(text: str) -> str:
    return click.style(f"  {text}", dim=True)


def _percent(count: int, total: int) -> int:
    # Half-up, like the chain statistics.
    return (200 * count + total) // (2 * total) if total else 0


def _distribution_lines(report: AnalysisReport) -> list[str]:
    lines = [_heading("Discovery Distribution"), ""]
    total = sum(report.classification_distribution.values())
    for discovery_type, count in report.classification_distribution.items():
        if count == 0:
            continue
        pct = _percent(count, total)
        filled = (pct + 2) // 4
        bar = "█" * filled + "░" * (BAR_WIDTH - filled)
        lines.append(
            f"  {click.style(bar, fg=TYPE_COLORS[discovery_type])} "
            f"{TYPE_LABELS[discovery_type]}  {pct}% ({count})"
        )
    lines.append("")
    return lines


def _risk_lines(report: AnalysisReport) -> list[str]:
    lines: list[str] = []
    for assessment in report.risk_assessments:
        label = assessment.package_name
        if assessment.package_version != "unknown":
            label = f"{label}@{assessment.package_version}"
        for factor in assessment.factors:
            icon, color = SEVERITY_STYLES[factor.severity]
            lines.append(
                f"  {click.style(icon, fg=color)} {click.style(label, bold=True)} - "
                f"{click.style(factor.detail, fg=color)}"
            )
            if factor.suggested_alternative:
                lines.append(
                    click.style(f"    → Consider: {factor.suggested_alternative}", fg="green")
                )
    if lines:
        lines.append("")
    return lines


def format_terminal_report(report: AnalysisReport) -> str:
    """Render a report as styled text for a terminal."""
    lines = ["", _heading("Sightglass Analysis")]
    if report.session_id:
        lines.append(_dim(f"Session: {report.session_id}"))
    if report.agent:
        lines.append(_dim(f"Agent: {report.agent} | Events: {report.total_events}"))
    lines.extend(["", _dim(RULE), ""])

    lines.extend(_distribution_lines(report))

    kept = len(report.kept_installs)
    lines.extend([_heading(f"Packages Installed: {kept}"), ""])
    lines.extend(_risk_lines(report))

    if report.alternatives_never_considered > 0:
        lines.append(
            _dim(f"Alternatives Never Considered: {report.alternatives_never_considered}/{kept} packages")
        )
        lines.extend([_dim("installed with zero deliberation"), ""])

    stats = report.chain_stats
    lines.extend(
        [
            _heading("Decision Chains"),
            _dim(f"Total chains: {stats.total_chains}"),
            _dim(f"With search: {stats.chains_with_search}"),
            _dim(f"With abandoned attempts: {stats.chains_with_abandoned}"),
            _dim(f"No-deliberation rate: {stats.no_deliberation_rate}%"),
            "",
        ]
    )

    risk = report.risk_stats
    if risk.total > 0:
        lines.append(_heading("Risk Summary"))
        for label, count, color in (
            ("Critical", risk.critical, "red"),
            ("High", risk.high, "red"),
            ("Medium", risk.medium, "yellow"),
            ("Low", risk.low, "green"),
        ):
            if count > 0:
                lines.append(click.style(f"  ⬤ {label}: {count}", fg=color))
        lines.append("")

    lines.extend([_dim(RULE), ""])
    return "\n".join(lines)


def format_chains(chains: Sequence[DecisionChain]) -> str:
    """Render decision chains as an indented outline."""
    lines: list[str] = []
    for chain in chains:
        lines.extend(["", click.style(f"  Chain #{chain.chain_order}", bold=True)])
        for abandoned in chain.abandoned_choices:
            lines.append(click.style(f"    ✗ {abandoned.raw} (abandoned)", fg="red"))
        for search in chain.search_events:
            lines.append(click.style(f"    ⌕ {search.raw}", fg="yellow"))

        final = chain.final_selection
        lines.append(
            click.style(
                f"    ✓ {final.package_name or 'unknown'} [{final.classification.value}]",
                fg="green",
            )
        )
        for sub in chain.sub_decisions:
            lines.append(click.style(f"      └ {sub.package_name or sub.raw}", dim=True))
    return "\n".join(lines)
