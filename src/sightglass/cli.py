"""CLI entrypoint for sightglass."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import click

from . import __version__
from .analyzers import ChainBuilder, RiskScorer
from .classifier import PatternClassifier
from .exceptions import SightglassError
from .ingest import load_events
from .knowledge import DEFAULT_KNOWLEDGE_BASE, KnowledgeBase, load_knowledge_base
from .parser import format_package_spec, is_install_command, parse_install_command
from .pipeline import analyze_events
from .reporters import format_chains, format_json_report, format_terminal_report
from .schemas.events import RawEvent, parse_timestamp

FORMAT_CHOICES = ["terminal", "json"]


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """Agent supply chain intelligence: see what your AI coding agents actually decide."""


def _load_knowledge(path: Path | None) -> KnowledgeBase:
    if path is None:
        return DEFAULT_KNOWLEDGE_BASE
    try:
        return load_knowledge_base(path)
    except SightglassError as exc:
        raise click.ClickException(str(exc)) from exc


def _parse_since(value: str | None) -> datetime | None:
    if value is None:
        return None
    since = parse_timestamp(value)
    if since is None:
        raise click.BadParameter(f"not an ISO date or timestamp: {value!r}", param_hint="--since")
    return since


def _select_events(
    events: list[RawEvent],
    session: str | None,
    since: datetime | None,
) -> list[RawEvent]:
    if session is not None:
        events = [event for event in events if event.session_id == session]
    if since is not None:
        # Events without a parseable timestamp cannot be placed after the cutoff.
        events = [
            event
            for event in events
            if event.occurred_at is not None and event.occurred_at >= since
        ]
    return events


@main.command()
@click.argument("events_file", type=click.Path(path_type=Path))
@click.option(
    "--format",
    "output_format",
    type=click.Choice(FORMAT_CHOICES),
    default="terminal",
    show_default=True,
    help="Output format.",
)
@click.option("--chains", "show_chains", is_flag=True, help="Show full decision chains.")
@click.option("--session", default=None, help="Analyze a specific session only.")
@click.option("--since", default=None, help="Only analyze events at or after this ISO date.")
@click.option(
    "--knowledge",
    "knowledge_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML knowledge base replacing the built-in package data.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def analyze(
    events_file: Path,
    output_format: str,
    show_chains: bool,
    session: str | None,
    since: str | None,
    knowledge_path: Path | None,
    verbose: bool,
) -> None:
    """Analyze a file of normalized agent events (.json or .jsonl)."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    knowledge = _load_knowledge(knowledge_path)
    cutoff = _parse_since(since)

    try:
        events = load_events(events_file)
    except SightglassError as exc:
        raise click.ClickException(str(exc)) from exc

    events = _select_events(events, session, cutoff)
    if not events:
        click.echo(click.style("\n  No events found.", fg="yellow"))
        click.echo(click.style("  Run some AI agent sessions, then try again.\n", dim=True))
        return

    agents = {event.agent.value for event in events}
    report = analyze_events(
        events,
        classifier=PatternClassifier(knowledge=knowledge),
        chain_builder=ChainBuilder(),
        risk_scorer=RiskScorer(knowledge=knowledge),
        session_id=session,
        agent=agents.pop() if len(agents) == 1 else None,
    )

    if output_format == "json":
        click.echo(format_json_report(report))
        return

    click.echo(format_terminal_report(report))
    if show_chains and report.chains:
        click.echo(click.style("  Decision Chains (detail)", bold=True))
        click.echo(format_chains(report.chains))
        click.echo("")


@main.command()
@click.argument("command")
def parse(command: str) -> None:
    """Show the packages an install COMMAND would add."""
    packages = parse_install_command(command)
    if not packages:
        if is_install_command(command):
            click.echo("Install command, but no package names could be parsed.")
        else:
            click.echo("Not an install command.")
        return

    for package in packages:
        version = package.version or "-"
        spec = format_package_spec(package)
        click.echo(f"{package.manager.value:<6} {package.name:<30} {version:<12} {spec}")


@main.command()
@click.option(
    "--knowledge",
    "knowledge_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML knowledge base to inspect instead of the built-in one.",
)
def knowledge(knowledge_path: Path | None) -> None:
    """List packages with known issues."""
    knowledge_base = _load_knowledge(knowledge_path)
    if not knowledge_base.known_issues:
        click.echo("No known issues configured.")
        return

    for name in sorted(knowledge_base.known_issues):
        factor = knowledge_base.known_issues[name]
        click.echo(f"{name} [{factor.type.value}/{factor.severity.value}] {factor.detail}")
        if factor.suggested_alternative:
            click.echo(f"  -> Consider: {factor.suggested_alternative}")


if __name__ == "__main__":
    main()
