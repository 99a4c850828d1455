"""Group classified events into decision chains.

A chain starts at an install attempt and collects the searches and
abandoned attempts around it, ending in the package the agent kept.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

from ..config import ChainSettings
from ..config import settings as default_settings
from ..schemas.analysis import ChainStats, DecisionChain
from ..schemas.events import ClassifiedEvent

logger = logging.getLogger(__name__)

_CHAIN_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "sightglass/decision-chain")


def chain_id(session_id: str, root_event_id: str) -> str:
    """Stable chain identifier for a root install within a session."""
    return str(uuid.uuid5(_CHAIN_NAMESPACE, f"{session_id}/{root_event_id}"))


def round_half_up(value: Decimal, places: int = 0) -> Decimal:
    """Round halves away from zero, unlike the builtin ``round``."""
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


class ChainBuilder:
    """Build decision chains from classified events.

    Args:
        settings: Window parameters (``settings.chains`` by default)
    """

    def __init__(self, settings: ChainSettings | None = None) -> None:
        self.settings = settings or default_settings.chains

    def build(self, events: Sequence[ClassifiedEvent]) -> list[DecisionChain]:
        """Build chains in root order; input order is taken as chronological.

        Every event belongs to at most one chain. Calling this twice on the
        same events yields identical chains.
        """
        sessions: dict[str, list[ClassifiedEvent]] = {}
        for event in events:
            sessions.setdefault(event.session_id, []).append(event)

        positions = {
            event.id: position
            for session_events in sessions.values()
            for position, event in enumerate(session_events)
        }
        used: set[str] = set()
        chain_counts: dict[str, int] = {}
        chains: list[DecisionChain] = []

        for event in events:
            if not event.is_install or event.id in used:
                continue
            session_events = sessions[event.session_id]
            chain_counts[event.session_id] = chain_counts.get(event.session_id, 0) + 1
            chains.append(
                self._build_chain(
                    event,
                    session_events,
                    positions[event.id],
                    used,
                    chain_counts[event.session_id],
                )
            )

        logger.debug("Built %d decision chains across %d sessions", len(chains), len(sessions))
        return chains

    def _build_chain(
        self,
        root: ClassifiedEvent,
        session_events: list[ClassifiedEvent],
        root_position: int,
        used: set[str],
        chain_order: int,
    ) -> DecisionChain:
        used.add(root.id)

        earlier_searches: list[ClassifiedEvent] = []
        abandoned_choices: list[ClassifiedEvent] = []
        start = max(0, root_position - self.settings.lookback_window)
        for position in range(root_position - 1, start - 1, -1):
            event = session_events[position]
            if event.id in used:
                continue
            if event.is_search:
                earlier_searches.append(event)
                used.add(event.id)
            elif event.is_install and event.abandoned:
                abandoned_choices.append(event)
                used.add(event.id)

        # Backward scan collected newest first.
        earlier_searches.reverse()
        abandoned_choices.reverse()

        later_searches: list[ClassifiedEvent] = []
        sub_decisions: list[ClassifiedEvent] = []
        stop = min(len(session_events), root_position + 1 + self.settings.lookahead_window)
        for position in range(root_position + 1, stop):
            event = session_events[position]
            if event.id in used:
                continue
            if event.is_search:
                later_searches.append(event)
                used.add(event.id)
            elif event.is_install and (root.abandoned or self._follows_closely(root, event)):
                sub_decisions.append(event)
                used.add(event.id)

        final_selection = root
        if root.abandoned:
            final_selection = next((e for e in sub_decisions if not e.abandoned), root)
            if final_selection is not root:
                abandoned_choices.append(root)

        return DecisionChain(
            id=chain_id(root.session_id, root.id),
            session_id=root.session_id,
            root_event=root,
            sub_decisions=sub_decisions,
            search_events=earlier_searches + later_searches,
            abandoned_choices=abandoned_choices,
            final_selection=final_selection,
            chain_order=chain_order,
        )

    def _follows_closely(self, root: ClassifiedEvent, event: ClassifiedEvent) -> bool:
        root_at, event_at = root.occurred_at, event.occurred_at
        if root_at is None or event_at is None:
            return False
        return (event_at - root_at).total_seconds() < self.settings.follow_on_window_sec


def build_chains(
    events: Sequence[ClassifiedEvent],
    builder: ChainBuilder | None = None,
) -> list[DecisionChain]:
    """Build decision chains with the given builder, or a default one."""
    return (builder or ChainBuilder()).build(events)


def get_chain_stats(chains: Sequence[DecisionChain]) -> ChainStats:
    """Aggregate statistics over decision chains.

    Args:
        chains: Chains to summarize

    Returns:
        ChainStats with the average rounded to one decimal and the
        no-deliberation rate as a whole percentage
    """
    total = len(chains)
    if total == 0:
        return ChainStats()

    with_search = sum(1 for chain in chains if chain.search_events)
    with_abandoned = sum(1 for chain in chains if chain.abandoned_choices)
    sub_decisions = sum(len(chain.sub_decisions) for chain in chains)

    average = round_half_up(Decimal(sub_decisions) / Decimal(total), places=1)
    no_deliberation = round_half_up(Decimal(100 * (total - with_search)) / Decimal(total))

    return ChainStats(
        total_chains=total,
        chains_with_search=with_search,
        chains_with_abandoned=with_abandoned,
        average_sub_decisions=float(average),
        no_deliberation_rate=int(no_deliberation),
    )
