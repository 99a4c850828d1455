"""Rule-based discovery classification for agent tool-call events.

Each install is classified by looking at the events that preceded it in
the same session: instruction files the agent read, manifests it
inspected, failures it hit and searches it ran.
"""

import logging
from collections.abc import Iterable, Sequence

from ..config import ClassifierSettings
from ..config import settings as default_settings
from ..knowledge import DEFAULT_KNOWLEDGE_BASE, DEFAULT_TABLES, KnowledgeBase, PatternTables
from ..parser.commands import (
    extract_alternatives,
    is_install_command,
    is_proactive_search_query,
    parse_install_command,
)
from ..schemas.events import (
    Action,
    ClassifiedEvent,
    DiscoveryType,
    ParsedPackage,
    RawEvent,
)
from .state import ScanState, is_instruction_read, is_manifest_read

logger = logging.getLogger(__name__)

Verdict = tuple[DiscoveryType, int]


class PatternClassifier:
    """Classify raw events into discovery types.

    Args:
        tables: Compiled recognition tables (built-in snapshot by default)
        knowledge: Package knowledge base (built-in snapshot by default)
        settings: Window parameters (``settings.classifier`` by default)
    """

    def __init__(
        self,
        tables: PatternTables | None = None,
        knowledge: KnowledgeBase | None = None,
        settings: ClassifierSettings | None = None,
    ) -> None:
        self.tables = tables or DEFAULT_TABLES
        self.knowledge = knowledge or DEFAULT_KNOWLEDGE_BASE
        self.settings = settings or default_settings.classifier

    def classify(self, events: Sequence[RawEvent]) -> list[ClassifiedEvent]:
        """Classify every event, one output per input, in input order.

        Sessions are scanned independently; interleaved sessions never share
        instruction content, manifests or failures.
        """
        sessions: dict[str, list[int]] = {}
        for index, event in enumerate(events):
            sessions.setdefault(event.session_id, []).append(index)

        classified: list[ClassifiedEvent | None] = [None] * len(events)
        for session_id, indices in sessions.items():
            session_events = [events[index] for index in indices]
            results = self._classify_session(session_events)
            logger.debug(
                "Classified %d events in session %s (%d installs)",
                len(results),
                session_id,
                sum(1 for event in results if event.is_install),
            )
            for index, event in zip(indices, results):
                classified[index] = event

        return mark_abandoned_installs(classified)  # type: ignore[arg-type]

    def _classify_session(self, events: list[RawEvent]) -> list[ClassifiedEvent]:
        state = ScanState()
        results: list[ClassifiedEvent] = []

        for position, event in enumerate(events):
            state = state.advance(event, self.tables)
            window = events[max(0, position - self.settings.lookback_window) : position]
            results.append(self._classify_event(event, window, state))

        return results

    def _classify_event(
        self,
        event: RawEvent,
        window: list[RawEvent],
        state: ScanState,
    ) -> ClassifiedEvent:
        if event.is_search_action:
            classification, confidence = self.classify_search(event, state.last_failure)
            return ClassifiedEvent.from_raw(
                event,
                classification=classification,
                confidence=confidence,
                is_search=True,
                alternatives=self._alternatives(event.result),
            )

        if event.action == Action.BASH and is_install_command(event.raw, self.tables):
            return self._classify_install(event, window, state)

        if event.action == Action.FILE_READ:
            if is_instruction_read(event, self.tables):
                return ClassifiedEvent.from_raw(
                    event, classification=DiscoveryType.USER_DIRECTED, confidence=60
                )
            return ClassifiedEvent.from_raw(event, classification=DiscoveryType.UNKNOWN, confidence=20)

        return ClassifiedEvent.from_raw(
            event,
            classification=DiscoveryType.UNKNOWN,
            confidence=10,
            abandoned=event.is_failed_bash,
        )

    def _classify_install(
        self,
        event: RawEvent,
        window: list[RawEvent],
        state: ScanState,
    ) -> ClassifiedEvent:
        packages = parse_install_command(event.raw, self.tables)
        if not packages:
            return ClassifiedEvent.from_raw(
                event,
                classification=DiscoveryType.UNKNOWN,
                confidence=30,
                is_install=True,
            )

        primary = packages[0]
        classification, confidence = self.classify_install(primary, window, state)

        alternatives: list[str] = []
        for search in (candidate for candidate in window if candidate.is_search_action):
            for name in self._alternatives(search.result):
                if name not in alternatives:
                    alternatives.append(name)

        return ClassifiedEvent.from_raw(
            event,
            classification=classification,
            confidence=confidence,
            package_name=primary.name,
            package_version=primary.version,
            package_manager=primary.manager,
            is_install=True,
            alternatives=alternatives[: self.settings.max_alternatives],
        )

    def classify_install(
        self,
        package: ParsedPackage,
        window: list[RawEvent],
        state: ScanState,
    ) -> Verdict:
        """Decide why ``package`` was installed. First matching rule wins.

        Args:
            package: Primary package of the install command
            window: Session events immediately preceding the install
            state: Scan state after observing the install event

        Returns:
            Discovery type and confidence
        """
        if state.instructions_mention(self.knowledge.directive_terms(package.name)):
            return DiscoveryType.USER_DIRECTED, 90

        manifest_in_window = any(is_manifest_read(e, self.tables) for e in window)
        if manifest_in_window and state.manifests_mention(package.name):
            return DiscoveryType.CONTEXT_INHERITANCE, 85

        searches = [e for e in window if e.is_search_action]
        failure_in_window = any(e.is_failed_bash for e in window)

        if searches and failure_in_window:
            return DiscoveryType.REACTIVE_SEARCH, 80

        if searches:
            if any(is_proactive_search_query(e.raw, self.tables) for e in searches):
                return DiscoveryType.PROACTIVE_SEARCH, 75
            return DiscoveryType.REACTIVE_SEARCH, 65

        if self.knowledge.is_high_training_weight(package.name, package.manager):
            return DiscoveryType.TRAINING_RECALL, 90

        return DiscoveryType.TRAINING_RECALL, 70

    def classify_search(self, event: RawEvent, last_failure: RawEvent | None) -> Verdict:
        """Classify a web search or fetch against the latest failure."""
        if last_failure is not None:
            searched_at, failed_at = event.occurred_at, last_failure.occurred_at
            if searched_at is not None and failed_at is not None:
                elapsed = (searched_at - failed_at).total_seconds()
                if 0 <= elapsed < self.settings.reactive_search_window_sec:
                    return DiscoveryType.REACTIVE_SEARCH, 80

        if is_proactive_search_query(event.raw, self.tables):
            return DiscoveryType.PROACTIVE_SEARCH, 75

        return DiscoveryType.UNKNOWN, 40

    def _alternatives(self, text: str | None) -> list[str]:
        return extract_alternatives(
            text,
            limit=self.settings.max_alternatives,
            min_length=self.settings.min_alternative_length,
            tables=self.tables,
        )


def mark_abandoned_installs(events: Iterable[ClassifiedEvent]) -> list[ClassifiedEvent]:
    """Flag every install whose command exited non-zero as abandoned.

    Returns a new list; flagged entries are replaced by updated copies.
    """
    return [
        event.model_copy(update={"abandoned": True})
        if event.is_install and event.exit_code is not None and event.exit_code != 0
        else event
        for event in events
    ]


def classify_events(
    events: Sequence[RawEvent],
    classifier: PatternClassifier | None = None,
) -> list[ClassifiedEvent]:
    """Classify events with the given classifier, or a default one."""
    return (classifier or PatternClassifier()).classify(events)
