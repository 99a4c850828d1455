"""Tests for decision chain reconstruction."""

from decimal import Decimal

from sightglass.analyzers import ChainBuilder, build_chains, chain_id, get_chain_stats
from sightglass.analyzers.chain_builder import round_half_up
from sightglass.classifier import classify_events
from sightglass.config import ChainSettings
from sightglass.schemas.events import Action


def _ids(events):
    return [event.id for event in events]


class TestReplacementChain:
    """Test the failed-install-then-replacement session."""

    def test_single_chain(self, pdf_events):
        """The whole episode collapses into one chain."""
        (chain,) = build_chains(classify_events(pdf_events))
        assert chain.root_event.id == "evt-100"
        assert chain.chain_order == 1
        assert chain.session_id == "test-session-002"

    def test_abandoned_root_recorded(self, pdf_events):
        """The superseded root is listed as an abandoned choice."""
        (chain,) = build_chains(classify_events(pdf_events))
        assert _ids(chain.abandoned_choices) == ["evt-100"]
        assert chain.final_selection.id == "evt-103"
        assert chain.final_selection.package_name == "pdfkit"
        assert _ids(chain.sub_decisions) == ["evt-103"]

    def test_searches_in_chronological_order(self, pdf_events):
        """Both the search and the fetch belong to the chain."""
        (chain,) = build_chains(classify_events(pdf_events))
        assert _ids(chain.search_events) == ["evt-101", "evt-102"]


class TestRestApiChains:
    """Test chain grouping in the REST API session."""

    def test_rapid_installs_grouped(self, rest_api_events):
        """Installs within the follow-on window join the first chain."""
        chains = build_chains(classify_events(rest_api_events))
        assert len(chains) == 2

        first, second = chains
        assert first.root_event.id == "evt-003"
        assert _ids(first.sub_decisions) == ["evt-004", "evt-005", "evt-006", "evt-007"]
        assert first.final_selection.id == "evt-003"
        assert _ids(first.search_events) == ["evt-012"]

        assert second.root_event.id == "evt-010"
        assert _ids(second.sub_decisions) == ["evt-013"]
        assert second.search_events == []
        assert second.chain_order == 2

    def test_stats(self, rest_api_events):
        """Stats summarize search coverage and sub-decisions."""
        stats = get_chain_stats(build_chains(classify_events(rest_api_events)))
        assert stats.total_chains == 2
        assert stats.chains_with_search == 1
        assert stats.chains_with_abandoned == 0
        assert stats.average_sub_decisions == 2.5
        assert stats.no_deliberation_rate == 50


class TestChainInvariants:
    """Test properties that hold for any input."""

    def test_idempotent(self, rest_api_events, pdf_events):
        """Rebuilding from the same events gives identical chains."""
        classified = classify_events(rest_api_events + pdf_events)
        assert build_chains(classified) == build_chains(classified)

    def test_chain_ids_deterministic(self, pdf_events):
        """Chain ids derive from the session and root event."""
        (chain,) = build_chains(classify_events(pdf_events))
        assert chain.id == chain_id("test-session-002", "evt-100")
        assert chain_id("s1", "e1") != chain_id("s2", "e1")

    def test_no_event_in_two_chains(self, rest_api_events, pdf_events):
        """Every event id is claimed by at most one chain."""
        chains = build_chains(classify_events(rest_api_events + pdf_events))
        seen: set[str] = set()
        for chain in chains:
            ids = chain.event_ids()
            assert not ids & seen
            seen |= ids

    def test_non_signal_events_excluded(self, rest_api_events):
        """File reads, writes and plain commands never join a chain."""
        chains = build_chains(classify_events(rest_api_events))
        claimed = set().union(*(chain.event_ids() for chain in chains))
        assert not claimed & {"evt-001", "evt-002", "evt-008", "evt-009", "evt-011"}

    def test_chain_order_per_session(self, rest_api_events, pdf_events):
        """Each session numbers its chains from 1."""
        chains = build_chains(classify_events(pdf_events + rest_api_events))
        orders = [(chain.session_id, chain.chain_order) for chain in chains]
        assert orders == [
            ("test-session-002", 1),
            ("test-session-001", 1),
            ("test-session-001", 2),
        ]

    def test_empty(self):
        """No events, no chains, zeroed stats."""
        assert build_chains([]) == []
        stats = get_chain_stats([])
        assert stats.total_chains == 0
        assert stats.no_deliberation_rate == 0
        assert stats.average_sub_decisions == 0.0


class TestWindows:
    """Test lookback, lookahead and follow-on windows."""

    def test_no_search_means_no_deliberation(self, make_event):
        """Chains without any search give a 100% no-deliberation rate."""
        events = [
            make_event(Action.BASH, f"npm install pkg-{index}", exit_code=0, offset=index * 60)
            for index in range(4)
        ]
        chains = build_chains(classify_events(events))
        assert len(chains) == 4
        assert get_chain_stats(chains).no_deliberation_rate == 100

    def test_slow_follow_up_starts_new_chain(self, make_event):
        """A kept root only absorbs installs within the follow-on window."""
        events = [
            make_event(Action.BASH, "npm install express", exit_code=0, offset=0),
            make_event(Action.BASH, "npm install cors", exit_code=0, offset=29),
            make_event(Action.BASH, "npm install helmet", exit_code=0, offset=30),
        ]
        chains = build_chains(classify_events(events))
        assert [len(chain.sub_decisions) for chain in chains] == [1, 0]
        assert chains[1].root_event.raw == "npm install helmet"

    def test_abandoned_root_absorbs_retries(self, make_event):
        """A failed root collects every later attempt until one succeeds."""
        events = [
            make_event(Action.BASH, "npm install sharp", exit_code=1, offset=0),
            make_event(Action.BASH, "npm install jimp", exit_code=1, offset=100),
            make_event(Action.BASH, "npm install canvas", exit_code=0, offset=200),
        ]
        chains = build_chains(classify_events(events))
        assert len(chains) == 1
        (chain,) = chains
        assert chain.root_event.raw == "npm install sharp"
        assert [e.raw for e in chain.sub_decisions] == ["npm install jimp", "npm install canvas"]
        assert chain.final_selection.raw == "npm install canvas"
        assert [e.raw for e in chain.abandoned_choices] == ["npm install sharp"]

    def test_lookahead_limit(self, make_event):
        """Installs beyond the lookahead window are not sub-decisions."""
        builder = ChainBuilder(settings=ChainSettings(lookahead_window=2))
        events = [
            make_event(Action.BASH, "npm install sharp", exit_code=1),
            make_event(Action.BASH, "echo one", exit_code=0),
            make_event(Action.BASH, "echo two", exit_code=0),
            make_event(Action.BASH, "npm install jimp", exit_code=0),
        ]
        chains = builder.build(classify_events(events))
        assert len(chains) == 2
        assert chains[0].final_selection.raw == "npm install sharp"
        assert chains[0].abandoned_choices == []

    def test_lookback_collects_search(self, make_event):
        """A search shortly before a kept root is gathered."""
        events = [
            make_event(Action.WEB_SEARCH, "best image library", offset=0),
            make_event(Action.BASH, "npm install jimp", exit_code=0, offset=100),
        ]
        (chain,) = build_chains(classify_events(events))
        assert [e.raw for e in chain.search_events] == ["best image library"]


class TestRounding:
    """Test half-up rounding of statistics."""

    def test_half_rounds_up(self):
        """Halves round away from zero."""
        assert round_half_up(Decimal("0.25"), places=1) == Decimal("0.3")
        assert round_half_up(Decimal("2.5")) == Decimal("3")
        assert round_half_up(Decimal("66.666")) == Decimal("67")
