"""Shared test fixtures for sightglass analysis."""

import itertools
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from sightglass.schemas.events import Action, Agent, RawEvent

BASE_TIME = datetime(2026, 2, 20, 14, 30, tzinfo=UTC)


def _event(
    event_id: str,
    session_id: str,
    timestamp: str,
    action: Action,
    raw: str,
    result: str | None = None,
    exit_code: int | None = None,
) -> RawEvent:
    return RawEvent(
        id=event_id,
        session_id=session_id,
        timestamp=timestamp,
        agent=Agent.CLAUDE_CODE,
        action=action,
        raw=raw,
        result=result,
        exit_code=exit_code,
    )


@pytest.fixture
def rest_api_events() -> list[RawEvent]:
    """Session building a REST API with auth, dominated by training recall."""
    sid = "test-session-001"
    return [
        _event(
            "evt-001", sid, "2026-02-20T14:30:00.000Z", Action.FILE_READ, "package.json",
            '{"name": "my-api", "version": "1.0.0", "dependencies": {}}',
        ),
        _event(
            "evt-002", sid, "2026-02-20T14:30:01.000Z", Action.FILE_READ, "CLAUDE.md",
            "# Project Guidelines\n\nUse TypeScript for all code.\nUse PostgreSQL for the database.",
        ),
        _event(
            "evt-003", sid, "2026-02-20T14:30:05.000Z", Action.BASH,
            "npm install express @types/express", "added 64 packages in 3s", 0,
        ),
        _event(
            "evt-004", sid, "2026-02-20T14:30:10.000Z", Action.BASH,
            "npm install jsonwebtoken @types/jsonwebtoken bcrypt @types/bcrypt",
            "added 12 packages in 2s", 0,
        ),
        _event(
            "evt-005", sid, "2026-02-20T14:30:15.000Z", Action.BASH,
            "npm install pg @types/pg", "added 8 packages in 1s", 0,
        ),
        _event(
            "evt-006", sid, "2026-02-20T14:30:18.000Z", Action.BASH,
            "npm install express-rate-limit", "added 1 package in 0.5s", 0,
        ),
        _event(
            "evt-007", sid, "2026-02-20T14:30:22.000Z", Action.BASH,
            "npm install cors helmet dotenv", "added 5 packages in 1s", 0,
        ),
        _event(
            "evt-008", sid, "2026-02-20T14:30:30.000Z", Action.FILE_WRITE,
            "src/index.ts", "File written successfully",
        ),
        _event(
            "evt-009", sid, "2026-02-20T14:31:00.000Z", Action.BASH,
            "npx ts-node src/index.ts", "Error: Cannot find module 'ts-node'", 1,
        ),
        _event(
            "evt-010", sid, "2026-02-20T14:31:05.000Z", Action.BASH,
            "npm install -D ts-node typescript", "added 2 packages in 1s", 0,
        ),
        _event(
            "evt-011", sid, "2026-02-20T14:31:15.000Z", Action.BASH,
            "npx ts-node src/index.ts", "Error: Cannot find module 'express-validator'", 1,
        ),
        _event(
            "evt-012", sid, "2026-02-20T14:31:18.000Z", Action.WEB_SEARCH,
            "express request validation middleware typescript",
            "Results: express-validator, joi, zod, yup, class-validator...",
        ),
        _event(
            "evt-013", sid, "2026-02-20T14:31:25.000Z", Action.BASH,
            "npm install zod", "added 1 package in 0.5s", 0,
        ),
    ]


@pytest.fixture
def pdf_events() -> list[RawEvent]:
    """Session where a failed install is replaced after a search."""
    sid = "test-session-002"
    return [
        _event(
            "evt-100", sid, "2026-02-20T15:45:00.000Z", Action.BASH,
            "npm install puppeteer",
            "Error: Failed to download Chromium. ENOSPC: no space on device", 1,
        ),
        _event(
            "evt-101", sid, "2026-02-20T15:45:10.000Z", Action.WEB_SEARCH,
            "lightweight PDF generation nodejs without puppeteer",
            "Results: pdfkit, pdf-lib, jspdf, puppeteer-core...",
        ),
        _event(
            "evt-102", sid, "2026-02-20T15:45:15.000Z", Action.WEB_FETCH,
            "https://github.com/foliojs/pdfkit",
            "Stars: 9.8k, Last commit: 2 weeks ago...",
        ),
        _event(
            "evt-103", sid, "2026-02-20T15:45:22.000Z", Action.BASH,
            "npm install pdfkit", "added 4 packages in 1s", 0,
        ),
    ]


@pytest.fixture
def make_event():
    """Factory for events spaced one second apart in a single session.

    Pass ``offset`` (seconds) to control the timestamp explicitly.
    """
    counter = itertools.count(1)

    def factory(
        action: Action,
        raw: str,
        result: str | None = None,
        exit_code: int | None = None,
        offset: float | None = None,
        session_id: str = "session-a",
    ) -> RawEvent:
        index = next(counter)
        seconds = index if offset is None else offset
        return RawEvent(
            id=f"{session_id}-{index:03d}",
            session_id=session_id,
            timestamp=(BASE_TIME + timedelta(seconds=seconds)).isoformat(),
            action=action,
            raw=raw,
            result=result,
            exit_code=exit_code,
        )

    return factory


@pytest.fixture
def events_jsonl(tmp_path: Path, rest_api_events, pdf_events) -> Path:
    """Both sample sessions written as JSONL, one event per line."""
    path = tmp_path / "events.jsonl"
    lines = [event.model_dump_json() for event in rest_api_events + pdf_events]
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def knowledge_yaml(tmp_path: Path) -> Path:
    """Knowledge base overriding known issues only."""
    path = tmp_path / "knowledge.yaml"
    path.write_text(
        "known_issues:\n"
        "  left-pad:\n"
        "    type: unmaintained\n"
        "    severity: critical\n"
        "    detail: Unpublished from the registry in 2016.\n"
        "    suggested_alternative: String.prototype.padStart\n"
    )
    return path
