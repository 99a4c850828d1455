"""Load normalized agent events from JSON or JSONL files."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator
from datetime import UTC, datetime
from pathlib import Path

from pydantic import ValidationError

from .exceptions import EventLoadError
from .schemas.events import RawEvent

logger = logging.getLogger(__name__)

_MAX_LOGGED_SKIPS = 10

# Collectors that emit camelCase keys.
_FIELD_ALIASES = {
    "sessionId": "session_id",
    "exitCode": "exit_code",
}


def _normalize_keys(record: dict) -> dict:
    return {_FIELD_ALIASES.get(key, key): value for key, value in record.items()}


def _read_jsonl_records(file_path: Path) -> Iterator[tuple[int, dict | None]]:
    """Yield (line number, record) pairs; record is None for unusable lines."""
    with open(file_path, encoding="utf-8") as f:
        for line_num, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                payload = json.loads(line)
            except json.JSONDecodeError as exc:
                logger.debug("Malformed JSON at %s:%d: %s", file_path.name, line_num, exc)
                yield line_num, None
                continue
            yield line_num, payload if isinstance(payload, dict) else None


def _read_json_records(file_path: Path) -> Iterator[tuple[int, dict | None]]:
    """Yield (index, record) pairs from a JSON list or ``{"events": [...]}``."""
    try:
        with open(file_path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise EventLoadError(f"{file_path} is not valid JSON: {exc}") from exc

    if isinstance(data, dict):
        data = data.get("events", [data])
    if not isinstance(data, list):
        raise EventLoadError(f"{file_path} holds neither an event list nor an object")

    for index, entry in enumerate(data, start=1):
        yield index, entry if isinstance(entry, dict) else None


def _sort_key(event: RawEvent) -> tuple[int, datetime]:
    occurred_at = event.occurred_at
    if occurred_at is None:
        return 1, datetime.min.replace(tzinfo=UTC)
    return 0, occurred_at


def group_by_session(events: Iterable[RawEvent]) -> dict[str, list[RawEvent]]:
    """Group events by session id, sessions in first-seen order."""
    sessions: dict[str, list[RawEvent]] = {}
    for event in events:
        sessions.setdefault(event.session_id, []).append(event)
    return sessions


def load_events(path: str | Path) -> list[RawEvent]:
    """Load and validate events from a ``.jsonl`` or ``.json`` file.

    Malformed records are logged as warnings and skipped. Events come back
    grouped by session (first-seen order) and stably sorted by timestamp
    within each session; unparseable timestamps sort last.

    Args:
        path: Events file

    Returns:
        Validated RawEvents

    Raises:
        EventLoadError: If the file is missing or unreadable, or a ``.json``
            file holds no usable JSON structure
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise EventLoadError(f"Events file not found: {file_path}")

    reader = _read_jsonl_records if file_path.suffix == ".jsonl" else _read_json_records
    events: list[RawEvent] = []
    skipped = 0

    try:
        for position, record in reader(file_path):
            if record is None:
                skipped += 1
                if skipped <= _MAX_LOGGED_SKIPS:
                    logger.warning("Unreadable record at %s:%d, skipping", file_path.name, position)
                continue
            try:
                events.append(RawEvent.model_validate(_normalize_keys(record)))
            except ValidationError as exc:
                skipped += 1
                if skipped <= _MAX_LOGGED_SKIPS:
                    logger.warning(
                        "Invalid event at %s:%d (%d errors), skipping",
                        file_path.name,
                        position,
                        exc.error_count(),
                    )
    except (OSError, UnicodeDecodeError) as exc:
        raise EventLoadError(f"Cannot read events file {file_path}: {exc}") from exc

    if skipped > _MAX_LOGGED_SKIPS:
        logger.warning(
            "%s: skipped %d total malformed records (showed first %d warnings)",
            file_path.name,
            skipped,
            _MAX_LOGGED_SKIPS,
        )
    elif skipped:
        logger.warning("%s: skipped %d malformed records", file_path.name, skipped)

    logger.debug("Loaded %d events from %s", len(events), file_path)
    return [
        event
        for session_events in group_by_session(events).values()
        for event in sorted(session_events, key=_sort_key)
    ]
