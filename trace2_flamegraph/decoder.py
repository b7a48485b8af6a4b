"""Trace2 JSON line decoder — keeps only start/exit/region events."""

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable

from trace2_flamegraph.models import (
    EVENT_TYPES,
    ProcessExit,
    ProcessStart,
    RegionEnter,
    RegionLeave,
    TraceEvent,
)

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
ONE_MS = timedelta(milliseconds=1)


def resolve_time(timestamp: str) -> int:
    """Parse an ISO-8601 trace2 timestamp into integer epoch milliseconds.

    Sub-millisecond digits are truncated. Timestamps without an offset are
    read as UTC.
    """
    text = timestamp.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return (dt - EPOCH) // ONE_MS


def decode_record(record: dict) -> TraceEvent | None:
    """Map one decoded JSON object onto an event record.

    Returns None for event kinds that take no part in the flame graph.
    Raises KeyError/ValueError/TypeError for relevant records that are malformed.
    """
    kind = record.get("event")
    if kind not in EVENT_TYPES:
        return None

    time_ms = resolve_time(record["time"])

    if kind == ProcessStart.kind:
        argv = record["argv"]
        if not isinstance(argv, list):
            raise TypeError(f"argv must be a list, got {type(argv).__name__}")
        return ProcessStart(time_ms=time_ms, argv=tuple(str(a) for a in argv))
    if kind == RegionEnter.kind:
        return RegionEnter(time_ms=time_ms)
    if kind == RegionLeave.kind:
        return RegionLeave(
            time_ms=time_ms,
            category=str(record["category"]),
            label=str(record["label"]),
        )
    return ProcessExit(time_ms=time_ms)


def decode_line(line: str, line_number: int = 0) -> TraceEvent | None:
    """Parse a single trace2 line. Returns None for blank, irrelevant or malformed lines."""
    stripped = line.strip()
    if not stripped:
        return None

    try:
        record = json.loads(stripped)
        if not isinstance(record, dict):
            raise TypeError("record is not a JSON object")
        return decode_record(record)
    except (json.JSONDecodeError, KeyError, ValueError, TypeError, AttributeError) as e:
        logger.warning("Skipping malformed line %d: %s", line_number, e)
        return None


def read_events(lines: Iterable[str]) -> list[TraceEvent]:
    """Decode a whole trace, in order, dropping everything that is not an event record."""
    events = []
    for line_number, line in enumerate(lines, start=1):
        event = decode_line(line, line_number)
        if event is not None:
            events.append(event)
    logger.debug("Decoded %d relevant events", len(events))
    return events
