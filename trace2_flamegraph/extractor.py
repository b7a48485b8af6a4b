"""Stack reconstruction and region extraction.

Walks the time-ordered event list once with an explicit stack of open frames,
pairs every close event with the frame it pops, and turns each matched pair
into a depth-assigned Rectangle. Consecutive same-label rectangles at one
depth collapse into a single wider bar with a repeat count.

Close events that cannot be paired with the frame they pop are skipped, as
are the spans of long-lived helper processes, whose exit can land far
outside stack order.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

from trace2_flamegraph.config import DEFAULT_CONFIG, Config
from trace2_flamegraph.errors import EmptyTraceError
from trace2_flamegraph.models import (
    CLOSE_EVENTS,
    OPEN_EVENTS,
    ProcessExit,
    ProcessStart,
    Rectangle,
    RegionLeave,
    TraceEvent,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Matched:
    rectangle: Rectangle


@dataclass(frozen=True)
class ExcludedDiscard:
    frame: ProcessStart


@dataclass(frozen=True)
class MismatchDiscard:
    frame: TraceEvent | None
    event: TraceEvent


CloseResult = Matched | ExcludedDiscard | MismatchDiscard


@dataclass(frozen=True)
class Extraction:
    rectangles: tuple[Rectangle, ...]
    max_depth: int
    total_duration: int
    start_time: int
    max_nesting: int
    matched: int = 0
    excluded: int = 0
    mismatched: int = 0


def is_helper_process(argv: Sequence[str], marker: str) -> bool:
    """True if the first or second argument contains the helper marker."""
    if not argv:
        return False
    if marker in argv[0]:
        return True
    return len(argv) > 1 and marker in argv[1]


def max_concurrent_nesting(events: Sequence[TraceEvent]) -> int:
    """Largest stack size reached when replaying only the open events."""
    pushed = 0
    nesting = 0
    for event in events:
        if isinstance(event, OPEN_EVENTS):
            pushed += 1
            nesting = max(nesting, pushed)
    return nesting


def close_frame(
    frame: TraceEvent | None,
    event: TraceEvent,
    depth: int,
    marker: str,
) -> CloseResult:
    """Decide what a close event does to the frame it just popped.

    *depth* is the depth before closing; a matched rectangle sits one below it.
    """
    if frame is None:
        return MismatchDiscard(frame=None, event=event)

    if isinstance(frame, ProcessStart) and is_helper_process(frame.argv, marker):
        return ExcludedDiscard(frame=frame)

    if isinstance(event, RegionLeave):
        label = event.region_name
    elif isinstance(event, ProcessExit) and isinstance(frame, ProcessStart):
        label = frame.command_line
    else:
        return MismatchDiscard(frame=frame, event=event)

    return Matched(Rectangle(
        label=label,
        start=frame.time_ms,
        end=event.time_ms,
        depth=depth - 1,
    ))


class _MergeBuffer:
    """Holds the latest unflushed rectangle per depth."""

    def __init__(self, size: int):
        self._held: list[Rectangle | None] = [None] * size
        self.flushed: list[Rectangle] = []

    def add(self, rect: Rectangle) -> None:
        if rect.depth >= len(self._held):
            self._held.extend([None] * (rect.depth + 1 - len(self._held)))

        held = self._held[rect.depth]
        if held is None:
            self._held[rect.depth] = rect
        elif held.label != rect.label:
            self.flushed.append(held)
            self._held[rect.depth] = rect
        else:
            held.merge(rect)

    def flush(self) -> list[Rectangle]:
        """Emit everything still held, lowest depth first."""
        for depth, held in enumerate(self._held):
            if held is not None:
                self.flushed.append(held)
                self._held[depth] = None
        return self.flushed


def extract_regions(events: Sequence[TraceEvent], config: Config = DEFAULT_CONFIG) -> Extraction:
    """Reconstruct the stack from *events* and return the flame-graph rectangles.

    Raises EmptyTraceError if *events* is empty.
    """
    if not events:
        raise EmptyTraceError()

    start_time = events[0].time_ms
    total_duration = events[-1].time_ms - start_time
    nesting = max_concurrent_nesting(events)

    stack: list[TraceEvent] = []
    depth = 0
    max_depth = 0
    buffer = _MergeBuffer(nesting + 1)
    matched = excluded = mismatched = 0

    for event in events:
        if isinstance(event, ProcessStart):
            if not is_helper_process(event.argv, config.helper_marker):
                depth += 1
            stack.append(event)
            continue

        if isinstance(event, OPEN_EVENTS):
            depth += 1
            stack.append(event)
            continue

        if not isinstance(event, CLOSE_EVENTS):
            continue

        frame = stack.pop() if stack else None
        result = close_frame(frame, event, depth, config.helper_marker)

        if isinstance(result, Matched):
            matched += 1
            depth = result.rectangle.depth
            max_depth = max(max_depth, depth)
            buffer.add(result.rectangle)
        elif isinstance(result, ExcludedDiscard):
            excluded += 1
            logger.debug("Ignoring helper process: %s", result.frame.command_line)
        else:
            mismatched += 1
            logger.debug(
                "Skipping %s at %d: cannot close %s",
                event.kind, event.time_ms,
                result.frame.kind if result.frame is not None else "empty stack",
            )

    rectangles = tuple(buffer.flush())
    logger.info(
        "Extracted %d rectangles from %d events (max depth %d, %d excluded, %d mismatched)",
        len(rectangles), len(events), max_depth, excluded, mismatched,
    )

    return Extraction(
        rectangles=rectangles,
        max_depth=max_depth,
        total_duration=total_duration,
        start_time=start_time,
        max_nesting=nesting,
        matched=matched,
        excluded=excluded,
        mismatched=mismatched,
    )
