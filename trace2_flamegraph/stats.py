"""Extraction summary — event counts, depth and skip statistics."""

import json
from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Iterable

from trace2_flamegraph.extractor import Extraction
from trace2_flamegraph.models import TraceEvent


@dataclass
class TraceSummary:
    total_events: int = 0
    event_counts: dict[str, int] = field(default_factory=dict)
    rectangles: int = 0
    merged_spans: int = 0
    matched: int = 0
    excluded: int = 0
    mismatched: int = 0
    max_depth: int = 0
    max_nesting: int = 0
    total_duration_ms: int = 0


def summarize(extraction: Extraction, events: Iterable[TraceEvent]) -> TraceSummary:
    """Combine the decoded events and their extraction into one summary."""
    kind_counter = Counter(event.kind for event in events)
    return TraceSummary(
        total_events=sum(kind_counter.values()),
        event_counts=dict(kind_counter.most_common()),
        rectangles=len(extraction.rectangles),
        merged_spans=sum(r.repeat_count - 1 for r in extraction.rectangles),
        matched=extraction.matched,
        excluded=extraction.excluded,
        mismatched=extraction.mismatched,
        max_depth=extraction.max_depth,
        max_nesting=extraction.max_nesting,
        total_duration_ms=extraction.total_duration,
    )


def format_summary_text(summary: TraceSummary) -> str:
    """Human-readable summary."""
    lines = []
    lines.append(f"Total events: {summary.total_events}")
    lines.append(f"Duration: {summary.total_duration_ms}ms")
    lines.append("")

    lines.append("Event counts:")
    for kind, count in summary.event_counts.items():
        lines.append(f"  {kind:14s} {count}")
    lines.append("")

    lines.append(f"Rectangles: {summary.rectangles} ({summary.merged_spans} merged spans)")
    lines.append(f"Matched spans: {summary.matched}")
    lines.append(f"Excluded helpers: {summary.excluded}")
    lines.append(f"Mismatched closes: {summary.mismatched}")
    lines.append(f"Max depth: {summary.max_depth}")
    lines.append(f"Max nesting: {summary.max_nesting}")

    return "\n".join(lines)


def format_summary_json(summary: TraceSummary) -> str:
    """JSON summary output."""
    return json.dumps(asdict(summary), indent=2)
