"""Trace event records and flame-graph rectangles."""

from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True)
class TraceEvent:
    time_ms: int  # milliseconds since the Unix epoch

    kind: ClassVar[str] = ""


@dataclass(frozen=True)
class ProcessStart(TraceEvent):
    argv: tuple[str, ...]

    kind: ClassVar[str] = "start"

    @property
    def command_line(self) -> str:
        return " ".join(self.argv)


@dataclass(frozen=True)
class RegionEnter(TraceEvent):
    kind: ClassVar[str] = "region_enter"


@dataclass(frozen=True)
class RegionLeave(TraceEvent):
    category: str
    label: str

    kind: ClassVar[str] = "region_leave"

    @property
    def region_name(self) -> str:
        return f"{self.category}:{self.label}"


@dataclass(frozen=True)
class ProcessExit(TraceEvent):
    kind: ClassVar[str] = "exit"


EVENT_TYPES: dict[str, type[TraceEvent]] = {
    cls.kind: cls for cls in (ProcessStart, RegionEnter, RegionLeave, ProcessExit)
}

OPEN_EVENTS = (ProcessStart, RegionEnter)
CLOSE_EVENTS = (RegionLeave, ProcessExit)


@dataclass
class Rectangle:
    """One flame-graph bar. Mutable only while held as the merge candidate."""

    label: str
    start: int
    end: int
    depth: int
    repeat_count: int = 1

    @property
    def duration(self) -> int:
        return self.end - self.start

    @property
    def display_label(self) -> str:
        if self.repeat_count > 1:
            return f"{self.label} ({self.repeat_count})"
        return self.label

    def merge(self, other: "Rectangle") -> None:
        """Absorb an adjacent same-label sibling: keep our start, take its end."""
        self.start = min(self.start, other.start)
        self.end = max(self.end, other.end)
        self.repeat_count += other.repeat_count
