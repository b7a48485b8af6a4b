"""Error types raised while turning a trace into a flame graph."""


class TraceError(Exception):
    """Base class for all trace2-flamegraph errors."""


class EmptyTraceError(TraceError):
    """The trace holds no start/exit/region events to draw."""

    def __init__(self, message: str = "Trace contains no start, exit or region events"):
        super().__init__(message)


class DegenerateDepthError(TraceError):
    """Depth shading was requested against a graph with no nesting."""
