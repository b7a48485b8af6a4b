"""trace2-flamegraph — render Git trace2 event logs as flame-graph SVGs."""

__version__ = "0.1.0"
