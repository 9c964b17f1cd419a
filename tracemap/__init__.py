"""TraceMap — simulated OSINT exposure scoring."""

__version__ = "1.0.0"
