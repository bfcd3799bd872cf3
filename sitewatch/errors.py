"""Error taxonomy for the monitor.

Only ``ConfigError`` (see ``sitewatch.config``) is fatal. Everything here is
caught, logged and swallowed by the component that raised it or by the
scheduler.
"""

from __future__ import annotations


class MonitorError(Exception):
    """Base class for recoverable monitor errors."""


class SinkError(MonitorError):
    """Raised when an outcome cannot be appended to the result log."""


class NotifierError(MonitorError):
    """Raised when an alert cannot be delivered."""


class CycleError(MonitorError):
    """Raised when a cycle's joined outcomes are inconsistent."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Cycle produced {actual} outcomes for {expected} domains")
