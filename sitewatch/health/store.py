"""Append-only result log.

One line per outcome: ``<status-or-REQERR>,<domain>,<ISO-8601>,<latency>ms``.
The file is never truncated or rotated here.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import NamedTuple, Protocol

from ..errors import SinkError

logger = logging.getLogger(__name__)

DEFAULT_LOG_PATH = Path("watch-sites.log")


class ResultSink(Protocol):
    def record(self, descriptor: str, domain: str, latency_ms: float, timestamp: str) -> bool:
        ...


class LogEntry(NamedTuple):
    descriptor: str
    domain: str
    timestamp: str
    latency_ms: int


def format_log_line(descriptor: str, domain: str, latency_ms: float, timestamp: str) -> str:
    return f"{descriptor},{domain},{timestamp},{round(latency_ms)}ms\n"


def parse_log_line(line: str) -> LogEntry:
    """Split a log line back into its fields.

    Parses from the right so a comma inside the domain survives.
    """
    head, timestamp, latency = line.rstrip("\n").rsplit(",", 2)
    descriptor, domain = head.split(",", 1)
    if not latency.endswith("ms"):
        raise ValueError(f"Malformed latency field: {latency!r}")
    return LogEntry(descriptor, domain, timestamp, int(latency[:-2]))


class LogFileSink:
    """Appends outcomes to a plain-text log file."""

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path else DEFAULT_LOG_PATH
        self._lock = threading.Lock()

    def record(self, descriptor: str, domain: str, latency_ms: float, timestamp: str) -> bool:
        """Append one line. Returns False (and logs) if the write fails."""
        try:
            self._append(format_log_line(descriptor, domain, latency_ms, timestamp))
        except SinkError as exc:
            logger.warning("Error writing to log file: %s", exc)
            return False
        logger.debug("Result logged for %s", domain)
        return True

    def _append(self, line: str) -> None:
        try:
            with self._lock:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with self.path.open("a", encoding="utf-8") as fh:
                    fh.write(line)
        except OSError as exc:
            raise SinkError(f"{self.path}: {exc}") from exc

    def read_entries(self) -> list[LogEntry]:
        if not self.path.exists():
            return []
        with self.path.open(encoding="utf-8") as fh:
            return [parse_log_line(line) for line in fh if line.strip()]
