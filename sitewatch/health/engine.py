"""Health check engine — probes one URL and classifies the outcome.

Every probe yields exactly one CheckOutcome. Transport problems are encoded
as NETWORK_FAILURE outcomes instead of propagating to the caller.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 10.0
ERROR_MARKER = "REQERR"


# ── Models ───────────────────────────────────────────────────────────────────


class Status(str, Enum):
    SUCCESS = "success"
    HTTP_FAILURE = "http_failure"
    NETWORK_FAILURE = "network_failure"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class CheckOutcome:
    """Result of probing one domain once."""

    domain: str
    status: Status
    latency_ms: float
    status_code: int | None = None
    error: str | None = None
    timestamp: str = field(default_factory=_now_iso)

    @property
    def is_failure(self) -> bool:
        return self.status is not Status.SUCCESS

    @property
    def log_descriptor(self) -> str:
        """Status column of the result log: the HTTP code or the error marker."""
        if self.status is Status.NETWORK_FAILURE:
            return ERROR_MARKER
        return str(self.status_code)

    @property
    def alert_status(self) -> int | str:
        """What an alert reports: the HTTP code, or the error description."""
        if self.status is Status.NETWORK_FAILURE:
            return self.error or "unknown error"
        return self.status_code  # type: ignore[return-value]


def classify_response(domain: str, status_code: int, latency_ms: float) -> CheckOutcome:
    """200 is the only success; every other status code is an HTTP failure."""
    status = Status.SUCCESS if status_code == 200 else Status.HTTP_FAILURE
    return CheckOutcome(
        domain=domain, status=status,
        latency_ms=round(latency_ms, 1), status_code=status_code,
    )


# ── Check runner ─────────────────────────────────────────────────────────────


def run_http_check(
    url: str,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    transport: httpx.BaseTransport | None = None,
) -> CheckOutcome:
    """HEAD request with status code + latency. Never raises."""
    t0 = time.perf_counter()
    try:
        with httpx.Client(
            timeout=timeout_s, follow_redirects=False, verify=True, transport=transport,
        ) as client:
            resp = client.head(url)
        latency = (time.perf_counter() - t0) * 1000
        return classify_response(url, resp.status_code, latency)
    except httpx.TimeoutException:
        latency = (time.perf_counter() - t0) * 1000
        return _network_failure(url, latency, f"Timed out after {timeout_s:g}s")
    except httpx.ConnectError as e:
        latency = (time.perf_counter() - t0) * 1000
        return _network_failure(url, latency, f"Connection error: {e}")
    except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
        latency = (time.perf_counter() - t0) * 1000
        return _network_failure(url, latency, f"Invalid URL: {e}")
    except Exception as e:
        latency = (time.perf_counter() - t0) * 1000
        return _network_failure(url, latency, f"Error: {type(e).__name__}: {e}")


def _network_failure(url: str, latency: float, message: str) -> CheckOutcome:
    return CheckOutcome(
        domain=url, status=Status.NETWORK_FAILURE,
        latency_ms=round(latency, 1), error=message,
    )


class HealthChecker:
    """Probes domains with a fixed timeout (and optional injected transport)."""

    def __init__(
        self,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.timeout_s = timeout_s
        self.transport = transport

    def check(self, domain: str) -> CheckOutcome:
        outcome = run_http_check(domain, self.timeout_s, self.transport)
        logger.debug(
            "Check %s: %s %s (%dms)",
            domain, outcome.status.value, outcome.log_descriptor, outcome.latency_ms,
        )
        return outcome
