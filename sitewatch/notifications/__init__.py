"""Failure alerts — message composition and the notifier contract.

Two shapes are supported:
- one alert per failing domain (AlertMode.PER_FAILURE)
- one grouped alert per cycle listing every failure (AlertMode.GROUPED)

Transports live in submodules (see ``smtp``).
"""

from __future__ import annotations

from datetime import datetime
from typing import NamedTuple, Protocol


class FailureAlert(NamedTuple):
    """One failing domain: ``status`` is the HTTP code or the error text."""

    domain: str
    status: int | str


class Notifier(Protocol):
    async def notify_single(self, domain: str, status: int | str) -> bool:
        ...

    async def notify_grouped(self, failures: list[FailureAlert]) -> bool:
        ...


# -- Composition ---------------------------------------------------------------


def describe_status(status: int | str) -> str:
    if isinstance(status, int):
        return f"Status code: {status}"
    return f"Request error: {status}"


def single_subject(domain: str, status: int | str) -> str:
    if isinstance(status, int):
        return f"ALERT: {domain} FAILED, CODE {status}"
    return f"ALERT: {domain} FAILED, REQUEST ERROR"


def grouped_subject(count: int) -> str:
    return f"ALERT: {count} site{'s' if count != 1 else ''} failed"


def _date_line(now: datetime | None) -> str:
    now = now or datetime.now()
    return f"Date: {now.strftime('%x')} - Time: {now.strftime('%X')}"


def single_body(domain: str, status: int | str, now: datetime | None = None) -> str:
    return f"{_date_line(now)}\n\nError for {domain}: {describe_status(status)}\n"


def grouped_body(failures: list[FailureAlert], now: datetime | None = None) -> str:
    lines = [_date_line(now), "", "Failed websites:", ""]
    lines += [f"Error for {f.domain}: {describe_status(f.status)}" for f in failures]
    return "\n".join(lines) + "\n"
