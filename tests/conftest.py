"""Shared test fixtures."""

from __future__ import annotations

import io
from typing import Any

import pytest
from rich.console import Console

from sitewatch.health.engine import CheckOutcome, Status
from sitewatch.notifications import FailureAlert

ENV_VARS = (
    "DOMAINS", "SMTP_HOST", "SMTP_PORT", "SMTP_SECURE", "SMTP_TIMEOUT",
    "EMAIL_USER", "EMAIL_PASSWORD", "EMAIL_TO", "EMAIL_FROM", "SEND_GROUPED_MAIL",
    "CHECK_INTERVAL", "REQUEST_TIMEOUT", "LOG_FILE", "LOG_LEVEL",
)


def ok(domain: str, latency: float = 50.0) -> CheckOutcome:
    return CheckOutcome(domain=domain, status=Status.SUCCESS, latency_ms=latency, status_code=200)


def http_fail(domain: str, code: int = 503, latency: float = 80.0) -> CheckOutcome:
    return CheckOutcome(domain=domain, status=Status.HTTP_FAILURE, latency_ms=latency, status_code=code)


def net_fail(domain: str, error: str = "Connection error: refused", latency: float = 3.0) -> CheckOutcome:
    return CheckOutcome(domain=domain, status=Status.NETWORK_FAILURE, latency_ms=latency, error=error)


class FakeChecker:
    """Returns canned outcomes per domain; records every call."""

    def __init__(self, outcomes: dict[str, CheckOutcome]) -> None:
        self.outcomes = outcomes
        self.calls: list[str] = []

    def check(self, domain: str) -> CheckOutcome:
        self.calls.append(domain)
        return self.outcomes[domain]


class MemorySink:
    def __init__(self) -> None:
        self.records: list[tuple[str, str, float, str]] = []

    def record(self, descriptor: str, domain: str, latency_ms: float, timestamp: str) -> bool:
        self.records.append((descriptor, domain, latency_ms, timestamp))
        return True


class RecordingNotifier:
    def __init__(self) -> None:
        self.singles: list[tuple[str, Any]] = []
        self.grouped: list[list[FailureAlert]] = []

    async def notify_single(self, domain: str, status: int | str) -> bool:
        self.singles.append((domain, status))
        return True

    async def notify_grouped(self, failures: list[FailureAlert]) -> bool:
        self.grouped.append(list(failures))
        return True


@pytest.fixture
def console() -> Console:
    """Console writing into a buffer (read back via console.file.getvalue())."""
    return Console(file=io.StringIO(), width=200, color_system=None)


@pytest.fixture
def sink() -> MemorySink:
    return MemorySink()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> pytest.MonkeyPatch:
    """Environment with no sitewatch variables and no .env in the CWD."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


@pytest.fixture
def full_env(clean_env: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    clean_env.setenv("DOMAINS", "https://ok.example, https://down.example,")
    clean_env.setenv("SMTP_HOST", "smtp.example.com")
    clean_env.setenv("SMTP_PORT", "465")
    clean_env.setenv("SMTP_SECURE", "1")
    clean_env.setenv("EMAIL_USER", "alerts@example.com")
    clean_env.setenv("EMAIL_PASSWORD", "secret")
    clean_env.setenv("EMAIL_TO", "ops@example.com")
    clean_env.setenv("SEND_GROUPED_MAIL", "0")
    return clean_env
