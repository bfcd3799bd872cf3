"""Monitor scheduler — fixed-interval check cycles with a 1-second countdown.

One tick source drives both the countdown display and cycle triggering.
A cycle fans probes out to a thread pool, waits for every probe to settle,
then logs each outcome and routes failures to the notifier.
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from rich.console import Console
from rich.markup import escape

from ..config import AlertMode
from ..errors import CycleError
from ..notifications import FailureAlert, Notifier
from .engine import CheckOutcome, Status
from .store import ResultSink

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_S = 60


class Checker(Protocol):
    def check(self, domain: str) -> CheckOutcome:
        ...


class SchedulerState(str, Enum):
    WAITING = "waiting"
    RUNNING = "running"


@dataclass
class Cycle:
    """One pass over every configured domain."""

    number: int
    outcomes: list[CheckOutcome] = field(default_factory=list)
    failures: list[CheckOutcome] = field(default_factory=list)

    @property
    def alerts(self) -> list[FailureAlert]:
        return [FailureAlert(o.domain, o.alert_status) for o in self.failures]


class MonitorScheduler:
    """Owns the countdown and runs check cycles for a fixed set of domains.

    State is only mutated from ``run_cycle`` and ``tick``, both awaited on
    the event loop, so countdown and triggering never race.
    """

    def __init__(
        self,
        domains: list[str],
        checker: Checker,
        sink: ResultSink,
        notifier: Notifier,
        alert_mode: AlertMode = AlertMode.PER_FAILURE,
        interval: int = DEFAULT_INTERVAL_S,
        console: Console | None = None,
        tick_seconds: float = 1.0,
    ) -> None:
        if interval < 1:
            raise ValueError("interval must be at least 1 second")
        self.domains = tuple(domains)
        self.checker = checker
        self.sink = sink
        self.notifier = notifier
        self.alert_mode = alert_mode
        self.interval = interval
        self.remaining = interval
        self.state = SchedulerState.WAITING
        self.cycles_run = 0
        self.console = console or Console()
        self.tick_seconds = tick_seconds
        # One worker per domain so no probe queues behind another
        self._executor = ThreadPoolExecutor(
            max_workers=max(len(self.domains), 1), thread_name_prefix="probe",
        )
        self._running = False

    # -- Loop ------------------------------------------------------------------

    async def run_forever(self) -> None:
        """Run the first cycle immediately, then tick until stopped."""
        self._running = True
        logger.info(
            "Monitor started: %d domains, every %ds, alerts %s",
            len(self.domains), self.interval, self.alert_mode.value,
        )
        try:
            await self.run_cycle()
            while self._running:
                await asyncio.sleep(self.tick_seconds)
                if not self._running:
                    break
                await self.tick()
        finally:
            self._running = False

    def stop(self) -> None:
        self._running = False

    def close(self) -> None:
        self._executor.shutdown(wait=False)

    async def tick(self) -> Cycle | None:
        """Advance the countdown by one step, running a cycle when it hits zero."""
        if self.state is SchedulerState.RUNNING:
            return None
        self.remaining -= 1
        if self.remaining > 0:
            self.console.print(f"Next check in {self.remaining} seconds")
            return None
        return await self.run_cycle()

    # -- Cycle -----------------------------------------------------------------

    async def run_cycle(self) -> Cycle | None:
        """Run one full cycle. Never raises; always resets the countdown."""
        self.state = SchedulerState.RUNNING
        self.cycles_run += 1
        try:
            return await self._execute_cycle(self.cycles_run)
        except Exception:
            logger.exception("Cycle %d failed", self.cycles_run)
            self.console.print(f"[red]Error:[/red] cycle {self.cycles_run} failed, see log")
            return None
        finally:
            self.remaining = self.interval
            self.state = SchedulerState.WAITING

    async def _execute_cycle(self, number: int) -> Cycle:
        cycle = Cycle(number=number)
        outcomes = await self._probe_all()
        if len(outcomes) != len(self.domains):
            raise CycleError(len(self.domains), len(outcomes))

        pending: list[asyncio.Task[bool]] = []
        for outcome in outcomes:
            cycle.outcomes.append(outcome)
            self._display(outcome)
            self._record(outcome)
            if not outcome.is_failure:
                continue
            cycle.failures.append(outcome)
            if self.alert_mode is AlertMode.PER_FAILURE:
                pending.append(asyncio.create_task(
                    self._notify_single(outcome), name=f"alert-{outcome.domain}",
                ))

        if self.alert_mode is AlertMode.GROUPED and cycle.failures:
            pending.append(asyncio.create_task(
                self._notify_grouped(cycle.alerts), name=f"alert-cycle-{number}",
            ))

        if pending:
            await asyncio.gather(*pending)

        logger.info(
            "Cycle %d done: %d/%d online",
            number, len(cycle.outcomes) - len(cycle.failures), len(cycle.outcomes),
        )
        return cycle

    async def _probe_all(self) -> list[CheckOutcome]:
        """Fan out one probe per domain and wait for all of them to settle."""
        loop = asyncio.get_running_loop()
        futures = [
            loop.run_in_executor(self._executor, self.checker.check, domain)
            for domain in self.domains
        ]
        settled = await asyncio.gather(*futures, return_exceptions=True)

        outcomes: list[CheckOutcome] = []
        for domain, result in zip(self.domains, settled):
            if isinstance(result, BaseException):
                # Checkers shouldn't raise, but the outcome must not be lost
                logger.error("Checker raised for %s: %r", domain, result)
                result = CheckOutcome(
                    domain=domain, status=Status.NETWORK_FAILURE, latency_ms=0,
                    error=f"Error: {type(result).__name__}: {result}",
                )
            outcomes.append(result)
        return outcomes

    # -- Side effects ------------------------------------------------------------

    def _display(self, outcome: CheckOutcome) -> None:
        domain = escape(outcome.domain)
        if outcome.status is Status.SUCCESS:
            self.console.print(
                f"[green]{domain} is online.[/green] Status code: {outcome.status_code}"
            )
        elif outcome.status is Status.HTTP_FAILURE:
            self.console.print(
                f"[red]Error for {domain}:[/red] Status code: {outcome.status_code}"
            )
        else:
            self.console.print(
                f"[red]Error for {domain}:[/red] {escape(outcome.error or '')}"
            )

    def _record(self, outcome: CheckOutcome) -> None:
        try:
            ok = self.sink.record(
                outcome.log_descriptor, outcome.domain, outcome.latency_ms, outcome.timestamp,
            )
        except Exception:
            logger.exception("Result sink error for %s", outcome.domain)
            return
        if not ok:
            logger.warning("Result for %s was not logged", outcome.domain)

    async def _notify_single(self, outcome: CheckOutcome) -> bool:
        try:
            return await self.notifier.notify_single(outcome.domain, outcome.alert_status)
        except Exception:
            logger.exception("Notifier error for %s", outcome.domain)
            return False

    async def _notify_grouped(self, alerts: list[FailureAlert]) -> bool:
        try:
            return await self.notifier.notify_grouped(alerts)
        except Exception:
            logger.exception("Notifier error for grouped alert (%d sites)", len(alerts))
            return False
