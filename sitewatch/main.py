"""Entry point for the sitewatch monitor."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from sitewatch.config import ConfigError, Settings, load_settings
from sitewatch.health import Cycle, HealthChecker, LogFileSink, MonitorScheduler
from sitewatch.notifications.smtp import EmailNotifier

console = Console()
err_console = Console(stderr=True)


def build_scheduler(settings: Settings) -> MonitorScheduler:
    """Wire the checker, result log and email notifier from settings."""
    return MonitorScheduler(
        domains=settings.domain_list,
        checker=HealthChecker(timeout_s=settings.request_timeout),
        sink=LogFileSink(settings.log_file),
        notifier=EmailNotifier.from_settings(settings),
        alert_mode=settings.alert_mode,
        interval=settings.check_interval,
        console=console,
    )


def run_watch(settings: Settings) -> None:
    """Run check cycles forever (until Ctrl-C)."""
    console.print(Panel(
        f"Watching {len(settings.domain_list)} sites every {settings.check_interval}s\n"
        f"Alerts: {settings.alert_mode.value} → {settings.email_to}\n"
        f"Log: {settings.log_file}",
        title="sitewatch", style="bold green",
    ))
    scheduler = build_scheduler(settings)
    try:
        asyncio.run(scheduler.run_forever())
    except KeyboardInterrupt:
        scheduler.stop()
        console.print("[dim]Stopped.[/dim]")
    finally:
        scheduler.close()


def run_once(settings: Settings) -> None:
    """Run a single cycle and print a summary table."""
    scheduler = build_scheduler(settings)
    try:
        cycle = asyncio.run(scheduler.run_cycle())
    finally:
        scheduler.close()
    if cycle is not None:
        console.print(summary_table(cycle))


def summary_table(cycle: Cycle) -> Table:
    table = Table(title=f"Cycle {cycle.number}")
    table.add_column("Domain")
    table.add_column("Status")
    table.add_column("Latency", justify="right")
    for o in cycle.outcomes:
        style = "red" if o.is_failure else "green"
        detail = o.error if o.error else str(o.status_code)
        table.add_row(escape(o.domain), f"[{style}]{escape(detail)}[/{style}]", f"{round(o.latency_ms)}ms")
    return table


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Periodic website availability monitor")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("watch", help="Check all sites on a fixed interval (default)")
    sub.add_parser("once", help="Run one check cycle and exit")

    args = parser.parse_args(argv)

    try:
        settings = load_settings()
    except ConfigError as exc:
        err_console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        sys.exit(1)

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    if args.command == "once":
        run_once(settings)
    else:
        run_watch(settings)


if __name__ == "__main__":
    main()
