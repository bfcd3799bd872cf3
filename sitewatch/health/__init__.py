"""Health subsystem — probe engine, result log, scheduler."""

from .engine import CheckOutcome, HealthChecker, Status, run_http_check
from .scheduler import Cycle, MonitorScheduler, SchedulerState
from .store import LogFileSink, ResultSink
