"""Inbox polling: windows, poll cycle, scheduler and service."""
from .windows import ALL, Window, range_window, tail_window, month_options, now_millis
from .cycle import PollCycle
from .scheduler import Scheduler, AsyncioScheduler
from .service import LedgerService

__all__ = [
    "ALL",
    "Window",
    "range_window",
    "tail_window",
    "month_options",
    "now_millis",
    "PollCycle",
    "Scheduler",
    "AsyncioScheduler",
    "LedgerService"
]
