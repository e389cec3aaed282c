"""Ledger service: owns the current state and serializes polls."""
import asyncio
from typing import Callable, Optional

from .cycle import PollCycle
from .scheduler import Scheduler
from .windows import MonthSelection, now_millis
from expensly.ledger.models import Category
from expensly.ledger.state import LedgerState, ViewState
from expensly.utils.logger import get_logger, set_category_context

logger = get_logger()

StateListener = Callable[[LedgerState, LedgerState], None]


class LedgerService:
    """Holds the LedgerState between polls.

    At most one poll runs at a time. Timer ticks that arrive while a poll is
    in flight are skipped; range queries wait their turn.
    """

    def __init__(
        self,
        cycle: PollCycle,
        scheduler: Scheduler,
        period_ms: int = 15000,
        job_name: str = "checkNewSms",
        initial_state: Optional[LedgerState] = None,
        on_change: Optional[StateListener] = None
    ):
        self.cycle = cycle
        self.scheduler = scheduler
        self.period_ms = period_ms
        self.job_name = job_name
        self.on_change = on_change
        self._state = initial_state or LedgerState.initial(now_millis())
        self._lock = asyncio.Lock()
        self._running = False

    @property
    def state(self) -> LedgerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._running

    def select_category(self, category: Category) -> LedgerState:
        set_category_context(category.value)
        self._commit(self._state.select_category(category))
        return self._state

    def show(self, view: ViewState) -> LedgerState:
        self._commit(self._state.show(view))
        return self._state

    async def fetch_range(self, month: MonthSelection) -> LedgerState:
        """Run a range query; waits for any poll already in flight."""
        async with self._lock:
            self._commit(await self.cycle.fetch_range(self._state, month))
        return self._state

    async def poll_incremental(self) -> bool:
        """Run one tail poll. Returns False when skipped."""
        if self._lock.locked():
            logger.info("Previous poll still in flight, skipping this tick")
            return False

        async with self._lock:
            self._commit(await self.cycle.poll_incremental(self._state))
        return True

    def start(self) -> None:
        """Register and schedule the tail poll."""
        self.scheduler.register(self.job_name, self._tick)
        self.scheduler.schedule(
            self.job_name,
            self.period_ms,
            allow_execution_in_foreground=True
        )
        self._running = True
        logger.info(f"Ledger service started. Polling period: {self.period_ms}ms")

    async def stop(self) -> None:
        """Cancel the scheduled poll and wait for one in flight to finish."""
        self._running = False
        self.scheduler.cancel(self.job_name)
        async with self._lock:
            pass
        self.cycle.registry.close()
        logger.info("Ledger service stopped gracefully")

    async def _tick(self) -> None:
        if not self._running:
            return
        await self.poll_incremental()

    def _commit(self, new_state: LedgerState) -> None:
        old_state = self._state
        self._state = new_state
        if self.on_change and new_state != old_state:
            self.on_change(old_state, new_state)
