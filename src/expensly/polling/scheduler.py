"""Periodic job scheduling on the asyncio event loop."""
import asyncio
import inspect
from typing import Any, Callable, Dict, Protocol

from expensly.utils.logger import get_logger
from expensly.utils.exceptions import ValidationError

logger = get_logger()


class Scheduler(Protocol):
    def register(self, name: str, callback: Callable[[], Any]) -> None:
        ...

    def schedule(self, name: str, period_ms: int, **options) -> None:
        ...

    def cancel(self, name: str) -> None:
        ...


class AsyncioScheduler:
    """Runs registered callbacks at a fixed period.

    A job that is cancelled while its callback is running lets the callback
    finish; only further runs are stopped.
    """

    def __init__(self):
        self._callbacks: Dict[str, Callable[[], Any]] = {}
        self._tasks: Dict[str, asyncio.Task] = {}

    def register(self, name: str, callback: Callable[[], Any]) -> None:
        self._callbacks[name] = callback

    def schedule(self, name: str, period_ms: int, run_immediately: bool = False, **options) -> None:
        """Run the job every ``period_ms``.

        Extra options such as ``allow_execution_in_foreground`` are accepted
        for interface compatibility; on the event loop every job runs in the
        foreground.
        """
        if name not in self._callbacks:
            raise ValidationError(f"No job registered under {name!r}")
        if period_ms <= 0:
            raise ValidationError(f"Period must be positive, got {period_ms}ms")

        self.cancel(name)
        self._tasks[name] = asyncio.ensure_future(self._run(name, period_ms / 1000, run_immediately))
        logger.info(f"Scheduled job {name} every {period_ms}ms")

    def cancel(self, name: str) -> None:
        task = self._tasks.pop(name, None)
        if task is not None and not task.done():
            task.cancel()
            logger.info(f"Cancelled job {name}")

    def is_scheduled(self, name: str) -> bool:
        task = self._tasks.get(name)
        return task is not None and not task.done()

    async def _run(self, name: str, period_seconds: float, run_immediately: bool) -> None:
        if not run_immediately:
            await asyncio.sleep(period_seconds)

        while True:
            run = asyncio.ensure_future(self._invoke(name))
            await asyncio.shield(run)
            await asyncio.sleep(period_seconds)

    async def _invoke(self, name: str) -> None:
        try:
            result = self._callbacks[name]()
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"Error in scheduled job {name}: {e}")
