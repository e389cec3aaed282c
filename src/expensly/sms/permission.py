"""Permission gate for inbox access."""
import asyncio
import threading
from typing import Protocol

from expensly.utils.logger import get_logger

logger = get_logger()


class PermissionGate(Protocol):
    async def request_authorization(self) -> bool:
        ...


class StaticPermissionGate:
    """Answers every request with a fixed decision."""

    def __init__(self, granted: bool = True):
        self.granted = granted

    async def request_authorization(self) -> bool:
        return self.granted


class PromptPermissionGate:
    """Asks the person at the terminal once and remembers a positive answer.

    The answer is read on a daemon thread rather than the default executor,
    so a prompt abandoned by a timeout does not keep the process alive.
    """

    PROMPT = "Expensly needs access to your SMS to read transaction messages. Allow? [y/N] "

    def __init__(self, input_func=input):
        self.input_func = input_func
        self._granted = False

    async def request_authorization(self) -> bool:
        if self._granted:
            return True

        try:
            answer = await self._ask()
        except EOFError:
            logger.warning("No terminal available to ask for SMS permission")
            return False

        self._granted = answer.strip().lower() in ("y", "yes")
        if not self._granted:
            logger.info("SMS permission denied")
        return self._granted

    async def _ask(self) -> str:
        loop = asyncio.get_running_loop()
        answer = loop.create_future()

        def settle(result, error):
            if answer.done():
                return
            if error is not None:
                answer.set_exception(error)
            else:
                answer.set_result(result)

        def read():
            result, error = None, None
            try:
                result = self.input_func(self.PROMPT)
            except Exception as e:
                error = e
            try:
                loop.call_soon_threadsafe(settle, result, error)
            except RuntimeError:
                # Loop already closed; nobody is waiting for the answer.
                pass

        threading.Thread(target=read, name="expensly-permission-prompt", daemon=True).start()
        return await answer
