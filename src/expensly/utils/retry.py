"""Retry decorator utility for transport coroutines."""
import asyncio
import functools

from expensly.utils.logger import get_logger
from expensly.utils.exceptions import RetryableError

logger = get_logger()

# Define exceptions that are safe to retry
RETRYABLE_ERRORS = (
    RetryableError,
    ConnectionError,
    TimeoutError,
    asyncio.TimeoutError
)


def retry_with_backoff(max_retries=2, initial_delay=1, backoff_factor=2, retryable_exceptions=RETRYABLE_ERRORS):
    """Decorator for exponential backoff retries of a coroutine function.

    ``max_retries`` and the delays may also be read from attributes on the
    bound instance (``retry_max_retries``, ``retry_initial_delay``,
    ``retry_backoff_factor``) so a configured object can override them.
    """
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            owner = args[0] if args else None
            retries = getattr(owner, "retry_max_retries", max_retries)
            delay = getattr(owner, "retry_initial_delay", initial_delay)
            factor = getattr(owner, "retry_backoff_factor", backoff_factor)
            last_exception = None

            for attempt in range(retries + 1):
                try:
                    return await func(*args, **kwargs)
                except retryable_exceptions as e:
                    last_exception = e

                    if attempt == retries:
                        break

                    wait_time = delay * (factor ** attempt)
                    logger.warning(
                        f"Transport glitch in {func.__name__} (Attempt {attempt+1}): {e}. "
                        f"Retrying in {wait_time}s..."
                    )
                    await asyncio.sleep(wait_time)

            logger.error(f"Permanently failed {func.__name__} after {retries} retries.")
            raise last_exception
        return wrapper
    return decorator
