"""
Retry logic with exponential backoff for the fetch pipeline.

The backoff wait is an asyncio sleep, so cancelling the task that runs a
retried call also cancels any pending retry timer.
"""

import asyncio
import functools
import random
from typing import Awaitable, Callable, Optional, Tuple, Type


class RetryError(Exception):
    """Raised when all retry attempts are exhausted."""

    def __init__(self, message: str, attempts: int, last_exception: BaseException):
        super().__init__(message)
        self.attempts = attempts
        self.last_exception = last_exception


def backoff_delay(
    retry: int,
    base_delay: float = 1.0,
    exponential_base: float = 2.0,
    max_delay: Optional[float] = None,
) -> float:
    """
    Delay before retry number `retry` (1-based): base * exp_base^(retry - 1).

    With the defaults this gives 1s, 2s, 4s, ...
    """
    delay = base_delay * (exponential_base ** (retry - 1))
    if max_delay is not None:
        delay = min(delay, max_delay)
    return delay


def exponential_backoff(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: Optional[float] = None,
    exponential_base: float = 2.0,
    jitter: float = 0.0,
    exceptions: Tuple[Type[BaseException], ...] = (Exception,),
    on_retry: Optional[Callable] = None,
    sleep: Optional[Callable[[float], Awaitable]] = None,
):
    """
    Decorator for retrying coroutine functions with exponential backoff.

    Args:
        max_retries: Maximum number of retry attempts (0 = no retries)
        base_delay: Delay before the first retry in seconds
        max_delay: Optional cap on any single delay
        exponential_base: Growth factor between consecutive delays
        jitter: Up to this fraction of the delay is added at random
        exceptions: Tuple of exceptions to catch and retry
        on_retry: Optional callback function(attempt, exception, delay)
        sleep: Awaitable sleep used between attempts (default asyncio.sleep)

    Example:
        @exponential_backoff(max_retries=3, base_delay=1.0)
        async def fetch_data():
            return await client.get()

    Raises:
        ValueError: If max_retries is negative
    """
    if max_retries < 0:
        raise ValueError(f"max_retries must be >= 0, got {max_retries}")

    def decorator(func: Callable[..., Awaitable]) -> Callable[..., Awaitable]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            pause = sleep or asyncio.sleep

            for attempt in range(max_retries + 1):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    if attempt >= max_retries:
                        raise RetryError(
                            f"Failed after {max_retries + 1} attempts: {e}",
                            attempts=attempt + 1,
                            last_exception=e,
                        ) from e

                    delay = backoff_delay(attempt + 1, base_delay, exponential_base, max_delay)
                    if jitter:
                        delay += random.uniform(0, delay * jitter)

                    if on_retry:
                        on_retry(attempt + 1, e, delay)

                    await pause(delay)

        return wrapper
    return decorator
