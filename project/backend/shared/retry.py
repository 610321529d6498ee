"""
Retry utilities.

Exponential backoff for transient failures.
"""

import asyncio
import functools
from typing import Awaitable, Callable, Tuple, Type, TypeVar

from shared.errors import RetryableError
from shared.logging import get_logger

logger = get_logger("retry")

T = TypeVar("T")


def retry_with_backoff(
    max_attempts: int = 3,
    base_delay: float = 1.0,
    retry_on: Tuple[Type[BaseException], ...] = (RetryableError,)
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Retry an async function with exponential backoff.

    Delay before attempt N+1 is base_delay * 2**(N-1). The last error is re-raised.

    Args:
        max_attempts: Total attempts including the first call
        base_delay: Delay in seconds before the first retry
        retry_on: Exception types that trigger a retry

    Returns:
        Decorator
    """
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            for attempt in range(max_attempts):
                try:
                    return await func(*args, **kwargs)
                except retry_on as e:
                    if attempt == max_attempts - 1:
                        raise
                    delay = base_delay * (2 ** attempt)
                    logger.warning(
                        f"{func.__name__} failed, retrying in {delay:.1f}s",
                        extra={"attempt": attempt + 1, "max_attempts": max_attempts, "error": str(e)}
                    )
                    await asyncio.sleep(delay)
            raise RuntimeError("unreachable")  # pragma: no cover
        return wrapper
    return decorator
