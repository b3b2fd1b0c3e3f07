"""Exponential-backoff retry for network-class operations"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from mdimport.core.errors import TransientNetworkError


logger = logging.getLogger(__name__)

T = TypeVar("T")


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay: float = 1.0,
    context: str = "operation",
    retry_on: tuple[type[Exception], ...] = (TransientNetworkError,),
) -> T:
    """Await fn(), retrying on retry_on errors with delays of base_delay * 2**(attempt-1).

    Any other exception propagates immediately. The last retryable error is
    re-raised once max_attempts is exhausted.
    """
    for attempt in range(1, max_attempts + 1):
        try:
            return await fn()
        except retry_on:
            if attempt == max_attempts:
                raise
            delay = base_delay * 2 ** (attempt - 1)
            logger.info(f"  [retry] {context}: attempt {attempt + 1}/{max_attempts} in {int(delay * 1000)}ms...")
            await asyncio.sleep(delay)
    raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
