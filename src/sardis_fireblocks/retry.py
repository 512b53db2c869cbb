"""
Retry with exponential backoff for transient transport failures.

Used by the transaction tracker so that a dropped connection while
polling is not mistaken for a failed transaction.

Usage:
    from sardis_fireblocks.retry import RetryConfig, retry_async

    config = RetryConfig(max_retries=3, base_delay=0.5)
    details = await retry_async(client.get_transaction, tx_id, config=config)
"""
from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Type, TypeVar

from .constants import RetryDefaults
from .exceptions import TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _is_retryable_transport_error(exception: BaseException) -> bool:
    return isinstance(exception, TransportError) and exception.retryable


@dataclass(frozen=True)
class RetryConfig:
    """Configuration for retry behavior.

    Attributes:
        max_retries: Maximum number of retry attempts (0 means no retries)
        base_delay: Initial delay between retries in seconds
        max_delay: Maximum delay between retries in seconds
        exponential_base: Base for exponential backoff calculation
        jitter: Maximum jitter factor (0.0-1.0) applied to delays
        retryable_exceptions: Exception types that may trigger retries
        retry_condition: Optional predicate refining ``retryable_exceptions``
    """

    max_retries: int = RetryDefaults.MAX_RETRIES
    base_delay: float = RetryDefaults.BASE_DELAY
    max_delay: float = RetryDefaults.MAX_DELAY
    exponential_base: float = RetryDefaults.EXPONENTIAL_BASE
    jitter: float = RetryDefaults.JITTER
    retryable_exceptions: tuple[Type[BaseException], ...] = (TransportError,)
    retry_condition: Optional[Callable[[BaseException], bool]] = _is_retryable_transport_error

    def calculate_delay(self, attempt: int) -> float:
        """Delay before retry number ``attempt`` (0-based), with jitter."""
        delay = self.base_delay * (self.exponential_base ** attempt)
        delay = min(delay, self.max_delay)

        if self.jitter > 0:
            jitter_range = delay * self.jitter
            delay = delay + random.uniform(-jitter_range, jitter_range)

        return max(0.0, delay)

    def should_retry(self, exception: BaseException) -> bool:
        if not isinstance(exception, self.retryable_exceptions):
            return False
        if self.retry_condition is not None:
            return self.retry_condition(exception)
        return True


NO_RETRY = RetryConfig(max_retries=0)


async def retry_async(
    func: Callable[..., Awaitable[T]],
    *args,
    config: Optional[RetryConfig] = None,
    sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    **kwargs,
) -> T:
    """Await ``func(*args, **kwargs)``, retrying per ``config``.

    The last exception is re-raised unchanged once retries are exhausted
    or when it is not retryable.

    Args:
        func: The async function to execute
        config: Retry configuration (uses defaults if None)
        sleep: Awaitable sleep, e.g. ``Clock.sleep``. Defaults to asyncio.sleep.
    """
    if config is None:
        config = RetryConfig()
    sleep = sleep or asyncio.sleep

    attempt = 0
    while True:
        try:
            return await func(*args, **kwargs)
        except Exception as e:
            if attempt >= config.max_retries or not config.should_retry(e):
                raise

            delay = config.calculate_delay(attempt)
            attempt += 1
            logger.warning(
                f"Retry {attempt}/{config.max_retries} for "
                f"{getattr(func, '__name__', 'call')} after {type(e).__name__}: {e}. "
                f"Waiting {delay:.2f}s"
            )
            await sleep(delay)
