"""
Retry with exponential backoff for remote AI calls.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

from .errors import CallError, ErrorKind

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_KINDS = frozenset({
    ErrorKind.RATE_LIMITED,
    ErrorKind.SERVER_ERROR,
    ErrorKind.SERVICE_UNAVAILABLE,
})


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 3
    initial_delay_ms: int = 1000

    def __post_init__(self):
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.initial_delay_ms <= 0:
            raise ValueError("initial_delay_ms must be > 0")


def is_retryable(error: BaseException) -> bool:
    """True for rate limiting (429), server errors (500) and unavailability (503)."""
    return isinstance(error, CallError) and error.kind in RETRYABLE_KINDS


def backoff_delay_ms(policy: RetryPolicy, attempt: int) -> int:
    """Wait before the retry that follows ``attempt`` (0-based); doubles every attempt."""
    return policy.initial_delay_ms * (2 ** attempt)


async def _sleep_ms(ms: int) -> None:
    await asyncio.sleep(ms / 1000)


async def retry_with_backoff(
    call: Callable[[], Awaitable[T]],
    policy: RetryPolicy = RetryPolicy(),
    *,
    sleep: Callable[[int], Awaitable[Any]] = _sleep_ms,
) -> T:
    """
    Await ``call`` until it succeeds, retrying transient failures.

    The original exception is re-raised untouched when it is not retryable or
    when ``policy.max_retries`` retries have been spent. ``sleep`` receives the
    delay in milliseconds.
    """
    attempt = 0
    while True:
        try:
            return await call()
        except Exception as e:
            if not is_retryable(e) or attempt >= policy.max_retries:
                raise
            wait_ms = backoff_delay_ms(policy, attempt)
            logger.info(f"Retry attempt {attempt + 1}/{policy.max_retries} after {wait_ms}ms ({e!r})")
        await sleep(wait_ms)
        attempt += 1
