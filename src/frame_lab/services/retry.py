"""Bounded exponential-backoff retry for provider calls."""

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from frame_lab.domain.errors import QuotaExceededError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]

_RATE_LIMIT_PATTERN = re.compile(r"status:?\s*429|quota exceeded", re.IGNORECASE)
_MAX_JITTER_SECONDS = 0.5


def is_rate_limit_error(exc: BaseException) -> bool:
    """Return True for rate-limit or quota errors reported by the provider."""
    if getattr(exc, "code", None) == 429:
        return True
    return bool(_RATE_LIMIT_PATTERN.search(str(exc)))


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = 5,
    initial_delay: float = 1.0,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """Run ``operation``, retrying rate-limit failures with exponential backoff.

    Attempt ``n`` waits ``initial_delay * 2 ** (n - 1)`` seconds plus up to half a
    second of jitter before the next try. Other errors propagate immediately.
    Running out of attempts on a rate-limit error raises ``QuotaExceededError``.
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_retries),
        wait=wait_exponential(multiplier=initial_delay, exp_base=2)
        + wait_random(0, _MAX_JITTER_SECONDS),
        retry=retry_if_exception(is_rate_limit_error),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        sleep=sleep,
        reraise=True,
    )
    try:
        return await retrying(operation)
    except Exception as exc:
        if is_rate_limit_error(exc):
            logger.error("Provider call still rate limited after %d attempts", max_retries)
            raise QuotaExceededError() from exc
        raise


@dataclass(frozen=True)
class RetryPolicy:
    """Configured retry parameters shared by provider calls."""

    max_retries: int = 5
    initial_delay: float = 1.0
    sleep: Sleep = asyncio.sleep

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run an operation under this policy."""
        return await with_retry(
            operation,
            max_retries=self.max_retries,
            initial_delay=self.initial_delay,
            sleep=self.sleep,
        )
