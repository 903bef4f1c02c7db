"""
Bounded retry policy for generation attempts.

Wraps tenacity so adapters can express "up to N attempts with a linearly
growing pause" without owning the loop themselves. The delay before retry
``n`` is ``n * base_delay`` (1s, 2s, ... with the default base).

Usage:
    policy = RetryPolicy(max_attempts=3, base_delay=1.0, name="openai")
    report = await policy.run(lambda attempt: run_one_attempt(attempt))
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, TypeVar

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from infographix.core.config import settings
from infographix.core.exceptions import ConfigurationError, GenerationFailedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryPolicy:
    """Configuration and driver for bounded retries."""
    max_attempts: int = 3
    base_delay: float = 1.0
    # Name used in log lines and the terminal error
    name: str = "default"
    # Exceptions that must surface immediately instead of being retried
    fatal_exceptions: tuple = (ConfigurationError,)
    # Injected for tests so backoff does not actually wait
    sleep: Callable[[float], Awaitable[Any]] = field(default=asyncio.sleep, repr=False)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0:
            raise ValueError("base_delay must not be negative")

    def delay_for(self, attempt: int) -> float:
        """Pause taken after failed attempt number ``attempt`` (1-based)."""
        return attempt * self.base_delay

    async def run(self, operation: Callable[[int], Awaitable[T]]) -> T:
        """
        Run ``operation(attempt_number)`` until it succeeds or attempts run out.

        Raises:
            One of ``fatal_exceptions`` unchanged, as soon as it occurs.
            GenerationFailedError: after the final failed attempt, carrying
                the attempt count and the last underlying error.
        """
        attempt_number = 0
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_incrementing(start=self.base_delay, increment=self.base_delay),
            # Exception (not BaseException) so task cancellation is never retried
            retry=(
                retry_if_exception_type(Exception)
                & retry_if_not_exception_type(self.fatal_exceptions)
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            sleep=self.sleep,
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    attempt_number = attempt.retry_state.attempt_number
                    logger.info(f"[RETRY] {self.name}: attempt {attempt_number}/{self.max_attempts}")
                    result = await operation(attempt_number)
                    logger.info(f"[RETRY] {self.name}: success on attempt {attempt_number}/{self.max_attempts}")
                    return result
        except self.fatal_exceptions:
            raise
        except Exception as e:
            logger.error(f"[RETRY] {self.name}: all {attempt_number} attempts failed: {e}")
            raise GenerationFailedError(
                attempts=attempt_number,
                last_error=e,
                provider=self.name,
            ) from e

        # AsyncRetrying either returns from the loop body or raises
        raise RuntimeError("Unexpected code path in RetryPolicy.run()")  # pragma: no cover


def default_retry_policy(name: str, max_attempts: Optional[int] = None) -> RetryPolicy:
    """Build a policy from settings."""
    return RetryPolicy(
        max_attempts=max_attempts or settings.GENERATION_MAX_ATTEMPTS,
        base_delay=settings.GENERATION_RETRY_BASE_DELAY,
        name=name,
    )
