"""Bounded retry with a pluggable retryable-error predicate and backoff."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, Optional

from yt_sentiment.services.exceptions import (
    DEFAULT_OVERLOAD_MARKERS,
    RetryExhaustedError,
    is_retryable_error,
)

logger = logging.getLogger(__name__)


def linear_backoff(step: float = 2.0) -> Callable[[int], float]:
    """Delay after the n-th failed attempt is ``n * step`` (2s, 4s, ...)"""

    def _backoff(attempt: int) -> float:
        return attempt * step

    return _backoff


def overload_predicate(
    markers: Iterable[str] = DEFAULT_OVERLOAD_MARKERS,
) -> Callable[[BaseException], bool]:
    markers = tuple(markers)

    def _is_overload(error: BaseException) -> bool:
        return is_retryable_error(error, markers)

    return _is_overload


@dataclass
class RetryPolicy:
    """
    Retry policy for a single async operation

    Attributes:
        max_attempts: Total attempts, including the first one
        is_retryable: Decides whether a failure may be retried
        backoff: Maps the number of failed attempts so far to a delay in seconds
        sleep: Awaitable sleep, replaceable in tests
    """

    max_attempts: int = 3
    is_retryable: Callable[[BaseException], bool] = field(
        default_factory=overload_predicate
    )
    backoff: Callable[[int], float] = field(default_factory=linear_backoff)
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep

    async def execute(
        self,
        operation: Callable[[], Awaitable[Any]],
        description: Optional[str] = None,
    ) -> Any:
        """
        Run ``operation`` until it succeeds or the policy gives up

        Attempts are strictly sequential. A non-retryable failure propagates
        unchanged on the spot.

        Raises:
            RetryExhaustedError: every attempt failed with a retryable error
        """
        name = description or getattr(operation, "__name__", "operation")

        for attempt in range(1, self.max_attempts + 1):
            try:
                result = await operation()
                if attempt > 1:
                    logger.info(f"✅ {name} succeeded on attempt {attempt}")
                return result

            except Exception as e:
                if not self.is_retryable(e):
                    logger.error(f"❌ {name} failed with non-retryable error: {e}")
                    raise

                if attempt == self.max_attempts:
                    logger.error(f"❌ {name} failed after {attempt} attempts: {e}")
                    raise RetryExhaustedError(attempt, e) from e

                delay = self.backoff(attempt)
                logger.warning(
                    f"⚠️ {name} attempt {attempt}/{self.max_attempts} failed: {e}, "
                    f"retrying in {delay:.0f}s"
                )
                await self.sleep(delay)

        # max_attempts < 1 never enters the loop
        raise ValueError("RetryPolicy.max_attempts must be at least 1")
