# src/yt_sentiment/infrastructure/clients/rate_limiter.py
"""
Rate Limiting for API Clients

Features:
- Thread-safe token bucket for per-request limiting
- Sequential pipeline with a fixed pause between items, used where an
  upstream needs calls spaced out rather than merely capped
"""

import asyncio
import time
import logging
import threading
from typing import Any, Awaitable, Callable, Iterable, List, Optional, TypeVar
from dataclasses import dataclass

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


# ============================================================================
# Token Bucket Algorithm Implementation
# ============================================================================


@dataclass
class TokenBucket:
    """
    Token bucket for rate limiting

    Attributes:
        capacity: Maximum tokens (burst capacity)
        refill_rate: Tokens added per second
        tokens: Current available tokens
        last_refill: Last refill timestamp
    """

    capacity: float
    refill_rate: float
    tokens: float
    last_refill: float
    lock: threading.Lock = None

    def __post_init__(self):
        if self.lock is None:
            self.lock = threading.Lock()

    def _refill(self) -> None:
        """Refill tokens based on elapsed time"""
        now = time.time()
        elapsed = now - self.last_refill

        new_tokens = elapsed * self.refill_rate
        self.tokens = min(self.capacity, self.tokens + new_tokens)
        self.last_refill = now

    def consume(self, tokens: float = 1.0) -> bool:
        """
        Try to consume tokens

        Args:
            tokens: Number of tokens to consume

        Returns:
            True if tokens consumed, False if insufficient
        """
        with self.lock:
            self._refill()

            if self.tokens >= tokens:
                self.tokens -= tokens
                return True

            return False

    def wait_for_tokens(
        self, tokens: float = 1.0, timeout: Optional[float] = None
    ) -> bool:
        """
        Wait until tokens become available

        Args:
            tokens: Number of tokens needed
            timeout: Maximum wait time in seconds (None = infinite)

        Returns:
            True if tokens obtained, False if timeout
        """
        start_time = time.time()

        while True:
            if self.consume(tokens):
                return True

            if timeout and (time.time() - start_time) >= timeout:
                return False

            with self.lock:
                self._refill()
                deficit = tokens - self.tokens
            if deficit > 0:
                time.sleep(min(deficit / self.refill_rate, 1.0))
            else:
                time.sleep(0.01)  # avoid busy-wait


# ============================================================================
# Rate Limiter Class
# ============================================================================


class RateLimiter:
    """Caps the rate of calls made by one client instance"""

    def __init__(self, calls_per_second: float, burst_capacity: Optional[int] = None):
        """
        Initialize rate limiter

        Args:
            calls_per_second: Maximum calls per second
            burst_capacity: Burst capacity (defaults to calls_per_second * 2)
        """
        self.calls_per_second = calls_per_second
        self.burst_capacity = burst_capacity or int(calls_per_second * 2)

        self.bucket = TokenBucket(
            capacity=float(self.burst_capacity),
            refill_rate=calls_per_second,
            tokens=float(self.burst_capacity),
            last_refill=time.time(),
        )

        logger.info(
            f"🕐 Rate limiter initialized: {calls_per_second} calls/sec, "
            f"burst={self.burst_capacity}"
        )

    def acquire(self, timeout: Optional[float] = None) -> bool:
        """
        Acquire permission to make a call

        Args:
            timeout: Maximum wait time (None = block indefinitely)

        Returns:
            True if permission acquired, False if timeout
        """
        return self.bucket.wait_for_tokens(1.0, timeout)


# ============================================================================
# Sequential Pipeline
# ============================================================================


class SequentialPipeline:
    """
    Processes a queue of items one at a time with a mandatory pause between
    consecutive items

    The pause is part of the contract with the upstream API and is applied
    even when an item finishes instantly. No pause follows the last item.
    """

    def __init__(
        self,
        delay_seconds: float = 1.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """
        Args:
            delay_seconds: Pause between two consecutive items
            sleep: Awaitable sleep, replaceable in tests
        """
        self.delay_seconds = delay_seconds
        self._sleep = sleep

    async def run(
        self, items: Iterable[T], handler: Callable[[T], Awaitable[R]]
    ) -> List[R]:
        """
        Apply ``handler`` to every item in order

        Args:
            items: Work items
            handler: Async function called once per item

        Returns:
            Handler results in input order
        """
        queue = list(items)
        results: List[R] = []

        for index, item in enumerate(queue):
            if index > 0 and self.delay_seconds > 0:
                await self._sleep(self.delay_seconds)
            results.append(await handler(item))

        return results
