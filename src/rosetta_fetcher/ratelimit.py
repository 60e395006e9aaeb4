"""
Outbound request throttling.

The fetcher calls ``acquire()`` on its limiter before every transport call,
including each retry attempt. One limiter instance is shared by every
concurrent worker, so it bounds the aggregate request rate of a fetcher.
"""

import asyncio
import time
from typing import Callable, Protocol

import structlog

logger = structlog.get_logger(__name__)


class RateLimiter(Protocol):
    """Anything that can delay a caller until a request is permitted."""

    async def acquire(self) -> None:
        """Wait until one request may be sent. Cancellation aborts the wait."""
        ...


class TokenBucketRateLimiter:
    """
    Token bucket limiter.

    Tokens refill continuously at ``rate`` per second up to ``burst``. Each
    ``acquire()`` consumes one token, sleeping until one is available.
    Waiters are served in arrival order.

    Attributes:
        rate: Sustained requests per second
        burst: Bucket capacity
    """

    def __init__(
        self,
        rate: float,
        burst: int = 1,
        clock: Callable[[], float] = time.monotonic,
    ):
        if rate <= 0:
            raise ValueError("rate must be > 0")
        if burst < 1:
            raise ValueError("burst must be >= 1")

        self.rate = rate
        self.burst = burst
        self._clock = clock
        self._tokens = float(burst)
        self._updated = clock()
        self._lock = asyncio.Lock()

    def _refill(self) -> None:
        now = self._clock()
        self._tokens = min(self.burst, self._tokens + (now - self._updated) * self.rate)
        self._updated = now

    async def acquire(self) -> None:
        # Holding the lock while sleeping keeps waiters FIFO
        async with self._lock:
            self._refill()
            while self._tokens < 1:
                wait = (1 - self._tokens) / self.rate
                logger.debug("Rate limiter waiting", wait_s=round(wait, 4))
                await asyncio.sleep(wait)
                self._refill()
            self._tokens -= 1

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(rate={self.rate}/s, burst={self.burst})"
