"""
Retry engine with exponential backoff.

The engine runs one unit of work (an async callable performing a single
attempt) until it succeeds, fails terminally, or spends its RetryPolicy
budget. Only transient failures are retried; anything else is re-raised
untouched on the first occurrence.

Backoff sleeps use ``asyncio.sleep``, so cancelling the calling task aborts
a pending sleep immediately instead of waiting it out.

Usage:
    engine = RetryEngine(RetryPolicy(max_attempts=5))
    response = await engine.run(lambda: client.call("/block", payload), operation="/block")
"""

import asyncio
import random
import time
from typing import Awaitable, Callable, TypeVar

import structlog

from rosetta_fetcher.client.exceptions import TransportError
from rosetta_fetcher.errors import RetryExhausted
from rosetta_fetcher.monitoring.metrics import retries_total, retry_exhausted_total
from rosetta_fetcher.retry.policy import RetryPolicy

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def is_transient_error(error: BaseException) -> bool:
    """Default classifier: transport errors the server marked retriable."""
    return isinstance(error, TransportError) and error.retriable


class RetryEngine:
    """
    Executes attempts under a RetryPolicy.

    Attributes:
        policy: Budget and backoff schedule
    """

    def __init__(
        self,
        policy: RetryPolicy,
        is_transient: Callable[[BaseException], bool] = is_transient_error,
        rng: random.Random | None = None,
        sleep: Callable[[float], Awaitable[None]] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize retry engine.

        Args:
            policy: Retry budget and backoff schedule
            is_transient: Predicate deciding whether a failure may be retried
            rng: Random source for jitter (seeded in tests)
            sleep: Awaitable sleep, ``asyncio.sleep`` by default
            clock: Monotonic clock used for the elapsed budget
        """
        self.policy = policy
        self._is_transient = is_transient
        self._rng = rng or random.Random()
        self._sleep = sleep or asyncio.sleep
        self._clock = clock

    async def run(self, work: Callable[[], Awaitable[T]], operation: str = "operation") -> T:
        """
        Run ``work`` until success, terminal failure or budget exhaustion.

        Args:
            work: Zero-argument coroutine function performing one attempt
            operation: Name used in logs, metrics and RetryExhausted

        Returns:
            Whatever the first successful attempt returned

        Raises:
            RetryExhausted: Budget spent; wraps the last transient error
            Exception: Any terminal failure raised by ``work``, unchanged
        """
        started = self._clock()
        attempts = 0

        while True:
            attempts += 1
            try:
                return await work()
            except Exception as e:
                if not self._is_transient(e):
                    raise
                last_error = e

            delay = self.policy.backoff(attempts, self._rng)
            elapsed = self._clock() - started

            if self.policy.exhausted(attempts, elapsed + delay):
                retry_exhausted_total.labels(operation=operation).inc()
                logger.error(
                    "Retry budget exhausted",
                    operation=operation,
                    attempts=attempts,
                    elapsed_s=round(elapsed, 3),
                    error=str(last_error),
                    error_type=type(last_error).__name__,
                )
                raise RetryExhausted(operation, attempts, last_error)

            retries_total.labels(operation=operation).inc()
            logger.warning(
                "Transient failure, retrying",
                operation=operation,
                attempt=attempts,
                backoff_s=round(delay, 3),
                error=str(last_error),
                error_type=type(last_error).__name__,
            )
            await self._sleep(delay)
