"""
Bounded worker pool over an ordered list of jobs.

A fixed number of asyncio tasks drain a shared cursor; each job position is
claimed exactly once and its result lands in a preallocated slot, so the
output order is the input order whatever the completion order.

On the first failure the cursor is closed, the remaining workers are
cancelled and awaited, and that failure is raised. If the caller is
cancelled, every worker is cancelled and awaited before the cancellation
propagates.
"""

import asyncio
from typing import Awaitable, Callable, Sequence, TypeVar

import structlog

logger = structlog.get_logger(__name__)

K = TypeVar("K")
T = TypeVar("T")


class _Cursor:
    """
    Claim counter over ``[0, size)``.

    Claims never await, so on a single event loop they are atomic.
    """

    def __init__(self, size: int):
        self._next = 0
        self._size = size
        self.closed = False

    def claim(self) -> int | None:
        if self.closed or self._next >= self._size:
            return None
        position = self._next
        self._next += 1
        return position

    def close(self) -> None:
        self.closed = True


async def run_bounded(
    items: Sequence[K],
    job: Callable[[K], Awaitable[T]],
    concurrency: int,
    name: str = "job",
) -> list[T]:
    """
    Run ``job`` over ``items`` with at most ``concurrency`` in flight.

    Args:
        items: Job inputs, in output order
        job: Coroutine function applied to each item
        concurrency: Maximum simultaneous jobs (>= 1)
        name: Label for logs

    Returns:
        One result per item, in ``items`` order

    Raises:
        Exception: The first failure raised by any job
    """
    if concurrency < 1:
        raise ValueError("concurrency must be >= 1")
    if not items:
        return []

    slots: list = [None] * len(items)
    cursor = _Cursor(len(items))
    failures: list[Exception] = []

    async def worker() -> None:
        while True:
            position = cursor.claim()
            if position is None:
                return
            try:
                slots[position] = await job(items[position])
            except Exception as e:
                cursor.close()
                if failures:
                    logger.debug(
                        "Discarding later worker failure",
                        pool=name,
                        item=str(items[position]),
                        error_type=type(e).__name__,
                    )
                else:
                    failures.append(e)
                raise

    workers = [
        asyncio.create_task(worker(), name=f"{name}-worker-{i}")
        for i in range(min(concurrency, len(items)))
    ]
    try:
        await asyncio.wait(workers, return_when=asyncio.FIRST_EXCEPTION)
    finally:
        for task in workers:
            if not task.done():
                task.cancel()
        # Retrieves every outcome so none is reported as never retrieved
        await asyncio.gather(*workers, return_exceptions=True)

    if failures:
        raise failures[0]
    return slots
