"""
Unit tests for the bounded worker pool.
"""

import asyncio
import random

import pytest

from rosetta_fetcher.fetcher import run_bounded


@pytest.mark.asyncio
async def test_results_follow_input_order():
    """Jobs finishing out of order still land in input order."""
    rng = random.Random(3)
    delays = {i: rng.uniform(0, 0.01) for i in range(20)}

    async def job(i):
        await asyncio.sleep(delays[i])
        return i * 10

    assert await run_bounded(list(range(20)), job, concurrency=5) == [i * 10 for i in range(20)]


@pytest.mark.asyncio
async def test_empty_items():
    async def job(i):
        raise AssertionError("never called")

    assert await run_bounded([], job, concurrency=3) == []


@pytest.mark.asyncio
async def test_invalid_concurrency():
    async def job(i):
        return i

    with pytest.raises(ValueError):
        await run_bounded([1], job, concurrency=0)


@pytest.mark.asyncio
async def test_concurrency_bound_respected():
    in_flight = 0
    peak = 0

    async def job(i):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.001)
        in_flight -= 1
        return i

    await run_bounded(list(range(30)), job, concurrency=4)

    assert peak == 4


@pytest.mark.asyncio
async def test_each_item_claimed_once():
    seen = []

    async def job(i):
        seen.append(i)
        await asyncio.sleep(0)
        return i

    await run_bounded(list(range(50)), job, concurrency=8)

    assert sorted(seen) == list(range(50))


@pytest.mark.asyncio
async def test_first_failure_raised_and_siblings_cancelled():
    cancelled = []

    async def job(i):
        if i == 0:
            await asyncio.sleep(0.01)
            raise RuntimeError("item 0 failed")
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.append(i)
            raise
        return i

    with pytest.raises(RuntimeError, match="item 0 failed"):
        await run_bounded([0, 1, 2], job, concurrency=3)

    assert sorted(cancelled) == [1, 2]


@pytest.mark.asyncio
async def test_no_claims_after_failure():
    started = []

    async def job(i):
        started.append(i)
        if i == 3:
            raise ValueError("bad item")
        return i

    with pytest.raises(ValueError):
        await run_bounded(list(range(10)), job, concurrency=1)

    assert started == [0, 1, 2, 3]


@pytest.mark.asyncio
async def test_caller_cancellation_cancels_workers():
    started = asyncio.Event()
    cancelled = []

    async def job(i):
        started.set()
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            cancelled.append(i)
            raise

    task = asyncio.create_task(run_bounded([0, 1], job, concurrency=2))
    await started.wait()
    await asyncio.sleep(0.01)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert sorted(cancelled) == [0, 1]
