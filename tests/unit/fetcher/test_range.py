"""
Unit tests for fetch_block_range: bounded concurrency, ordering and
fail-fast behaviour.
"""

import asyncio
import time

import pytest
import structlog

from rosetta_fetcher.client.exceptions import RosettaConnectionError, RosettaServerError
from rosetta_fetcher.errors import (
    ConfigurationError,
    ErrorKind,
    InvalidRangeError,
    RequestRejectedError,
)
from rosetta_fetcher.fetcher import Fetcher


def requested_indices(server) -> list[int]:
    return [payload["block_identifier"]["index"] for payload in server.calls_to("/block")]


# ============================================================================
# Range Validation
# ============================================================================


@pytest.mark.asyncio
@pytest.mark.parametrize("low,high", [(5, 4), (-1, 3), (-3, -1)])
async def test_invalid_range_makes_no_calls(ready_fetcher, network, rosetta_server, low, high):
    with pytest.raises(InvalidRangeError) as exc_info:
        await ready_fetcher.fetch_block_range(network, low, high)

    assert exc_info.value.kind == ErrorKind.INVALID_RANGE
    assert exc_info.value.details == {"low": low, "high": high}
    assert rosetta_server.calls == []


@pytest.mark.asyncio
async def test_range_requires_asserter(fetcher, network, rosetta_server):
    with pytest.raises(ConfigurationError):
        await fetcher.fetch_block_range(network, 0, 3)

    assert rosetta_server.calls == []


# ============================================================================
# Results
# ============================================================================


@pytest.mark.asyncio
async def test_range_returns_every_block(ready_fetcher, network):
    blocks = await ready_fetcher.fetch_block_range(network, 0, 9)

    assert list(blocks) == list(range(10))
    for index, block in blocks.items():
        assert block.block_identifier.index == index


@pytest.mark.asyncio
async def test_single_block_range(ready_fetcher, network, rosetta_server):
    blocks = await ready_fetcher.fetch_block_range(network, 42, 42)

    assert list(blocks) == [42]
    assert requested_indices(rosetta_server) == [42]


@pytest.mark.asyncio
async def test_range_assembles_other_transactions(ready_fetcher, network, rosetta_server):
    rosetta_server.set_block(3, inline=["i0"], other=["o0", "o1"])

    blocks = await ready_fetcher.fetch_block_range(network, 1, 5)

    assert [tx.transaction_identifier.hash for tx in blocks[3].transactions] == ["i0", "o0", "o1"]
    assert len(blocks) == 5


@pytest.mark.asyncio
async def test_range_independent_of_concurrency(rosetta_server, fast_policy, asserter, network):
    for index in range(0, 16, 3):
        rosetta_server.set_block(index, inline=[f"i{index}"], other=[f"o{index}-a", f"o{index}-b"])
    for index in range(16):
        rosetta_server.delay("/block", index, (16 - index) * 0.001)

    serial = Fetcher(client=rosetta_server, retry_policy=fast_policy, asserter=asserter, block_concurrency=1)
    parallel = Fetcher(client=rosetta_server, retry_policy=fast_policy, asserter=asserter, block_concurrency=8)

    assert await serial.fetch_block_range(network, 0, 15) == await parallel.fetch_block_range(network, 0, 15)


@pytest.mark.asyncio
async def test_range_respects_block_concurrency(ready_fetcher, network, rosetta_server):
    original_call = rosetta_server.call
    in_flight = 0
    peak = 0

    async def tracking_call(endpoint, payload):
        nonlocal in_flight, peak
        if endpoint != "/block":
            return await original_call(endpoint, payload)
        in_flight += 1
        peak = max(peak, in_flight)
        try:
            await asyncio.sleep(0.002)
            return await original_call(endpoint, payload)
        finally:
            in_flight -= 1

    rosetta_server.call = tracking_call

    blocks = await ready_fetcher.fetch_block_range(network, 0, 19)

    assert len(blocks) == 20
    assert peak == ready_fetcher.block_concurrency == 4


@pytest.mark.asyncio
async def test_range_recovers_from_transient_failures(ready_fetcher, network, rosetta_server):
    rosetta_server.fail_once("/block", 2, RosettaConnectionError("reset"), RosettaConnectionError("reset"))
    rosetta_server.fail_once("/block", 6, RosettaServerError("syncing", retriable=True))

    blocks = await ready_fetcher.fetch_block_range(network, 0, 7)

    assert len(blocks) == 8
    assert requested_indices(rosetta_server).count(2) == 3
    assert requested_indices(rosetta_server).count(6) == 2


@pytest.mark.asyncio
async def test_range_workers_log_with_network_bound(ready_fetcher, network, rosetta_server):
    bound = []
    serve = rosetta_server.call

    async def recording_call(endpoint, payload):
        bound.append(structlog.contextvars.get_contextvars())
        return await serve(endpoint, payload)

    rosetta_server.call = recording_call

    await ready_fetcher.fetch_block_range(network, 0, 3)

    assert len(bound) == 4
    assert all(ctx["blockchain"] == "bitcoin" and ctx["network"] == "mainnet" for ctx in bound)
    assert "blockchain" not in structlog.contextvars.get_contextvars()


# ============================================================================
# Fail-fast
# ============================================================================


@pytest.mark.asyncio
async def test_no_blocks_claimed_after_failure(rosetta_server, fast_policy, asserter, network):
    fetcher = Fetcher(client=rosetta_server, retry_policy=fast_policy, asserter=asserter, block_concurrency=1)
    rosetta_server.fail_always("/block", 4, RosettaServerError("invalid block", status_code=500))

    with pytest.raises(RequestRejectedError):
        await fetcher.fetch_block_range(network, 0, 9)

    assert requested_indices(rosetta_server) == [0, 1, 2, 3, 4]


@pytest.mark.asyncio
async def test_failure_cancels_in_flight_blocks(ready_fetcher, network, rosetta_server):
    rosetta_server.delay("/block", 1, 10)
    rosetta_server.fail_always("/block", 2, RosettaServerError("invalid block", status_code=500))

    started = time.monotonic()
    with pytest.raises(RequestRejectedError) as exc_info:
        await ready_fetcher.fetch_block_range(network, 0, 9)

    assert time.monotonic() - started < 2.0
    assert exc_info.value.details["endpoint"] == "/block"


@pytest.mark.asyncio
async def test_cancelling_range_stops_all_fetches(ready_fetcher, network, rosetta_server):
    for index in range(10):
        rosetta_server.delay("/block", index, 10)

    task = asyncio.create_task(ready_fetcher.fetch_block_range(network, 0, 9))
    await asyncio.sleep(0.02)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    # only the first wave of workers ever started
    assert len(rosetta_server.calls_to("/block")) == 4
