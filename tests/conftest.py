"""Shared test fixtures and configuration for all tests.

Provides an in-memory Rosetta server (FakeRosettaClient) that answers every
endpoint from the JSON fixtures, generates blocks on demand, and can be
scripted to fail or stall for specific requests.
"""

import asyncio
import json
from pathlib import Path
from typing import Any, Dict

import pytest

from rosetta_fetcher.asserter import Asserter
from rosetta_fetcher.client.base_client import BaseRosettaClient
from rosetta_fetcher.config import Settings
from rosetta_fetcher.fetcher import Fetcher
from rosetta_fetcher.models import (
    NetworkIdentifier,
    NetworkOptionsResponse,
    NetworkStatusResponse,
)
from rosetta_fetcher.retry import RetryPolicy

FIXTURES_DIR = Path(__file__).parent / "fixtures"
GENESIS_TIMESTAMP = 1_600_000_000_000


def _load(name: str) -> Dict[str, Any]:
    with open(FIXTURES_DIR / name) as f:
        return json.load(f)


def make_transaction(tx_hash: str, operation_type: str = "TRANSFER", status: str | None = "SUCCESS") -> Dict[str, Any]:
    """Rosetta transaction body with one transfer operation."""
    operation: Dict[str, Any] = {
        "operation_identifier": {"index": 0},
        "type": operation_type,
        "account": {"address": f"addr-{tx_hash}"},
        "amount": {"value": "-1000", "currency": {"symbol": "BTC", "decimals": 8}},
    }
    if status is not None:
        operation["status"] = status
    return {"transaction_identifier": {"hash": tx_hash}, "operations": [operation]}


def make_block(index: int, inline: list[str] | None = None) -> Dict[str, Any]:
    """Rosetta block body; block 0 is its own parent."""
    parent = max(index - 1, 0)
    inline = [f"tx-{index}-0"] if inline is None else inline
    return {
        "block_identifier": {"index": index, "hash": f"block-{index}"},
        "parent_block_identifier": {"index": parent, "hash": f"block-{parent}"},
        "timestamp": GENESIS_TIMESTAMP + index * 1000,
        "transactions": [make_transaction(h) for h in inline],
    }


class FakeRosettaClient(BaseRosettaClient):
    """
    Scripted in-memory Rosetta server.

    Blocks are generated on demand for any index up to the current block;
    ``set_block`` overrides one. Failures are keyed by ``(endpoint, key)``
    where key is the block index for /block, the transaction hash for
    /block/transaction and /mempool/transaction, and None otherwise.
    """

    def __init__(self):
        self.network_list = _load("network_list.json")
        self.network_status = _load("network_status.json")
        self.network_options = _load("network_options.json")
        self.blocks: Dict[int, Dict[str, Any]] = {}
        self.transactions: Dict[str, Dict[str, Any]] = {}
        self.mempool = {"transaction_identifiers": [{"hash": "mempool-1"}, {"hash": "mempool-2"}]}
        self.calls: list[tuple[str, Dict[str, Any]]] = []
        self._queued_failures: Dict[tuple[str, Any], list[Exception]] = {}
        self._permanent_failures: Dict[tuple[str, Any], Exception] = {}
        self._delays: Dict[tuple[str, Any], float] = {}
        self.closed = False

    # === Scripting ===

    def set_block(self, index: int, inline: list[str] | None = None, other: list[str] | None = None) -> None:
        """Serve block ``index`` with the given inline and out-of-line transactions."""
        response: Dict[str, Any] = {"block": make_block(index, inline)}
        if other:
            response["other_transactions"] = [{"hash": h} for h in other]
            for tx_hash in other:
                self.transactions[tx_hash] = make_transaction(tx_hash)
        self.blocks[index] = response

    def fail_once(self, endpoint: str, key: Any, *errors: Exception) -> None:
        self._queued_failures.setdefault((endpoint, key), []).extend(errors)

    def fail_always(self, endpoint: str, key: Any, error: Exception) -> None:
        self._permanent_failures[(endpoint, key)] = error

    def delay(self, endpoint: str, key: Any, seconds: float) -> None:
        self._delays[(endpoint, key)] = seconds

    def calls_to(self, endpoint: str) -> list[Dict[str, Any]]:
        return [payload for called, payload in self.calls if called == endpoint]

    # === Transport ===

    async def call(self, endpoint: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append((endpoint, payload))
        key = self._key(endpoint, payload)

        if (endpoint, key) in self._delays:
            await asyncio.sleep(self._delays[(endpoint, key)])
        queued = self._queued_failures.get((endpoint, key))
        if queued:
            raise queued.pop(0)
        if (endpoint, key) in self._permanent_failures:
            raise self._permanent_failures[(endpoint, key)]

        if endpoint == "/network/list":
            return self.network_list
        if endpoint == "/network/status":
            return self.network_status
        if endpoint == "/network/options":
            return self.network_options
        if endpoint == "/block":
            return self._block(payload)
        if endpoint == "/block/transaction":
            return {"transaction": self.transactions[key]}
        if endpoint == "/account/balance":
            block = payload.get("block_identifier") or self.network_status["current_block_identifier"]
            index = block.get("index", 100)
            return {
                "block_identifier": {"index": index, "hash": f"block-{index}"},
                "balances": [{"value": "5000", "currency": {"symbol": "BTC", "decimals": 8}}],
            }
        if endpoint == "/mempool":
            return self.mempool
        if endpoint == "/mempool/transaction":
            return {"transaction": make_transaction(key, status=None)}
        raise AssertionError(f"unexpected endpoint {endpoint}")

    def _block(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        requested = payload.get("block_identifier", {})
        index = requested.get("index", self.network_status["current_block_identifier"]["index"])
        if index not in self.blocks:
            return {"block": make_block(index)}
        return self.blocks[index]

    @staticmethod
    def _key(endpoint: str, payload: Dict[str, Any]) -> Any:
        if endpoint == "/block":
            return payload.get("block_identifier", {}).get("index")
        if endpoint in ("/block/transaction", "/mempool/transaction"):
            return payload["transaction_identifier"]["hash"]
        return None

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults for local testing."""
    return Settings(
        SERVER_URL="http://localhost:8080",
        HTTP_TIMEOUT=5.0,
        MAX_RETRIES=3,
        RETRY_ELAPSED_TIME=5.0,
        RETRY_INITIAL_DELAY=0.0,
        RETRY_JITTER=0.0,
        RETRY_MAX_DELAY=0.0,
        BLOCK_CONCURRENCY=4,
        TRANSACTION_CONCURRENCY=2,
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",
    )


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to test fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def create_test_block():
    """Factory fixture for Rosetta block bodies.

    Usage:
        def test_something(create_test_block):
            block = Block.model_validate(create_test_block(5, inline=["a", "b"]))
    """
    return make_block


@pytest.fixture
def create_test_transaction():
    """Factory fixture for Rosetta transaction bodies."""
    return make_transaction


@pytest.fixture
def rosetta_server() -> FakeRosettaClient:
    return FakeRosettaClient()


@pytest.fixture
def network() -> NetworkIdentifier:
    return NetworkIdentifier(blockchain="bitcoin", network="mainnet")


@pytest.fixture
def fast_policy() -> RetryPolicy:
    """Three attempts, no backoff delay."""
    return RetryPolicy(
        max_attempts=3,
        max_elapsed=None,
        initial_delay=0.0,
        jitter=0.0,
        max_delay=0.0,
    )


@pytest.fixture
def asserter(rosetta_server: FakeRosettaClient, network: NetworkIdentifier) -> Asserter:
    """Asserter built from the fixture status and options."""
    return Asserter.from_responses(
        network,
        NetworkStatusResponse.model_validate(rosetta_server.network_status),
        NetworkOptionsResponse.model_validate(rosetta_server.network_options),
    )


@pytest.fixture
def fetcher(rosetta_server: FakeRosettaClient, fast_policy: RetryPolicy) -> Fetcher:
    """Fetcher over the fake server, asserter not initialized."""
    return Fetcher(client=rosetta_server, retry_policy=fast_policy)


@pytest.fixture
def ready_fetcher(
    rosetta_server: FakeRosettaClient,
    fast_policy: RetryPolicy,
    asserter: Asserter,
) -> Fetcher:
    """Fetcher over the fake server with an asserter already in place."""
    return Fetcher(
        client=rosetta_server,
        retry_policy=fast_policy,
        asserter=asserter,
        block_concurrency=4,
        transaction_concurrency=2,
    )
