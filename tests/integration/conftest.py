"""Integration test fixtures (wire-level server and service checks).

Provides an httpx.MockTransport that speaks the Rosetta Data API from the
JSON fixtures, so the real RosettaHttpClient, retry engine and Fetcher run
end to end without a network. Tests against a live Rosetta server are
skipped unless one is reachable.
"""

import json
import os
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest


class RosettaWireServer:
    """
    Rosetta server behind an httpx.MockTransport handler.

    ``flaky`` maps an endpoint to the number of 503 answers to give before
    answering normally. Endpoints in ``corrupt`` answer with a body that
    claims gzip encoding but is not gzip.
    """

    def __init__(self, fixtures_dir: Path, make_block: Callable[..., Any], make_transaction: Callable[..., Any]):
        self.fixtures = {
            f"/network/{name}": json.loads((fixtures_dir / f"network_{name}.json").read_text())
            for name in ("list", "status", "options")
        }
        self.make_block = make_block
        self.make_transaction = make_transaction
        self.other_transactions: dict[int, list[str]] = {}
        self.flaky: dict[str, int] = {}
        self.corrupt: set[str] = set()
        self.requests: list[tuple[str, dict]] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        endpoint = request.url.path
        payload = json.loads(request.content)
        self.requests.append((endpoint, payload))

        if self.flaky.get(endpoint):
            self.flaky[endpoint] -= 1
            return httpx.Response(503, text="service unavailable")

        if endpoint in self.corrupt:
            return httpx.Response(200, headers={"content-encoding": "gzip"}, content=b"plain text")

        if endpoint in self.fixtures:
            return httpx.Response(200, json=self.fixtures[endpoint])

        if endpoint == "/block":
            index = payload["block_identifier"].get("index", 100)
            if index > 100:
                return httpx.Response(
                    500, json={"code": 1, "message": "Block not found", "retriable": False}
                )
            body: dict = {"block": self.make_block(index)}
            other = self.other_transactions.get(index)
            if other:
                body["other_transactions"] = [{"hash": h} for h in other]
            return httpx.Response(200, json=body)

        if endpoint == "/block/transaction":
            tx_hash = payload["transaction_identifier"]["hash"]
            return httpx.Response(200, json={"transaction": self.make_transaction(tx_hash)})

        return httpx.Response(404, json={"code": 404, "message": "Unknown endpoint", "retriable": False})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def endpoints(self) -> list[str]:
        return [endpoint for endpoint, _ in self.requests]


@pytest.fixture
def wire_server(fixtures_dir, create_test_block, create_test_transaction) -> RosettaWireServer:
    return RosettaWireServer(fixtures_dir, create_test_block, create_test_transaction)


@pytest.fixture(scope="session")
def rosetta_server_url():
    """URL of a live Rosetta server from ROSETTA_SERVER_URL.

    Skips tests if the variable is unset or the server is not reachable.
    """
    url = os.environ.get("ROSETTA_SERVER_URL")
    if not url:
        pytest.skip("ROSETTA_SERVER_URL not set")
    try:
        response = httpx.post(f"{url.rstrip('/')}/network/list", json={"metadata": {}}, timeout=5)
        if response.status_code != 200:
            pytest.skip("Rosetta server not available (non-200 status)")
    except httpx.HTTPError as e:
        pytest.skip(f"Rosetta server not available: {e}")
    return url
