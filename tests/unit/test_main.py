"""
Unit tests for the command-line entry point.
"""

import logging

import pytest

import rosetta_fetcher.__main__ as cli
from rosetta_fetcher.client.exceptions import RosettaConnectionError
from rosetta_fetcher.errors import RetryExhausted


@pytest.mark.asyncio
async def test_run_walks_current_block_and_genesis_range(test_settings, rosetta_server):
    blocks = await cli.run(test_settings, client=rosetta_server)

    assert list(blocks) == list(range(0, cli.GENESIS_RANGE + 1))
    assert rosetta_server.calls_to("/block")[0]["block_identifier"] == {"index": 100, "hash": "block-100"}
    assert rosetta_server.closed


def test_main_configures_logging_and_reports_success(test_settings, restore_logging, monkeypatch):
    seen = []

    async def fake_run(settings):
        seen.append(settings)
        return {}

    monkeypatch.setattr(cli, "run", fake_run)

    assert cli.main(test_settings) == 0
    assert seen == [test_settings]
    assert restore_logging.level == logging.DEBUG


def test_main_returns_error_status_on_fetch_failure(test_settings, restore_logging, monkeypatch):
    async def failing_run(settings):
        raise RetryExhausted("/network/list", 3, RosettaConnectionError("refused"))

    monkeypatch.setattr(cli, "run", failing_run)

    assert cli.main(test_settings) == 1
