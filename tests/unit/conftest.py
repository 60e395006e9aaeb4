"""Unit test fixtures (mocks and stubs).

Provides mock objects for testing without a Rosetta server.
"""

import asyncio
import logging
from unittest.mock import AsyncMock

import pytest
import structlog

from rosetta_fetcher.client.base_client import BaseRosettaClient


class RecordingSleep:
    """Stand-in for asyncio.sleep that records delays and yields once."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await asyncio.sleep(0)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def mock_client():
    """Mock Rosetta transport (async)."""
    mock = AsyncMock(spec=BaseRosettaClient)
    mock.call = AsyncMock(return_value={})
    mock.close = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def restore_logging():
    """Root logger, restored (with structlog defaults) after the test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()
