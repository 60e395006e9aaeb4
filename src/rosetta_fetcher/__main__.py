"""
Command-line entry point: ``python -m rosetta_fetcher``.

Connects to SERVER_URL, initializes the asserter, fetches the current block
and the first blocks after genesis, logging a summary of each step.
"""

import asyncio
import sys
from typing import Any, Optional

import structlog

from rosetta_fetcher.config import Settings, settings as default_settings
from rosetta_fetcher.errors import FetcherError
from rosetta_fetcher.fetcher import Fetcher
from rosetta_fetcher.logging_config import configure_logging
from rosetta_fetcher.models import BlockMap, PartialBlockIdentifier

logger = structlog.get_logger(__name__)

GENESIS_RANGE = 10


async def run(settings: Settings, **overrides: Any) -> BlockMap:
    """Walk the server once; returns the blocks fetched after genesis."""
    async with Fetcher.from_settings(settings, **overrides) as fetcher:
        network, status = await fetcher.initialize_asserter()
        logger.info(
            "Primary network",
            blockchain=network.blockchain,
            network=network.network,
            current_index=status.current_block_identifier.index,
            genesis_index=status.genesis_block_identifier.index,
        )

        current = await fetcher.fetch_block(
            network, PartialBlockIdentifier.from_block_identifier(status.current_block_identifier)
        )
        logger.info(
            "Current block",
            index=current.block_identifier.index,
            hash=current.block_identifier.hash,
            transactions=len(current.transactions),
        )

        low = status.genesis_block_identifier.index
        high = min(low + GENESIS_RANGE, status.current_block_identifier.index)
        blocks = await fetcher.fetch_block_range(network, low, high)
        logger.info(
            "Block range",
            low=low,
            high=high,
            transactions=sum(len(block.transactions) for block in blocks.values()),
        )
        return blocks


def main(settings: Optional[Settings] = None) -> int:
    settings = settings or default_settings
    configure_logging(settings)
    try:
        asyncio.run(run(settings))
    except FetcherError as e:
        logger.error("Fetch failed", error=e.message, kind=e.kind.value, details=e.details)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
