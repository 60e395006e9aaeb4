"""
Fetcher: network initialization, block assembly and range retrieval.

- fetcher.py: Fetcher (public API)
- network.py: Primary network selection
- workers.py: Bounded worker pool with fail-fast cancellation
"""

from rosetta_fetcher.fetcher.fetcher import Fetcher
from rosetta_fetcher.fetcher.network import select_primary_network
from rosetta_fetcher.fetcher.workers import run_bounded

__all__ = [
    "Fetcher",
    "run_bounded",
    "select_primary_network",
]
