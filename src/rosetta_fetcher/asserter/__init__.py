"""
Protocol-conformance validation for Rosetta responses.

- asserter.py: Asserter facade, built from network status + options
- network.py: Network identifier, list, status and options rules
- block.py: Block, transaction, operation and amount rules
- exceptions.py: AsserterError hierarchy (VALIDATION kind)
"""

from rosetta_fetcher.asserter.asserter import Asserter
from rosetta_fetcher.asserter.exceptions import (
    AsserterError,
    BlockAssertionError,
    NetworkAssertionError,
    TransactionAssertionError,
)

__all__ = [
    "Asserter",
    "AsserterError",
    "BlockAssertionError",
    "NetworkAssertionError",
    "TransactionAssertionError",
]
