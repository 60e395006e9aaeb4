"""
Retry engine with exponential backoff and jitter.

Main Components:
    - RetryPolicy: Immutable attempt/elapsed budget and backoff schedule
    - RetryEngine: Runs one unit of work under a policy
    - is_transient_error: Default transient/terminal classifier

Usage:
    >>> from rosetta_fetcher.retry import RetryEngine, RetryPolicy
    >>> engine = RetryEngine(RetryPolicy(max_attempts=5, max_elapsed=30))
    >>> response = await engine.run(attempt, operation="/network/status")
"""

from rosetta_fetcher.retry.engine import RetryEngine, is_transient_error
from rosetta_fetcher.retry.policy import RetryPolicy

__all__ = [
    "RetryEngine",
    "RetryPolicy",
    "is_transient_error",
]
