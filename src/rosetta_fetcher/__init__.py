"""
Rosetta Fetcher: resilient, validated client for Rosetta Data APIs.

Fetches network metadata, blocks (assembling transactions the server lists
separately), block ranges with bounded concurrency, account balances and
mempool contents. Every request is retried with exponential backoff on
transient failures and every response is checked by the Asserter before it
is returned.

Architecture: httpx transport + retry engine + asserter + asyncio worker pool
"""

from rosetta_fetcher.asserter import Asserter, AsserterError
from rosetta_fetcher.errors import (
    ConfigurationError,
    ErrorKind,
    FetcherError,
    InvalidRangeError,
    MalformedResponseError,
    RequestRejectedError,
    RetryExhausted,
)
from rosetta_fetcher.fetcher import Fetcher
from rosetta_fetcher.ratelimit import RateLimiter, TokenBucketRateLimiter
from rosetta_fetcher.retry import RetryEngine, RetryPolicy

__version__ = "0.1.0"

__all__ = [
    "Asserter",
    "AsserterError",
    "ConfigurationError",
    "ErrorKind",
    "Fetcher",
    "FetcherError",
    "InvalidRangeError",
    "MalformedResponseError",
    "RateLimiter",
    "RequestRejectedError",
    "RetryEngine",
    "RetryExhausted",
    "RetryPolicy",
    "TokenBucketRateLimiter",
]
