"""
Rosetta transport clients.

Components:
- BaseRosettaClient: Abstract single-call transport interface
- RosettaHttpClient: httpx implementation
- exceptions: Transport errors with a retriable flag
"""

from rosetta_fetcher.client.base_client import BaseRosettaClient
from rosetta_fetcher.client.exceptions import (
    RosettaConnectionError,
    RosettaRateLimitError,
    RosettaResponseError,
    RosettaServerError,
    RosettaTimeoutError,
    TransportError,
)
from rosetta_fetcher.client.http_client import RosettaHttpClient

__all__ = [
    "BaseRosettaClient",
    "RosettaHttpClient",
    "TransportError",
    "RosettaConnectionError",
    "RosettaTimeoutError",
    "RosettaRateLimitError",
    "RosettaServerError",
    "RosettaResponseError",
]
