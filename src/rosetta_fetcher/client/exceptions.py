"""
Transport-level exceptions for the Rosetta client layer.

Every exception carries a ``retriable`` flag: the retry engine retries
retriable failures and lets everything else through as terminal. The
flag comes from the failure class (timeouts, connection errors and rate
limiting are always retriable) or, for server errors, from the
``retriable`` field of the Rosetta Error body.
"""

from typing import Any

from rosetta_fetcher.models.network import Error


class TransportError(Exception):
    """
    Base exception for all transport errors.

    Attributes:
        message: Human-readable description
        retriable: Whether the same request may succeed if repeated
        status_code: HTTP status, when a response was received
        error: Decoded Rosetta Error body, when present
        details: Structured data for logging
    """

    default_retriable = False

    def __init__(
        self,
        message: str,
        retriable: bool | None = None,
        status_code: int | None = None,
        error: Error | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.retriable = self.default_retriable if retriable is None else retriable
        self.status_code = status_code
        self.error = error
        self.details = details or {}


class RosettaConnectionError(TransportError):
    """
    Raised when the server cannot be reached.

    Includes DNS failures, refused and reset connections.
    """

    default_retriable = True


class RosettaTimeoutError(RosettaConnectionError):
    """Raised when a request exceeds the configured timeout."""


class RosettaRateLimitError(TransportError):
    """Raised on HTTP 429."""

    default_retriable = True


class RosettaServerError(TransportError):
    """
    Raised when the server answers with a non-2xx status.

    Retriable only when the Rosetta Error body says so, or when the status
    is a gateway/availability error without a body.
    """


class RosettaResponseError(TransportError):
    """Raised when a response cannot be read or its 2xx body is not a JSON object."""
