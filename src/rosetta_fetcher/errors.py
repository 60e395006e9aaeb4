"""
Error taxonomy for the fetcher.

Every failure a caller can observe from a public Fetcher operation is a
FetcherError subclass carrying a closed ErrorKind. Callers branch on
``error.kind`` instead of matching messages.

Transient transport failures never reach callers directly: the retry engine
either recovers from them or raises RetryExhausted wrapping the last one.
Cancellation is not part of this taxonomy; it propagates as
``asyncio.CancelledError``.
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Closed set of terminal failure kinds."""

    EXHAUSTED_RETRIES = "exhausted_retries"
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    INVALID_RANGE = "invalid_range"
    REQUEST_REJECTED = "request_rejected"


class FetcherError(Exception):
    """
    Base exception for all terminal fetcher failures.

    Attributes:
        kind: Failure kind (fixed per subclass)
        message: Human-readable description
        details: Structured data for logging/metrics
        cause: Underlying exception, if any
    """

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class RetryExhausted(FetcherError):
    """
    Raised when the retry budget is spent on transient failures.

    Attributes:
        operation: Name of the retried operation (e.g. "/block")
        attempts: Number of attempts made
        last_error: Final transient error observed
    """

    kind = ErrorKind.EXHAUSTED_RETRIES

    def __init__(self, operation: str, attempts: int, last_error: BaseException):
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"{operation} failed after {attempts} attempts: {last_error}",
            details={
                "operation": operation,
                "attempts": attempts,
                "last_error_type": type(last_error).__name__,
            },
            cause=last_error,
        )


class MalformedResponseError(FetcherError):
    """Server response could not be decoded into the expected shape."""

    kind = ErrorKind.VALIDATION


class ConfigurationError(FetcherError):
    """Fetcher cannot operate with the current network/asserter setup."""

    kind = ErrorKind.CONFIGURATION


class InvalidRangeError(FetcherError):
    """Requested block range is empty or negative."""

    kind = ErrorKind.INVALID_RANGE

    def __init__(self, low: int, high: int):
        self.low = low
        self.high = high
        super().__init__(
            f"Invalid block range [{low}, {high}]",
            details={"low": low, "high": high},
        )


class RequestRejectedError(FetcherError):
    """Server answered with a non-retriable error."""

    kind = ErrorKind.REQUEST_REJECTED
