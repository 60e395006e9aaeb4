"""
HTTP client for the Rosetta Data API.

Communicates with a Rosetta server using httpx AsyncClient. Every endpoint
is a JSON ``POST``. Supports:
- Connection pooling via a persistent AsyncClient
- Error classification (retriable vs terminal) for the retry engine
- Latency and outcome metrics per endpoint
"""

import time
from typing import Any, Optional

import httpx
import structlog
from pydantic import ValidationError as PydanticValidationError

from rosetta_fetcher.client.base_client import BaseRosettaClient
from rosetta_fetcher.client.exceptions import (
    RosettaConnectionError,
    RosettaRateLimitError,
    RosettaResponseError,
    RosettaServerError,
    RosettaTimeoutError,
    TransportError,
)
from rosetta_fetcher.models.network import Error
from rosetta_fetcher.monitoring.metrics import request_latency_seconds, requests_total


logger = structlog.get_logger(__name__)

# Statuses that mean "try again later" even without a Rosetta Error body
RETRIABLE_STATUS_CODES = frozenset({502, 503, 504})


class RosettaHttpClient(BaseRosettaClient):
    """
    Rosetta transport over HTTP using httpx.

    API Endpoints (all POST):
    - /network/list, /network/status, /network/options
    - /block, /block/transaction
    - /account/balance
    - /mempool, /mempool/transaction
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        max_connections: int = 16,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize HTTP client.

        Args:
            base_url: Rosetta server URL (e.g., http://localhost:8080)
            timeout: Per-request timeout in seconds
            max_connections: httpx connection pool size
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._limits = httpx.Limits(
            max_keepalive_connections=max_connections,
            max_connections=max_connections,
            keepalive_expiry=30.0,
        )
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

        logger.info(
            "Rosetta HTTP client initialized",
            base_url=self.base_url,
            timeout=timeout,
            max_connections=max_connections,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                limits=self._limits,
                transport=self._transport,
            )
            logger.debug("Created new httpx AsyncClient")
        return self._client

    async def call(self, endpoint: str, payload: dict[str, Any]) -> dict[str, Any]:
        start_time = time.monotonic()
        try:
            body = await self._post(endpoint, payload)
        except TransportError as e:
            outcome = "transient_error" if e.retriable else "terminal_error"
            requests_total.labels(endpoint=endpoint, outcome=outcome).inc()
            raise
        finally:
            request_latency_seconds.labels(endpoint=endpoint).observe(
                time.monotonic() - start_time
            )

        requests_total.labels(endpoint=endpoint, outcome="success").inc()
        return body

    async def _post(self, endpoint: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            client = await self._get_client()
            response = await client.post(endpoint, json=payload)
        except httpx.TimeoutException as e:
            logger.warning("Rosetta request timeout", endpoint=endpoint, timeout=self.timeout)
            raise RosettaTimeoutError(
                f"Request to {endpoint} timed out after {self.timeout}s",
                details={"endpoint": endpoint, "error": str(e)},
            ) from e
        except (httpx.UnsupportedProtocol, httpx.InvalidURL) as e:
            # Bad server URL, identical on every attempt
            raise RosettaConnectionError(
                f"Cannot reach {endpoint} at {self.base_url}: {e}",
                retriable=False,
                details={"endpoint": endpoint, "error_type": type(e).__name__},
            ) from e
        except httpx.TransportError as e:
            logger.warning("Rosetta network error", endpoint=endpoint, error=str(e))
            raise RosettaConnectionError(
                f"Network error calling {endpoint}: {e}",
                details={"endpoint": endpoint, "error_type": type(e).__name__},
            ) from e
        except httpx.RequestError as e:
            # Undecodable content encodings and redirect loops
            logger.warning("Rosetta response unreadable", endpoint=endpoint, error=str(e))
            raise RosettaResponseError(
                f"Unreadable response from {endpoint}: {e}",
                details={"endpoint": endpoint, "error_type": type(e).__name__},
            ) from e

        if response.status_code == 429:
            raise RosettaRateLimitError(
                f"Rate limited by server on {endpoint}",
                status_code=429,
                error=self._decode_error(response),
                details={"endpoint": endpoint},
            )

        if not response.is_success:
            error = self._decode_error(response)
            if error is not None:
                retriable = error.retriable
            else:
                retriable = response.status_code in RETRIABLE_STATUS_CODES

            logger.debug(
                "Rosetta server error",
                endpoint=endpoint,
                status_code=response.status_code,
                error_code=error.code if error else None,
                retriable=retriable,
            )
            raise RosettaServerError(
                f"{endpoint} returned {response.status_code}"
                + (f": {error.message} (code {error.code})" if error else ""),
                retriable=retriable,
                status_code=response.status_code,
                error=error,
                details={"endpoint": endpoint, "body": response.text[:500]},
            )

        try:
            body = response.json()
        except ValueError as e:
            raise RosettaResponseError(
                f"Invalid JSON response from {endpoint}",
                status_code=response.status_code,
                details={"endpoint": endpoint, "parse_error": str(e)},
            ) from e

        if not isinstance(body, dict):
            raise RosettaResponseError(
                f"Expected a JSON object from {endpoint}, got {type(body).__name__}",
                status_code=response.status_code,
                details={"endpoint": endpoint},
            )

        return body

    @staticmethod
    def _decode_error(response: httpx.Response) -> Error | None:
        """Decode a Rosetta Error body, None if the body is not one."""
        try:
            return Error.model_validate(response.json())
        except (ValueError, PydanticValidationError):
            return None

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed httpx AsyncClient")
        self._client = None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(base_url={self.base_url}, timeout={self.timeout}s)"
