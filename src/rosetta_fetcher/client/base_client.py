"""
Abstract base client for the Rosetta Data API.

Defines the single-call interface the fetcher depends on. Implementations
perform exactly one network exchange per call: retries, rate limiting and
validation all live above this layer.
"""

from abc import ABC, abstractmethod
from typing import Any

import structlog


logger = structlog.get_logger(__name__)


class BaseRosettaClient(ABC):
    """
    Abstract base class for Rosetta transport clients.

    Responsibilities:
    - Send one request to an endpoint and return the decoded JSON body
    - Translate transport failures into TransportError subclasses with a
      correct ``retriable`` flag

    Does NOT handle:
    - Retries (that's RetryEngine's job)
    - Response validation (that's Asserter's job)
    - Decoding into models (that's Fetcher's job)
    """

    @abstractmethod
    async def call(self, endpoint: str, payload: dict[str, Any]) -> dict[str, Any]:
        """
        Perform one request.

        Args:
            endpoint: API path (e.g., "/network/status")
            payload: JSON request body

        Returns:
            Decoded JSON response body

        Raises:
            TransportError: On any transport or server failure
        """
        pass

    async def close(self) -> None:
        """
        Release connections.

        Default implementation does nothing.
        """
        logger.debug("Closing Rosetta client", client_class=self.__class__.__name__)
