"""
Fetcher: resilient, validated access to a Rosetta Data API.

Every request runs inside the RetryEngine (rate limited per attempt when a
limiter is configured) and every block, status or balance handed back to a
caller has passed the Asserter.

Usage:
    async with Fetcher("http://localhost:8080") as fetcher:
        network, status = await fetcher.initialize_asserter()
        block = await fetcher.fetch_block(
            network, PartialBlockIdentifier.from_block_identifier(status.current_block_identifier)
        )
        blocks = await fetcher.fetch_block_range(network, 0, 10)
"""

from typing import TYPE_CHECKING, Any, Optional, TypeVar

import structlog
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from rosetta_fetcher.asserter import Asserter, AsserterError
from rosetta_fetcher.client.base_client import BaseRosettaClient
from rosetta_fetcher.client.exceptions import RosettaResponseError, TransportError
from rosetta_fetcher.client.http_client import RosettaHttpClient
from rosetta_fetcher.errors import (
    ConfigurationError,
    InvalidRangeError,
    MalformedResponseError,
    RequestRejectedError,
)
from rosetta_fetcher.fetcher.network import select_primary_network
from rosetta_fetcher.fetcher.workers import run_bounded
from rosetta_fetcher.logging_config import network_context
from rosetta_fetcher.models import BlockMap
from rosetta_fetcher.models.account import (
    AccountBalanceResponse,
    MempoolResponse,
    MempoolTransactionResponse,
)
from rosetta_fetcher.models.block import Block, BlockResponse, BlockTransactionResponse, Transaction
from rosetta_fetcher.models.identifiers import (
    AccountIdentifier,
    BlockIdentifier,
    NetworkIdentifier,
    PartialBlockIdentifier,
    TransactionIdentifier,
)
from rosetta_fetcher.models.network import (
    NetworkListResponse,
    NetworkOptionsResponse,
    NetworkStatusResponse,
)
from rosetta_fetcher.monitoring.metrics import blocks_fetched_total, other_transactions_fetched_total
from rosetta_fetcher.ratelimit import RateLimiter, TokenBucketRateLimiter
from rosetta_fetcher.retry import RetryEngine, RetryPolicy

if TYPE_CHECKING:
    from rosetta_fetcher.config import Settings

logger = structlog.get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

DEFAULT_BLOCK_CONCURRENCY = 8
DEFAULT_TRANSACTION_CONCURRENCY = 8


def _dump(model: BaseModel) -> dict[str, Any]:
    return model.model_dump(mode="json", exclude_none=True)


class Fetcher:
    """
    Rosetta Data API client with retries, rate limiting and validation.

    The primary network and Asserter are set once by
    ``initialize_asserter()`` and only read afterwards, so a single Fetcher
    can serve many concurrent fetches.

    Attributes:
        client: Transport performing single requests
        retry_engine: Retry engine applied to every request
        rate_limiter: Optional limiter acquired before every attempt
        asserter: Asserter gating every response (None until initialized)
        primary_network: Network chosen by ``initialize_asserter()``
        block_concurrency: Parallel block fetches in ``fetch_block_range``
        transaction_concurrency: Parallel other-transaction fetches per block
    """

    def __init__(
        self,
        server_url: str = "http://localhost:8080",
        retry_policy: Optional[RetryPolicy] = None,
        block_concurrency: int = DEFAULT_BLOCK_CONCURRENCY,
        transaction_concurrency: int = DEFAULT_TRANSACTION_CONCURRENCY,
        rate_limiter: Optional[RateLimiter] = None,
        client: Optional[BaseRosettaClient] = None,
        asserter: Optional[Asserter] = None,
        preferred_network: Optional[tuple[str, str]] = None,
        timeout: float = 10.0,
        max_connections: int = 16,
        retry_engine: Optional[RetryEngine] = None,
    ):
        """
        Initialize fetcher.

        Args:
            server_url: Rosetta server URL (ignored when ``client`` is given)
            retry_policy: Retry budget per request (RetryPolicy() defaults if None)
            block_concurrency: Worker budget for block ranges
            transaction_concurrency: Worker budget for other-transaction resolution
            rate_limiter: Shared limiter acquired before every attempt
            client: Transport to use instead of an HTTP client for ``server_url``
            asserter: Pre-built asserter, replaced by ``initialize_asserter()``
            preferred_network: ``(blockchain, network)`` to select as primary
            timeout: Per-request HTTP timeout in seconds
            max_connections: HTTP connection pool size
            retry_engine: Pre-built engine (overrides ``retry_policy``)
        """
        if block_concurrency < 1 or transaction_concurrency < 1:
            raise ValueError("concurrency budgets must be >= 1")

        self.client = client or RosettaHttpClient(
            server_url, timeout=timeout, max_connections=max_connections
        )
        self.retry_engine = retry_engine or RetryEngine(retry_policy or RetryPolicy())
        self.rate_limiter = rate_limiter
        self.asserter = asserter
        self.primary_network: Optional[NetworkIdentifier] = None
        self.preferred_network = preferred_network
        self.block_concurrency = block_concurrency
        self.transaction_concurrency = transaction_concurrency

        logger.info(
            "Fetcher initialized",
            client=repr(self.client),
            block_concurrency=block_concurrency,
            transaction_concurrency=transaction_concurrency,
            rate_limited=rate_limiter is not None,
            retry_policy=repr(self.retry_engine.policy),
        )

    @classmethod
    def from_settings(cls, settings: "Settings", **overrides: Any) -> "Fetcher":
        """Build a fetcher from application settings; keyword overrides win."""
        rate_limiter = None
        if settings.RATE_LIMIT_PER_SECOND > 0:
            rate_limiter = TokenBucketRateLimiter(
                settings.RATE_LIMIT_PER_SECOND, settings.RATE_LIMIT_BURST
            )

        kwargs: dict[str, Any] = {
            "server_url": settings.SERVER_URL,
            "retry_policy": settings.retry_policy(),
            "block_concurrency": settings.BLOCK_CONCURRENCY,
            "transaction_concurrency": settings.TRANSACTION_CONCURRENCY,
            "rate_limiter": rate_limiter,
            "preferred_network": settings.preferred_network(),
            "timeout": settings.HTTP_TIMEOUT,
            "max_connections": settings.MAX_CONNECTIONS,
        }
        kwargs.update(overrides)
        return cls(**kwargs)

    async def close(self) -> None:
        await self.client.close()

    async def __aenter__(self) -> "Fetcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # === Transport ===

    async def _request(self, endpoint: str, payload: dict[str, Any], response_model: type[M]) -> M:
        """
        Send one logical request (retried) and decode the response.

        Raises:
            RetryExhausted: Transient failures outlasted the retry budget
            RequestRejectedError: Server answered with a non-retriable error
            MalformedResponseError: Response body did not match ``response_model``
            NetworkAssertionError: Server rejected the request with an error it never declared
        """

        async def attempt() -> dict[str, Any]:
            if self.rate_limiter is not None:
                await self.rate_limiter.acquire()
            return await self.client.call(endpoint, payload)

        try:
            body = await self.retry_engine.run(attempt, operation=endpoint)
        except RosettaResponseError as e:
            raise MalformedResponseError(
                f"{endpoint} returned an unreadable body",
                details={"endpoint": endpoint, **e.details},
                cause=e,
            )
        except TransportError as e:
            details: dict[str, Any] = {"endpoint": endpoint, "status_code": e.status_code}
            if e.error is not None:
                details["error_code"] = e.error.code
                if self.asserter is not None:
                    self._check_declared_error(endpoint, e)
            raise RequestRejectedError(
                f"{endpoint} rejected: {e.message}", details=details, cause=e
            )

        try:
            return response_model.model_validate(body)
        except PydanticValidationError as e:
            raise MalformedResponseError(
                f"{endpoint} response does not match {response_model.__name__}",
                details={"endpoint": endpoint, "errors": e.errors(include_url=False)[:5]},
                cause=e,
            )

    def _check_declared_error(self, endpoint: str, rejection: TransportError) -> None:
        """Raise the assertion failure if the server sent an error it never declared."""
        try:
            self.asserter.validate_error(rejection.error)
        except AsserterError as e:
            e.details["endpoint"] = endpoint
            raise e from rejection

    def _require_asserter(self) -> Asserter:
        if self.asserter is None:
            raise ConfigurationError("Asserter not initialized, call initialize_asserter() first")
        return self.asserter

    # === Network ===

    async def network_list(self) -> NetworkListResponse:
        response = await self._request("/network/list", {"metadata": {}}, NetworkListResponse)
        Asserter.validate_network_list(response)
        return response

    async def network_status(self, network: NetworkIdentifier) -> NetworkStatusResponse:
        response = await self._request(
            "/network/status", {"network_identifier": _dump(network)}, NetworkStatusResponse
        )
        if self.asserter is not None:
            self.asserter.validate_network_status(response)
        return response

    async def network_options(self, network: NetworkIdentifier) -> NetworkOptionsResponse:
        response = await self._request(
            "/network/options", {"network_identifier": _dump(network)}, NetworkOptionsResponse
        )
        if self.asserter is not None:
            self.asserter.validate_network_options(response)
        return response

    async def initialize_asserter(self) -> tuple[NetworkIdentifier, NetworkStatusResponse]:
        """
        Discover the primary network and build the Asserter from it.

        Returns:
            Tuple of (primary network, its validated status)

        Raises:
            ConfigurationError: No usable network, or options/status the
                Asserter cannot be built from
            RetryExhausted: Server unreachable within the retry budget
        """
        networks = await self.network_list()
        primary = select_primary_network(networks.network_identifiers, self.preferred_network)

        status = await self.network_status(primary)
        options = await self.network_options(primary)

        try:
            # Validates both status and options
            asserter = Asserter.from_responses(primary, status, options)
        except AsserterError as e:
            raise ConfigurationError(
                f"Cannot build asserter for {primary.blockchain}/{primary.network}: {e.message}",
                details=e.details,
                cause=e,
            )

        self.asserter = asserter
        self.primary_network = primary

        logger.info(
            "Fetcher asserter initialized",
            blockchain=primary.blockchain,
            network=primary.network,
            current_index=status.current_block_identifier.index,
            genesis_index=status.genesis_block_identifier.index,
            rosetta_version=options.version.rosetta_version,
            node_version=options.version.node_version,
        )
        return primary, status

    # === Blocks ===

    async def fetch_block(
        self,
        network: NetworkIdentifier,
        block_identifier: Optional[PartialBlockIdentifier] = None,
    ) -> Block:
        """
        Fetch one block with all of its transactions, validated.

        Transactions the server lists in ``other_transactions`` are fetched
        individually and appended after the inline ones, in listed order.

        Args:
            network: Network to query
            block_identifier: Block to fetch (current block if None)

        Raises:
            AsserterError: Assembled block failed validation
            MalformedResponseError: Missing block or mismatched identifiers
            RetryExhausted / RequestRejectedError: Any request failed
            ConfigurationError: Asserter not initialized
        """
        asserter = self._require_asserter()
        block_identifier = block_identifier or PartialBlockIdentifier()

        response = await self._request(
            "/block",
            {
                "network_identifier": _dump(network),
                "block_identifier": _dump(block_identifier),
            },
            BlockResponse,
        )
        if response.block is None:
            raise MalformedResponseError(
                "Server returned no block",
                details={"block_identifier": _dump(block_identifier)},
            )

        block = response.block
        _check_block_matches(block, block_identifier)

        other_transactions = response.other_transactions or []
        if other_transactions:
            resolved = await run_bounded(
                other_transactions,
                lambda transaction_identifier: self._fetch_block_transaction(
                    network, block.block_identifier, transaction_identifier
                ),
                self.transaction_concurrency,
                name="other-transactions",
            )
            block = block.model_copy(update={"transactions": [*block.transactions, *resolved]})

        asserter.validate_block(block)

        blocks_fetched_total.inc()
        logger.debug(
            "Block fetched",
            index=block.block_identifier.index,
            hash=block.block_identifier.hash,
            transactions=len(block.transactions),
            other_transactions=len(other_transactions),
        )
        return block

    async def _fetch_block_transaction(
        self,
        network: NetworkIdentifier,
        block_identifier: BlockIdentifier,
        transaction_identifier: TransactionIdentifier,
    ) -> Transaction:
        response = await self._request(
            "/block/transaction",
            {
                "network_identifier": _dump(network),
                "block_identifier": _dump(block_identifier),
                "transaction_identifier": _dump(transaction_identifier),
            },
            BlockTransactionResponse,
        )

        returned = response.transaction.transaction_identifier
        if returned.hash != transaction_identifier.hash:
            raise MalformedResponseError(
                f"Requested transaction {transaction_identifier.hash}, got {returned.hash}",
                details={
                    "block_index": block_identifier.index,
                    "requested": transaction_identifier.hash,
                    "returned": returned.hash,
                },
            )

        other_transactions_fetched_total.inc()
        return response.transaction

    async def fetch_block_range(self, network: NetworkIdentifier, low: int, high: int) -> BlockMap:
        """
        Fetch every block in ``[low, high]`` with bounded concurrency.

        Returns:
            Mapping index -> Block with exactly ``high - low + 1`` entries,
            keys in ascending order

        Raises:
            InvalidRangeError: ``low > high`` or ``low < 0`` (no request made)
            FetcherError: The first block fetch that failed; the rest are
                cancelled and no partial result is returned
        """
        if low < 0 or low > high:
            raise InvalidRangeError(low, high)
        self._require_asserter()

        indices = range(low, high + 1)
        logger.info(
            "Fetching block range",
            low=low,
            high=high,
            blocks=len(indices),
            concurrency=min(self.block_concurrency, len(indices)),
        )

        with network_context(network):
            blocks = await run_bounded(
                indices,
                lambda index: self.fetch_block(network, PartialBlockIdentifier.at_index(index)),
                self.block_concurrency,
                name="block-range",
            )
        return dict(zip(indices, blocks))

    # === Accounts & Mempool ===

    async def account_balance(
        self,
        network: NetworkIdentifier,
        account: AccountIdentifier,
        block_identifier: Optional[PartialBlockIdentifier] = None,
    ) -> AccountBalanceResponse:
        """
        Fetch an account's balances, at a past block when supported.

        Raises:
            ConfigurationError: Historical lookup requested but not supported
        """
        asserter = self._require_asserter()
        if block_identifier is not None and not asserter.historical_balance_lookup:
            raise ConfigurationError(
                "Network does not support historical balance lookup",
                details={"block_identifier": _dump(block_identifier)},
            )

        payload: dict[str, Any] = {
            "network_identifier": _dump(network),
            "account_identifier": _dump(account),
        }
        if block_identifier is not None:
            payload["block_identifier"] = _dump(block_identifier)

        response = await self._request("/account/balance", payload, AccountBalanceResponse)
        asserter.validate_account_balance(response)
        if block_identifier is not None:
            _check_block_matches(response.block_identifier, block_identifier)
        return response

    async def mempool(self, network: NetworkIdentifier) -> MempoolResponse:
        asserter = self._require_asserter()
        response = await self._request(
            "/mempool", {"network_identifier": _dump(network)}, MempoolResponse
        )
        asserter.validate_mempool(response)
        return response

    async def mempool_transaction(
        self,
        network: NetworkIdentifier,
        transaction_identifier: TransactionIdentifier,
    ) -> Transaction:
        asserter = self._require_asserter()
        response = await self._request(
            "/mempool/transaction",
            {
                "network_identifier": _dump(network),
                "transaction_identifier": _dump(transaction_identifier),
            },
            MempoolTransactionResponse,
        )
        returned = response.transaction.transaction_identifier
        if returned.hash != transaction_identifier.hash:
            raise MalformedResponseError(
                f"Requested mempool transaction {transaction_identifier.hash}, got {returned.hash}",
                details={"requested": transaction_identifier.hash, "returned": returned.hash},
            )
        asserter.validate_transaction(response.transaction, mempool=True)
        return response.transaction


def _check_block_matches(block: Block | BlockIdentifier, requested: PartialBlockIdentifier) -> None:
    """Raise MalformedResponseError if the server answered for a different block."""
    identifier = block.block_identifier if isinstance(block, Block) else block
    if requested.index is not None and identifier.index != requested.index:
        raise MalformedResponseError(
            f"Requested block {requested.index}, got {identifier.index}",
            details={"requested_index": requested.index, "returned_index": identifier.index},
        )
    if requested.hash is not None and identifier.hash != requested.hash:
        raise MalformedResponseError(
            f"Requested block {requested.hash}, got {identifier.hash}",
            details={"requested_hash": requested.hash, "returned_hash": identifier.hash},
        )
