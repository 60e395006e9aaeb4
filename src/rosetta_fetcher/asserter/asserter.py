"""
Asserter: protocol-conformance gate for Rosetta responses.

An Asserter is built once from a server's network status and options, then
shared read-only by every fetch. Each ``validate_*`` method either returns
silently or raises an AsserterError subclass.
"""

import structlog

from rosetta_fetcher.asserter import network as network_rules
from rosetta_fetcher.asserter.block import BlockAssertions, validate_amount
from rosetta_fetcher.asserter.exceptions import (
    AsserterError,
    NetworkAssertionError,
    TransactionAssertionError,
)
from rosetta_fetcher.models.account import AccountBalanceResponse, MempoolResponse
from rosetta_fetcher.models.block import Block, Transaction
from rosetta_fetcher.models.identifiers import BlockIdentifier, NetworkIdentifier
from rosetta_fetcher.models.network import (
    Error,
    NetworkListResponse,
    NetworkOptionsResponse,
    NetworkStatusResponse,
    OperationStatus,
)
from rosetta_fetcher.monitoring.metrics import assertion_failures_total

logger = structlog.get_logger(__name__)


class Asserter:
    """
    Validates responses against the capabilities a server declared.

    Attributes:
        network: Network this asserter was built for
        genesis_block: Genesis block identifier from network status
        operation_types: Allowed operation types
        operation_statuses: Allowed operation statuses with success flags
        errors: Error catalogue declared by the server
        historical_balance_lookup: Whether /account/balance accepts a block identifier
    """

    def __init__(
        self,
        network: NetworkIdentifier,
        genesis_block: BlockIdentifier,
        operation_types: list[str],
        operation_statuses: list[OperationStatus],
        errors: list[Error] | None = None,
        historical_balance_lookup: bool = False,
        timestamp_start_index: int | None = None,
    ):
        network_rules.validate_network_identifier(network)
        network_rules.validate_block_identifier(genesis_block, "genesis_block_identifier")

        self.network = network
        self.genesis_block = genesis_block
        self.operation_types = list(operation_types)
        self.operation_statuses = list(operation_statuses)
        self.errors = list(errors or [])
        self._errors_by_code = {error.code: error for error in self.errors}
        self.historical_balance_lookup = historical_balance_lookup
        self._blocks = BlockAssertions(
            operation_types=self.operation_types,
            operation_statuses=[s.status for s in self.operation_statuses],
            genesis_block=genesis_block,
            timestamp_start_index=timestamp_start_index,
        )

        logger.info(
            "Asserter initialized",
            blockchain=network.blockchain,
            network=network.network,
            genesis_index=genesis_block.index,
            operation_types=len(self.operation_types),
            operation_statuses=len(self.operation_statuses),
            historical_balance_lookup=historical_balance_lookup,
        )

    @classmethod
    def from_responses(
        cls,
        network: NetworkIdentifier,
        status: NetworkStatusResponse,
        options: NetworkOptionsResponse,
    ) -> "Asserter":
        """
        Build an asserter from /network/status and /network/options.

        Raises:
            NetworkAssertionError: Status or options are malformed or contradictory
        """
        _checked("network_status", network_rules.validate_network_status, status)
        _checked("network_options", network_rules.validate_network_options, options)

        return cls(
            network=network,
            genesis_block=status.genesis_block_identifier,
            operation_types=options.allow.operation_types,
            operation_statuses=options.allow.operation_statuses,
            errors=options.allow.errors,
            historical_balance_lookup=options.allow.historical_balance_lookup,
            timestamp_start_index=options.allow.timestamp_start_index,
        )

    @staticmethod
    def validate_network_list(response: NetworkListResponse) -> None:
        _checked("network_list", network_rules.validate_network_list, response)

    def validate_network_status(self, status: NetworkStatusResponse) -> None:
        _checked("network_status", network_rules.validate_network_status, status)

    def validate_network_options(self, options: NetworkOptionsResponse) -> None:
        _checked("network_options", network_rules.validate_network_options, options)

    def validate_block(self, block: Block) -> None:
        _checked("block", self._blocks.validate_block, block)

    def validate_transaction(
        self, transaction: Transaction, construction: bool = False, mempool: bool = False
    ) -> None:
        _checked("transaction", self._blocks.validate_transaction, transaction, construction, mempool)

    def validate_account_balance(self, response: AccountBalanceResponse) -> None:
        _checked("account_balance", self._validate_account_balance, response)

    def validate_mempool(self, response: MempoolResponse) -> None:
        _checked("mempool", self._validate_mempool, response)

    def validate_error(self, error: Error) -> None:
        """
        Check a server error against the declared error catalogue.

        Servers that declare no errors are not checked.
        """
        if self._errors_by_code:
            _checked("error", self._validate_error, error)

    def operation_successful(self, status: str) -> bool:
        """Whether an operation status means the operation took effect."""
        for allowed in self.operation_statuses:
            if allowed.status == status:
                return allowed.successful
        raise TransactionAssertionError(
            f"Operation status '{status}' is not allowed by the network",
            rule_name="operation_status_allowed",
            invalid_value=status,
        )

    def _validate_error(self, error: Error) -> None:
        declared = self._errors_by_code.get(error.code)
        if declared is None:
            raise NetworkAssertionError(
                f"Error code {error.code} is not declared by the network",
                rule_name="error_code_declared",
                invalid_value=error.code,
                expected_values=[str(code) for code in sorted(self._errors_by_code)],
                field_path="code",
            )
        if error.message != declared.message:
            raise NetworkAssertionError(
                f"Error {error.code} message '{error.message}' differs from the declared '{declared.message}'",
                rule_name="error_message_matches",
                invalid_value=error.message,
                field_path="message",
            )
        if error.retriable != declared.retriable:
            raise NetworkAssertionError(
                f"Error {error.code} retriable flag differs from the declared one",
                rule_name="error_retriable_matches",
                invalid_value=error.retriable,
                field_path="retriable",
            )

    @staticmethod
    def _validate_account_balance(response: AccountBalanceResponse) -> None:
        network_rules.validate_block_identifier(response.block_identifier, "block_identifier")

        currencies: set[tuple[str, int]] = set()
        for i, balance in enumerate(response.balances):
            validate_amount(balance, f"balances[{i}]")
            key = (balance.currency.symbol, balance.currency.decimals)
            if key in currencies:
                raise TransactionAssertionError(
                    f"Currency {balance.currency.symbol} reported twice",
                    rule_name="balance_currency_unique",
                    invalid_value=balance.currency.symbol,
                    field_path=f"balances[{i}].currency",
                )
            currencies.add(key)

    @staticmethod
    def _validate_mempool(response: MempoolResponse) -> None:
        seen: set[str] = set()
        for i, identifier in enumerate(response.transaction_identifiers):
            if not identifier.hash:
                raise TransactionAssertionError(
                    "Mempool transaction hash is empty",
                    rule_name="transaction_hash_present",
                    field_path=f"transaction_identifiers[{i}].hash",
                )
            if identifier.hash in seen:
                raise TransactionAssertionError(
                    f"Mempool transaction {identifier.hash} listed twice",
                    rule_name="transaction_unique",
                    invalid_value=identifier.hash,
                    field_path=f"transaction_identifiers[{i}]",
                )
            seen.add(identifier.hash)


def _checked(check: str, rule, *args) -> None:
    try:
        rule(*args)
    except AsserterError as e:
        assertion_failures_total.labels(check=check).inc()
        logger.warning(
            "Assertion failed",
            check=check,
            error=e.message,
            rule_name=e.rule_name,
            field_path=e.field_path,
        )
        raise
