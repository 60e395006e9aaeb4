"""
Block-level assertions: blocks, transactions, operations and amounts.

Operation types and statuses are checked against the capabilities the
server declared in /network/options, so these checks need the allowed sets
captured at asserter construction.
"""

import re

import structlog

from rosetta_fetcher.asserter.exceptions import (
    BlockAssertionError,
    TransactionAssertionError,
)
from rosetta_fetcher.asserter.network import validate_block_identifier, validate_timestamp
from rosetta_fetcher.models.block import Amount, Block, Operation, Transaction
from rosetta_fetcher.models.identifiers import AccountIdentifier, BlockIdentifier

logger = structlog.get_logger(__name__)

_INTEGER_RE = re.compile(r"^-?[0-9]+$")


def validate_amount(amount: Amount, field_path: str = "amount") -> None:
    if not _INTEGER_RE.match(amount.value):
        raise TransactionAssertionError(
            f"Amount value '{amount.value}' is not an integer string",
            rule_name="amount_value_integer",
            invalid_value=amount.value,
            field_path=f"{field_path}.value",
        )
    if not amount.currency.symbol:
        raise TransactionAssertionError(
            "Currency symbol is empty",
            rule_name="currency_symbol_present",
            field_path=f"{field_path}.currency.symbol",
        )
    if amount.currency.decimals < 0:
        raise TransactionAssertionError(
            f"Currency decimals {amount.currency.decimals} is negative",
            rule_name="currency_decimals_non_negative",
            invalid_value=amount.currency.decimals,
            field_path=f"{field_path}.currency.decimals",
        )


def validate_account_identifier(account: AccountIdentifier, field_path: str = "account") -> None:
    if not account.address:
        raise TransactionAssertionError(
            "Account address is empty",
            rule_name="account_address_present",
            field_path=f"{field_path}.address",
        )
    if account.sub_account is not None and not account.sub_account.address:
        raise TransactionAssertionError(
            "Sub-account address is empty",
            rule_name="sub_account_address_present",
            field_path=f"{field_path}.sub_account.address",
        )


class BlockAssertions:
    """
    Validator for blocks and transactions against declared capabilities.

    Raises BlockAssertionError / TransactionAssertionError on the first
    violation found.
    """

    def __init__(
        self,
        operation_types: list[str],
        operation_statuses: list[str],
        genesis_block: BlockIdentifier,
        timestamp_start_index: int | None = None,
    ):
        self.operation_types = frozenset(operation_types)
        self.operation_statuses = frozenset(operation_statuses)
        self.genesis_block = genesis_block
        self.timestamp_start_index = timestamp_start_index

    def validate_block(self, block: Block) -> None:
        """
        Validate a fully assembled block.

        Raises:
            BlockAssertionError: Header fields inconsistent
            TransactionAssertionError: Any transaction invalid
        """
        validate_block_identifier(block.block_identifier, "block_identifier", BlockAssertionError)
        validate_block_identifier(
            block.parent_block_identifier, "parent_block_identifier", BlockAssertionError
        )

        is_genesis = block.block_identifier.index == self.genesis_block.index
        if not is_genesis:
            if block.block_identifier.hash == block.parent_block_identifier.hash:
                raise BlockAssertionError(
                    "Block hash equals parent hash",
                    rule_name="parent_hash_differs",
                    invalid_value=block.block_identifier.hash,
                    field_path="parent_block_identifier.hash",
                )
            if block.parent_block_identifier.index >= block.block_identifier.index:
                raise BlockAssertionError(
                    f"Parent index {block.parent_block_identifier.index} is not below "
                    f"block index {block.block_identifier.index}",
                    rule_name="parent_index_lower",
                    invalid_value=block.parent_block_identifier.index,
                    field_path="parent_block_identifier.index",
                )

        if self._should_check_timestamp(block.block_identifier.index):
            validate_timestamp(block.timestamp, "timestamp", BlockAssertionError)

        seen: set[str] = set()
        for i, transaction in enumerate(block.transactions):
            tx_hash = transaction.transaction_identifier.hash
            if tx_hash in seen:
                raise BlockAssertionError(
                    f"Transaction {tx_hash} appears twice in block",
                    rule_name="transaction_unique",
                    invalid_value=tx_hash,
                    field_path=f"transactions[{i}]",
                )
            seen.add(tx_hash)

            try:
                self.validate_transaction(transaction)
            except TransactionAssertionError as e:
                e.at(f"transactions[{i}]")
                raise

        logger.debug(
            "Block validated",
            index=block.block_identifier.index,
            transactions=len(block.transactions),
        )

    def _should_check_timestamp(self, index: int) -> bool:
        if self.timestamp_start_index is not None:
            return index >= self.timestamp_start_index
        # Genesis timestamps are frequently zero
        return index != self.genesis_block.index

    def validate_transaction(
        self, transaction: Transaction, construction: bool = False, mempool: bool = False
    ) -> None:
        """
        Validate one transaction.

        Args:
            transaction: Transaction to validate
            construction: True for construction transactions, whose
                operations must not carry a status
            mempool: True for mempool transactions, whose operations may
                omit the status but must otherwise use an allowed one
        """
        if not transaction.transaction_identifier.hash:
            raise TransactionAssertionError(
                "Transaction hash is empty",
                rule_name="transaction_hash_present",
                field_path="transaction_identifier.hash",
            )

        for i, operation in enumerate(transaction.operations):
            try:
                self.validate_operation(operation, i, construction, mempool)
            except TransactionAssertionError as e:
                e.at(f"operations[{i}]")
                raise

    def validate_operation(
        self,
        operation: Operation,
        expected_index: int,
        construction: bool = False,
        mempool: bool = False,
    ) -> None:
        identifier = operation.operation_identifier
        if identifier.index != expected_index:
            raise TransactionAssertionError(
                f"Operation index {identifier.index} out of sequence, expected {expected_index}",
                rule_name="operation_index_sequential",
                invalid_value=identifier.index,
                field_path="operation_identifier.index",
            )
        if identifier.network_index is not None and identifier.network_index < 0:
            raise TransactionAssertionError(
                "Operation network_index is negative",
                rule_name="network_index_non_negative",
                invalid_value=identifier.network_index,
                field_path="operation_identifier.network_index",
            )

        for related in operation.related_operations or []:
            if related.index >= identifier.index:
                raise TransactionAssertionError(
                    f"Related operation {related.index} does not precede operation {identifier.index}",
                    rule_name="related_operation_precedes",
                    invalid_value=related.index,
                    field_path="related_operations",
                )

        if operation.type not in self.operation_types:
            raise TransactionAssertionError(
                f"Operation type '{operation.type}' is not allowed by the network",
                rule_name="operation_type_allowed",
                invalid_value=operation.type,
                expected_values=sorted(self.operation_types),
                field_path="type",
            )

        if construction:
            if operation.status is not None:
                raise TransactionAssertionError(
                    "Operation status must be empty for construction",
                    rule_name="operation_status_absent",
                    invalid_value=operation.status,
                    field_path="status",
                )
        elif mempool and operation.status is None:
            pass
        elif operation.status not in self.operation_statuses:
            raise TransactionAssertionError(
                f"Operation status '{operation.status}' is not allowed by the network",
                rule_name="operation_status_allowed",
                invalid_value=operation.status,
                expected_values=sorted(self.operation_statuses),
                field_path="status",
            )

        if operation.account is not None:
            validate_account_identifier(operation.account)
        if operation.amount is not None:
            validate_amount(operation.amount)
