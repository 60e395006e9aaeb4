"""
Block and transaction models.

A /block response may list transactions it did not inline
(``other_transactions``); those are fetched one by one from
/block/transaction and appended to ``Block.transactions`` by the fetcher.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from rosetta_fetcher.models.identifiers import (
    AccountIdentifier,
    BlockIdentifier,
    Currency,
    OperationIdentifier,
    TransactionIdentifier,
)


class Amount(BaseModel):
    """Signed integer value (as a string) in the currency's atomic unit."""

    model_config = ConfigDict(extra="ignore")

    value: str = Field(..., description="Integer amount in atomic units, may be negative")
    currency: Currency
    metadata: Optional[dict[str, Any]] = None


class CoinChange(BaseModel):
    model_config = ConfigDict(extra="ignore")

    coin_identifier: dict[str, Any]
    coin_action: str


class Operation(BaseModel):
    """
    A single balance or state change inside a transaction.

    ``status`` is required for operations inside a block, optional for
    mempool operations and must be omitted for construction operations.
    """

    model_config = ConfigDict(extra="ignore")

    operation_identifier: OperationIdentifier
    related_operations: Optional[list[OperationIdentifier]] = None
    type: str = Field(..., description="Operation type, must be listed in network options")
    status: Optional[str] = Field(default=None, description="Operation status, if known")
    account: Optional[AccountIdentifier] = None
    amount: Optional[Amount] = None
    coin_change: Optional[CoinChange] = None
    metadata: Optional[dict[str, Any]] = None


class RelatedTransaction(BaseModel):
    model_config = ConfigDict(extra="ignore")

    transaction_identifier: TransactionIdentifier
    direction: str
    network_identifier: Optional[dict[str, Any]] = None


class Transaction(BaseModel):
    model_config = ConfigDict(extra="ignore")

    transaction_identifier: TransactionIdentifier
    operations: list[Operation] = Field(default_factory=list)
    related_transactions: Optional[list[RelatedTransaction]] = None
    metadata: Optional[dict[str, Any]] = None


class Block(BaseModel):
    model_config = ConfigDict(extra="ignore")

    block_identifier: BlockIdentifier
    parent_block_identifier: BlockIdentifier
    timestamp: int = Field(..., description="Block timestamp in milliseconds since the epoch")
    transactions: list[Transaction] = Field(default_factory=list)
    metadata: Optional[dict[str, Any]] = None


class BlockResponse(BaseModel):
    """
    Raw /block response.

    ``block`` is omitted when the server has no block for the requested
    identifier.
    """

    model_config = ConfigDict(extra="ignore")

    block: Optional[Block] = None
    other_transactions: Optional[list[TransactionIdentifier]] = None


class BlockTransactionResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    transaction: Transaction
