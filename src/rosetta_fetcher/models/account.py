"""
Account balance and mempool models.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from rosetta_fetcher.models.block import Amount, Transaction
from rosetta_fetcher.models.identifiers import BlockIdentifier, TransactionIdentifier


class AccountBalanceResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    block_identifier: BlockIdentifier
    balances: list[Amount] = Field(default_factory=list)
    metadata: Optional[dict[str, Any]] = None


class MempoolResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    transaction_identifiers: list[TransactionIdentifier] = Field(default_factory=list)


class MempoolTransactionResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    transaction: Transaction
    metadata: Optional[dict[str, Any]] = None
