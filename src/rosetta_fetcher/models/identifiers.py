"""
Identifier models shared by every Rosetta endpoint.

Identifiers are frozen: once decoded from a server response they are never
mutated, so they can be shared freely between concurrent fetches.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class SubNetworkIdentifier(BaseModel):
    """Shard or sub-chain within a network."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    network: str = Field(..., description="Sub-network name")
    metadata: Optional[dict[str, Any]] = None


class NetworkIdentifier(BaseModel):
    """
    Identifies the blockchain and network a request targets.

    Example: ``NetworkIdentifier(blockchain="bitcoin", network="mainnet")``.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    blockchain: str = Field(..., description="Blockchain name (e.g., 'bitcoin')")
    network: str = Field(..., description="Network name (e.g., 'mainnet', 'testnet3')")
    sub_network_identifier: Optional[SubNetworkIdentifier] = None

    def matches(self, blockchain: str, network: str) -> bool:
        return self.blockchain == blockchain and self.network == network


class BlockIdentifier(BaseModel):
    """Fully qualified block: index and hash."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    index: int = Field(..., description="Block height")
    hash: str = Field(..., description="Block hash")


class PartialBlockIdentifier(BaseModel):
    """
    Block lookup key: by index, by hash, by both, or neither.

    Leaving both fields unset asks the server for its current block.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    index: Optional[int] = None
    hash: Optional[str] = None

    @classmethod
    def from_block_identifier(cls, block_identifier: BlockIdentifier) -> "PartialBlockIdentifier":
        return cls(index=block_identifier.index, hash=block_identifier.hash)

    @classmethod
    def at_index(cls, index: int) -> "PartialBlockIdentifier":
        return cls(index=index)


class TransactionIdentifier(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    hash: str = Field(..., description="Transaction hash")


class OperationIdentifier(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    index: int = Field(..., description="Position of the operation within its transaction")
    network_index: Optional[int] = None


class SubAccountIdentifier(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    address: str
    metadata: Optional[dict[str, Any]] = None


class AccountIdentifier(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    address: str = Field(..., description="Account address")
    sub_account: Optional[SubAccountIdentifier] = None
    metadata: Optional[dict[str, Any]] = None


class Currency(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    symbol: str = Field(..., description="Currency symbol (e.g., 'BTC')")
    decimals: int = Field(..., description="Number of decimal places in the standard unit")
    metadata: Optional[dict[str, Any]] = None
