"""
Pydantic data models for the Rosetta Data API.

Includes:
- Identifiers (NetworkIdentifier, BlockIdentifier, PartialBlockIdentifier, ...)
- Block models (Block, Transaction, Operation, BlockResponse, ...)
- Network models (NetworkListResponse, NetworkStatusResponse, NetworkOptionsResponse, Error)
- Account and mempool models
"""

from rosetta_fetcher.models.account import (
    AccountBalanceResponse,
    MempoolResponse,
    MempoolTransactionResponse,
)
from rosetta_fetcher.models.block import (
    Amount,
    Block,
    BlockResponse,
    BlockTransactionResponse,
    CoinChange,
    Operation,
    RelatedTransaction,
    Transaction,
)
from rosetta_fetcher.models.identifiers import (
    AccountIdentifier,
    BlockIdentifier,
    Currency,
    NetworkIdentifier,
    OperationIdentifier,
    PartialBlockIdentifier,
    SubAccountIdentifier,
    SubNetworkIdentifier,
    TransactionIdentifier,
)
from rosetta_fetcher.models.network import (
    Allow,
    Error,
    NetworkListResponse,
    NetworkOptionsResponse,
    NetworkStatusResponse,
    OperationStatus,
    Peer,
    SyncStatus,
    Version,
)

BlockMap = dict[int, Block]

__all__ = [
    "AccountBalanceResponse",
    "AccountIdentifier",
    "Allow",
    "Amount",
    "Block",
    "BlockIdentifier",
    "BlockMap",
    "BlockResponse",
    "BlockTransactionResponse",
    "CoinChange",
    "Currency",
    "Error",
    "MempoolResponse",
    "MempoolTransactionResponse",
    "NetworkIdentifier",
    "NetworkListResponse",
    "NetworkOptionsResponse",
    "NetworkStatusResponse",
    "Operation",
    "OperationIdentifier",
    "OperationStatus",
    "PartialBlockIdentifier",
    "Peer",
    "RelatedTransaction",
    "SubAccountIdentifier",
    "SubNetworkIdentifier",
    "SyncStatus",
    "Transaction",
    "TransactionIdentifier",
    "Version",
]
