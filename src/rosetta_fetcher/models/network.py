"""
Network metadata models: list, status and options responses.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from rosetta_fetcher.models.identifiers import BlockIdentifier, NetworkIdentifier


class Error(BaseModel):
    """
    Rosetta error object.

    Returned in the body of failed requests and listed in
    ``Allow.errors`` as the catalogue of errors a server may emit.
    """

    model_config = ConfigDict(extra="ignore")

    code: int
    message: str
    description: Optional[str] = None
    retriable: bool = False
    details: Optional[dict[str, Any]] = None


class SyncStatus(BaseModel):
    model_config = ConfigDict(extra="ignore")

    current_index: Optional[int] = None
    target_index: Optional[int] = None
    stage: Optional[str] = None
    synced: Optional[bool] = None


class Peer(BaseModel):
    model_config = ConfigDict(extra="ignore")

    peer_id: str
    metadata: Optional[dict[str, Any]] = None


class NetworkListResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    network_identifiers: list[NetworkIdentifier] = Field(default_factory=list)


class NetworkStatusResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    current_block_identifier: BlockIdentifier
    current_block_timestamp: int = Field(..., description="Milliseconds since the epoch")
    genesis_block_identifier: BlockIdentifier
    oldest_block_identifier: Optional[BlockIdentifier] = None
    sync_status: Optional[SyncStatus] = None
    peers: list[Peer] = Field(default_factory=list)


class Version(BaseModel):
    model_config = ConfigDict(extra="ignore")

    rosetta_version: str
    node_version: str
    middleware_version: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None


class OperationStatus(BaseModel):
    model_config = ConfigDict(extra="ignore")

    status: str
    successful: bool


class Allow(BaseModel):
    """Capabilities a server declares for its network."""

    model_config = ConfigDict(extra="ignore")

    operation_statuses: list[OperationStatus] = Field(default_factory=list)
    operation_types: list[str] = Field(default_factory=list)
    errors: list[Error] = Field(default_factory=list)
    historical_balance_lookup: bool = False
    timestamp_start_index: Optional[int] = None
    call_methods: Optional[list[str]] = None
    balance_exemptions: Optional[list[dict[str, Any]]] = None
    mempool_coins: bool = False


class NetworkOptionsResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    version: Version
    allow: Allow
