"""
Network-level assertions: identifiers, list, status and options responses.

These checks need no prior knowledge of the server, so they are plain
functions usable before an Asserter exists.
"""

from rosetta_fetcher.asserter.exceptions import AsserterError, NetworkAssertionError
from rosetta_fetcher.models.identifiers import BlockIdentifier, NetworkIdentifier
from rosetta_fetcher.models.network import (
    Allow,
    Error,
    NetworkListResponse,
    NetworkOptionsResponse,
    NetworkStatusResponse,
)

# Timestamps outside [2000-01-01, 2040-01-01) are almost certainly in the wrong unit
MIN_UNIX_EPOCH_MS = 946_713_600_000
MAX_UNIX_EPOCH_MS = 2_209_017_600_000


def validate_timestamp(
    timestamp: int,
    field_path: str = "timestamp",
    error_cls: type[AsserterError] = NetworkAssertionError,
) -> None:
    if not MIN_UNIX_EPOCH_MS <= timestamp < MAX_UNIX_EPOCH_MS:
        raise error_cls(
            f"Timestamp {timestamp} is not a plausible millisecond epoch",
            rule_name="timestamp_in_range",
            invalid_value=timestamp,
            field_path=field_path,
        )


def validate_block_identifier(
    block_identifier: BlockIdentifier,
    field_path: str,
    error_cls: type[AsserterError] = NetworkAssertionError,
) -> None:
    if block_identifier.index < 0:
        raise error_cls(
            f"Block index {block_identifier.index} is negative",
            rule_name="block_index_non_negative",
            invalid_value=block_identifier.index,
            field_path=f"{field_path}.index",
        )
    if not block_identifier.hash:
        raise error_cls(
            "Block hash is empty",
            rule_name="block_hash_present",
            field_path=f"{field_path}.hash",
        )


def validate_network_identifier(network: NetworkIdentifier, field_path: str = "network_identifier") -> None:
    if not network.blockchain:
        raise NetworkAssertionError(
            "Network blockchain is empty",
            rule_name="blockchain_present",
            field_path=f"{field_path}.blockchain",
        )
    if not network.network:
        raise NetworkAssertionError(
            "Network name is empty",
            rule_name="network_present",
            field_path=f"{field_path}.network",
        )
    if network.sub_network_identifier is not None and not network.sub_network_identifier.network:
        raise NetworkAssertionError(
            "Sub-network name is empty",
            rule_name="sub_network_present",
            field_path=f"{field_path}.sub_network_identifier.network",
        )


def validate_network_list(response: NetworkListResponse) -> None:
    """
    Validate a /network/list response.

    An empty list is structurally valid; whether it is usable is the
    caller's decision.
    """
    seen: set[tuple[str, str, str | None]] = set()
    for i, network in enumerate(response.network_identifiers):
        path = f"network_identifiers[{i}]"
        validate_network_identifier(network, path)

        sub = network.sub_network_identifier.network if network.sub_network_identifier else None
        key = (network.blockchain, network.network, sub)
        if key in seen:
            raise NetworkAssertionError(
                f"Network {network.blockchain}/{network.network} listed twice",
                rule_name="network_unique",
                invalid_value=key,
                field_path=path,
            )
        seen.add(key)


def validate_network_status(status: NetworkStatusResponse) -> None:
    validate_block_identifier(status.current_block_identifier, "current_block_identifier")
    validate_timestamp(status.current_block_timestamp, "current_block_timestamp")
    validate_block_identifier(status.genesis_block_identifier, "genesis_block_identifier")

    if status.oldest_block_identifier is not None:
        validate_block_identifier(status.oldest_block_identifier, "oldest_block_identifier")

    if status.sync_status is not None:
        for name in ("current_index", "target_index"):
            value = getattr(status.sync_status, name)
            if value is not None and value < 0:
                raise NetworkAssertionError(
                    f"Sync status {name} is negative",
                    rule_name="sync_index_non_negative",
                    invalid_value=value,
                    field_path=f"sync_status.{name}",
                )

    for i, peer in enumerate(status.peers):
        if not peer.peer_id:
            raise NetworkAssertionError(
                "Peer id is empty",
                rule_name="peer_id_present",
                field_path=f"peers[{i}].peer_id",
            )


def validate_network_options(options: NetworkOptionsResponse) -> None:
    version = options.version
    if not version.rosetta_version or not version.node_version:
        raise NetworkAssertionError(
            "Version must include rosetta_version and node_version",
            rule_name="version_present",
            field_path="version",
        )
    _validate_allow(options.allow)


def _validate_allow(allow: Allow) -> None:
    statuses = [s.status for s in allow.operation_statuses]
    _validate_unique_names(statuses, "allow.operation_statuses", "operation_status")
    _validate_unique_names(allow.operation_types, "allow.operation_types", "operation_type")
    _validate_errors(allow.errors)

    if allow.timestamp_start_index is not None and allow.timestamp_start_index < 0:
        raise NetworkAssertionError(
            "timestamp_start_index is negative",
            rule_name="timestamp_start_index_non_negative",
            invalid_value=allow.timestamp_start_index,
            field_path="allow.timestamp_start_index",
        )


def _validate_unique_names(names: list[str], field_path: str, rule_prefix: str) -> None:
    seen: set[str] = set()
    for i, name in enumerate(names):
        if not name:
            raise NetworkAssertionError(
                f"Empty {rule_prefix} declared",
                rule_name=f"{rule_prefix}_present",
                field_path=f"{field_path}[{i}]",
            )
        if name in seen:
            raise NetworkAssertionError(
                f"Duplicate {rule_prefix} '{name}'",
                rule_name=f"{rule_prefix}_unique",
                invalid_value=name,
                field_path=f"{field_path}[{i}]",
            )
        seen.add(name)


def _validate_errors(errors: list[Error]) -> None:
    codes: set[int] = set()
    for i, error in enumerate(errors):
        path = f"allow.errors[{i}]"
        if error.code < 0:
            raise NetworkAssertionError(
                f"Error code {error.code} is negative",
                rule_name="error_code_non_negative",
                invalid_value=error.code,
                field_path=f"{path}.code",
            )
        if not error.message:
            raise NetworkAssertionError(
                f"Error code {error.code} has no message",
                rule_name="error_message_present",
                field_path=f"{path}.message",
            )
        if error.code in codes:
            raise NetworkAssertionError(
                f"Error code {error.code} declared twice",
                rule_name="error_code_unique",
                invalid_value=error.code,
                field_path=f"{path}.code",
            )
        codes.add(error.code)
