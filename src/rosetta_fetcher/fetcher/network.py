"""
Primary network selection.
"""

import structlog

from rosetta_fetcher.errors import ConfigurationError
from rosetta_fetcher.models.identifiers import NetworkIdentifier

logger = structlog.get_logger(__name__)


def select_primary_network(
    networks: list[NetworkIdentifier],
    preferred: tuple[str, str] | None = None,
) -> NetworkIdentifier:
    """
    Pick the network a fetcher works against.

    With a preferred ``(blockchain, network)`` pair the matching entry is
    chosen; otherwise the first listed network is.

    Raises:
        ConfigurationError: No networks offered, or the preferred one is missing
    """
    if not networks:
        raise ConfigurationError("Server offers no networks")

    available = [f"{n.blockchain}/{n.network}" for n in networks]

    if preferred is not None:
        blockchain, network = preferred
        for candidate in networks:
            if candidate.matches(blockchain, network):
                return candidate
        raise ConfigurationError(
            f"Preferred network {blockchain}/{network} is not offered by the server",
            details={"preferred": f"{blockchain}/{network}", "available": available},
        )

    if len(networks) > 1:
        logger.warning(
            "Server offers several networks, using the first",
            selected=available[0],
            available=available,
        )
    return networks[0]
