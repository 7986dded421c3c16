"""
Node address helpers.
"""
import ipaddress
import logging
from typing import List, Optional

from ..config import DEFAULT_LOCAL_NODE, NetworkConfig

logger = logging.getLogger(__name__)


def is_local_node(node: str) -> bool:
    """
    Check whether a node address points at a local or directly addressed node.

    The scheme is stripped and the host is the part before the first ``:``;
    ``localhost`` and IP literals count as local.
    """
    host = node or ""
    for prefix in ("http://", "https://"):
        if host.startswith(prefix):
            host = host[len(prefix):]
    host = host.split(":")[0]
    if host == "localhost":
        return True
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return False
    return True


def generate_node_address(network: str, mode: str, shard_id: int) -> str:
    """Node address for a shard; local mode always uses the local node."""
    if (mode or "").lower() == "local":
        return DEFAULT_LOCAL_NODE
    return NetworkConfig.node_address(network, shard_id)


def resolve_starting_node(network: str, mode: str, shard_id: int, nodes: Optional[List[str]] = None) -> str:
    """Node used to fetch the sharding structure for a network."""
    if mode == "custom" and nodes:
        return nodes[0]
    return generate_node_address(network, mode, shard_id)
