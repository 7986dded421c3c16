"""
Network topology and shard endpoint resolution.
"""
from .gateway import client_for, new_rpc_client
from .network import Network, Shard
from .sharding import fetch_sharding_structure, resolve_sharding_structure
from .utils import generate_node_address, is_local_node

__all__ = [
    "Network",
    "Shard",
    "client_for",
    "new_rpc_client",
    "fetch_sharding_structure",
    "resolve_sharding_structure",
    "generate_node_address",
    "is_local_node",
]
