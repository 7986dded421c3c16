"""
RPC gateway: picks the endpoint serving a shard and hands out clients for it.
"""
import logging
from typing import TYPE_CHECKING, Iterable, Optional

from ..exceptions import ShardNotFoundError
from ..models import ShardRoute
from ..rpc.client import RPCClient
from ..rpc.transport import Transport
from .utils import is_local_node

if TYPE_CHECKING:
    from .network import Network

logger = logging.getLogger(__name__)


def route_endpoint(routes: Iterable[ShardRoute], shard_id: int) -> Optional[str]:
    """HTTP endpoint of the route serving ``shard_id``, if any."""
    for route in routes:
        if route.shard_id == shard_id:
            return route.http
    return None


def new_rpc_client(
    node: str,
    shard_id: int,
    routes: Iterable[ShardRoute],
    transport: Optional[Transport] = None
) -> RPCClient:
    """
    Client for a shard given a node and an already resolved structure.

    Local nodes are used directly. Otherwise the route for the shard is
    looked up in ``routes``.

    Raises:
        ShardNotFoundError: If no route matches the shard
    """
    if is_local_node(node):
        return RPCClient(node, transport)

    endpoint = route_endpoint(routes, shard_id)
    if endpoint is None:
        raise ShardNotFoundError(shard_id, node)
    return RPCClient(endpoint, transport)


def client_for(network: "Network", shard_id: int) -> RPCClient:
    """
    Resolve the client to use for a shard of a network.

    Policy, in order:
      1. a fixed node on the network receives every call
      2. a cached client for the shard is reused
      3. a local node is connected to directly, without topology resolution
      4. the sharding structure is resolved (once per network) and the
         shard's declared HTTP endpoint is used

    Raises:
        ShardNotFoundError: If the resolved structure has no such shard
        TransportError: If the structure can't be resolved
    """
    if network.node:
        return network.fixed_node_client()

    with network.lock:
        shard = network.shards.get(shard_id)
        if shard is not None and shard.rpc_client is not None:
            return shard.rpc_client
        node = network.node_address(shard_id)

    if is_local_node(node):
        client = RPCClient(node, network.transport)
    else:
        routes = network.sharding_structure_for(node)
        client = new_rpc_client(node, shard_id, routes, network.transport)

    with network.lock:
        shard = network.shards.get(shard_id)
        if shard is not None and shard.rpc_client is not None:
            return shard.rpc_client
        network.set_shard(shard_id, node, client)
    logger.debug("Shard %d of %s resolved to %s", shard_id, network.name, client.endpoint)
    return client
