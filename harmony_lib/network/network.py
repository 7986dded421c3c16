"""
Network context: chain identity, retry policy, shard endpoints and the
cached sharding structure.
"""
import logging
import threading
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from ..config import ChainID, NetworkConfig, Retry, default_node
from ..exceptions import ConfigurationError, TransportError
from ..models import ShardRoute
from ..rpc import queries
from ..rpc.client import RPCClient
from ..rpc.transport import Transport, default_transport
from .gateway import client_for, new_rpc_client
from .sharding import resolve_sharding_structure
from .utils import generate_node_address, resolve_starting_node

logger = logging.getLogger(__name__)


@dataclass
class Shard:
    """A shard's node address and its client, once resolved"""
    node: str
    rpc_client: Optional[RPCClient] = None


class Network:
    """
    A named Harmony network.

    The shard map and the sharding structure cache are the only mutable
    state; both are read and written under ``lock``. Network calls are never
    made while holding it.
    """

    def __init__(
        self,
        name: str = "testnet",
        mode: str = "api",
        node: Optional[str] = None,
        retry: Optional[Retry] = None,
        chain_id: Optional[ChainID] = None,
        transport: Optional[Transport] = None
    ):
        """
        Initialize the network

        Args:
            name: Network name or alias (mainnet, testnet, localnet, ...)
            mode: ``api`` for hosted endpoints, ``local`` or ``custom``
            node: Fixed node receiving every call; defaults to $HARMONY_NODE
            retry: Retry policy for sharding structure resolution
            chain_id: Override of the chain identity derived from ``name``
            transport: RPC transport, defaults to the shared HTTP transport
        """
        self.name = name
        self.mode = mode
        self.node = node if node is not None else default_node()
        self.retry = retry or Retry()
        self.chain_id = chain_id or NetworkConfig.chain_id(name)
        self.transport = transport or default_transport()
        self.shards: Dict[int, Shard] = {}
        self.lock = threading.RLock()
        self._resolve_lock = threading.Lock()
        self._sharding_structure: List[ShardRoute] = []
        self._fixed_client: Optional[RPCClient] = None

    def __repr__(self) -> str:
        return f"Network(name={self.name!r}, mode={self.mode!r}, node={self.node!r})"

    # Topology ----------------------------------------------------------------

    @property
    def sharding_structure(self) -> List[ShardRoute]:
        with self.lock:
            return list(self._sharding_structure)

    @property
    def shard_count(self) -> int:
        with self.lock:
            return len(self._sharding_structure)

    def set_sharding_structure(self, routes: List[ShardRoute]) -> bool:
        """
        Cache a sharding structure unless one is cached already.

        Returns:
            True if ``routes`` was stored
        """
        with self.lock:
            if self._sharding_structure or not routes:
                return False
            self._sharding_structure = list(routes)
            return True

    def clear_sharding_structure(self) -> None:
        """Drop the cached structure and resolved shard clients."""
        with self.lock:
            self._sharding_structure = []
            self.shards.clear()

    def sharding_structure_for(self, node: str) -> List[ShardRoute]:
        """
        Cached sharding structure, resolving it through ``node`` on first use.

        Resolution holds ``_resolve_lock`` only, so readers of the shard map
        aren't blocked by retry waits. The first non-empty result is kept.
        """
        with self.lock:
            if self._sharding_structure:
                return list(self._sharding_structure)

        with self._resolve_lock:
            with self.lock:
                if self._sharding_structure:
                    return list(self._sharding_structure)
            routes = resolve_sharding_structure(node, self.retry, self.transport)
            with self.lock:
                self.set_sharding_structure(routes)
                return list(self._sharding_structure)

    # Shards ------------------------------------------------------------------

    def node_address(self, shard_id: int) -> str:
        """
        Node address for a shard: the fixed node, the configured shard node,
        or the canonical address for this network.
        """
        if self.node:
            return self.node

        with self.lock:
            shard = self.shards.get(shard_id)
            if shard is not None and shard.node:
                return shard.node

            generated = generate_node_address(self.name, self.mode, shard_id)
            self.shards[shard_id] = Shard(node=generated)
            return generated

    def set_shard(self, shard_id: int, node: str, client: Optional[RPCClient]) -> None:
        with self.lock:
            self.shards[shard_id] = Shard(node=node, rpc_client=client)

    def shards_to_map(self) -> Dict[int, str]:
        with self.lock:
            return {shard_id: shard.node for shard_id, shard in self.shards.items()}

    def fixed_node_client(self) -> RPCClient:
        with self.lock:
            if self._fixed_client is None:
                self._fixed_client = RPCClient(self.node, self.transport)
            return self._fixed_client

    def rpc_client(self, shard_id: int) -> RPCClient:
        """Client serving ``shard_id``; see :func:`client_for` for the policy."""
        return client_for(self, shard_id)

    def generate_shard_setup(self, node: Optional[str] = None, nodes: Optional[List[str]] = None) -> Dict[int, Shard]:
        """
        Resolve the sharding structure and set up every shard.

        In ``api`` mode each shard gets its canonical node address; in any
        other mode ``nodes`` must list one node per shard.

        Raises:
            TransportError: If the network can't be reached
            ConfigurationError: If the node count doesn't match the shard count
        """
        start = node or self.node or resolve_starting_node(self.name, self.mode, 0, nodes)
        try:
            routes = resolve_sharding_structure(start, self.retry, self.transport)
        except TransportError as e:
            logger.error("Can't connect to the %s network using node %s: %s", self.name, start, e)
            raise

        if self.mode == "api":
            shard_nodes: List[Tuple[int, str]] = [
                (i, generate_node_address(self.name, self.mode, i)) for i in range(len(routes))
            ]
        else:
            nodes = nodes or []
            if len(nodes) != len(routes):
                raise ConfigurationError(
                    f"the node count for the nodes you've specified ({len(nodes)}) doesn't match "
                    f"the expected node count ({len(routes)}) for the network {self.name}"
                )
            shard_nodes = list(enumerate(nodes))

        with self.lock:
            self.set_sharding_structure(routes)
            for shard_id, shard_node in shard_nodes:
                client = new_rpc_client(shard_node, shard_id, routes, self.transport)
                self.shards[shard_id] = Shard(node=shard_node, rpc_client=client)
            return dict(self.shards)

    # Queries -----------------------------------------------------------------

    def _clients(self) -> Dict[int, RPCClient]:
        # shard 0 first: on a fresh network this resolves the structure
        clients = {0: self.rpc_client(0)}
        with self.lock:
            shard_ids = set(self.shards) | {route.shard_id for route in self._sharding_structure}
        for shard_id in sorted(shard_ids - {0}):
            clients[shard_id] = self.rpc_client(shard_id)
        return clients

    def all_shard_balances(self, address: str) -> Dict[int, Decimal]:
        return queries.all_shard_balances(address, self._clients())

    def shard_balance(self, address: str, shard_id: int) -> Decimal:
        return queries.get_balance(self.rpc_client(shard_id), address)

    def total_balance(self, address: str) -> Decimal:
        return queries.total_balance(address, self._clients())

    def current_nonce(self, address: str, shard_id: int) -> int:
        """
        Next nonce for an address on a shard.

        Raises:
            TransportError: If the shard can't be reached
        """
        return queries.get_next_nonce(self.rpc_client(shard_id), address)
