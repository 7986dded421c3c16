"""
Sharding structure resolution.

The sharding structure maps every shard id to the RPC endpoint serving it.
It is fetched from the network itself, retrying with a constant delay.
"""
import logging
import time
from typing import Callable, List, Optional

from pydantic import ValidationError

from .._rate_limited_log import rate_limited_log
from ..config import Retry
from ..exceptions import TransportError
from ..models import ShardRoute
from ..rpc.client import RPCClient
from ..rpc.methods import Method
from ..rpc.transport import Transport

logger = logging.getLogger(__name__)


def fetch_sharding_structure(node: str, transport: Optional[Transport] = None) -> List[ShardRoute]:
    """
    Fetch the sharding structure from a node, once.

    Raises:
        TransportError: If the call fails or the reply isn't a route list
    """
    result = RPCClient(node, transport).call(Method.GET_SHARDING_STRUCTURE, [])
    if not isinstance(result, list):
        raise TransportError(f"network.ShardingStructure: unexpected reply from {node}: {result!r}")
    try:
        return [ShardRoute.model_validate(route) for route in result]
    except ValidationError as e:
        raise TransportError(f"network.ShardingStructure: malformed route from {node}: {e}") from e


def resolve_sharding_structure(
    node: str,
    retry: Optional[Retry] = None,
    transport: Optional[Transport] = None,
    sleep: Optional[Callable[[float], None]] = None
) -> List[ShardRoute]:
    """
    Resolve the sharding structure, retrying per the policy.

    With ``retry.attempts > 0`` at most ``attempts`` calls are made, waiting
    ``retry.wait`` seconds between two calls. Otherwise a single call is made.

    Args:
        node: Node to ask
        retry: Retry policy
        transport: Transport to use
        sleep: Sleep function, replaceable in tests

    Returns:
        The routes

    Raises:
        TransportError: The error of the last attempt
    """
    if retry is None or retry.attempts <= 0:
        return fetch_sharding_structure(node, transport)

    remaining = retry.attempts
    while True:
        remaining -= 1
        try:
            return fetch_sharding_structure(node, transport)
        except TransportError as e:
            if remaining <= 0:
                logger.error("Resolving the sharding structure via %s failed after %d attempts: %s",
                             node, retry.attempts, e)
                raise
            rate_limited_log(
                f"Sharding structure lookup via {node} failed, retrying in {retry.wait}s: {e}",
                logger_instance=logger,
            )
            (sleep or time.sleep)(retry.wait)
