"""
RPC client bound to one node endpoint.
"""
import logging
from typing import Any, Dict, List, Optional

from ..exceptions import RPCError, TransportError
from .transport import Transport, default_transport

logger = logging.getLogger(__name__)


class RPCClient:
    """
    Sends JSON-RPC calls to a single endpoint.

    Attributes:
        endpoint: Node URL this client talks to
        transport: Transport used for the calls
    """

    def __init__(self, endpoint: str, transport: Optional[Transport] = None):
        self.endpoint = endpoint
        self.transport = transport or default_transport()

    def __repr__(self) -> str:
        return f"RPCClient({self.endpoint!r})"

    def request(self, method: str, params: Optional[List[Any]] = None) -> Dict[str, Any]:
        """Send a call and return the raw reply envelope."""
        return self.transport.request(method, self.endpoint, list(params or []))

    def call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """
        Send a call and return its ``result``.

        Raises:
            RPCError: If the node replied with an error member
            TransportError: If the call failed or the reply is not JSON-RPC
        """
        reply = self.request(method, params)

        error = reply.get("error")
        if error:
            if isinstance(error, dict):
                raise RPCError(error.get("message", "unknown error"), code=error.get("code"), method=method)
            raise RPCError(str(error), method=method)

        if "result" not in reply:
            raise TransportError(f"reply to {method} from {self.endpoint} has no result member")

        return reply["result"]
