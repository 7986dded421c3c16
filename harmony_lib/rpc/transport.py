"""
HTTP JSON-RPC transport.

The transport is the narrow seam to the network: ``request(method, endpoint,
params)`` returns the decoded JSON-RPC reply envelope. Everything above it
(topology resolution, queries, submission, confirmation polling) is written
against the :class:`Transport` protocol so tests can substitute a fake.
"""
import logging
import threading
from typing import Any, Dict, List, Optional, Protocol

import requests
from cachetools import LRUCache
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from web3 import Web3

from ..exceptions import TransportError

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Protocol for JSON-RPC transports"""

    def request(self, method: str, endpoint: str, params: List[Any]) -> Dict[str, Any]:
        """Send one call and return the raw reply envelope"""
        ...


class HTTPTransport:
    """
    JSON-RPC over HTTP using web3's HTTPProvider.

    One provider is kept per endpoint; all providers share a requests
    session that retries failed connections. Calls that reached the node are
    never retried here, so a raw transaction is not submitted twice.
    """

    def __init__(
        self,
        timeout: int = 30,
        retry_count: int = 3,
        max_endpoints: int = 64,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the transport

        Args:
            timeout: Timeout for HTTP requests in seconds
            retry_count: Number of retries for connection failures
            max_endpoints: Number of endpoint providers to keep cached
            session: Optional pre-configured requests session
        """
        self.timeout = timeout
        self.session = session or self._build_session(retry_count)
        self._providers: LRUCache = LRUCache(maxsize=max_endpoints)
        self._lock = threading.RLock()

    @staticmethod
    def _build_session(retry_count: int) -> requests.Session:
        session = requests.Session()
        retries = Retry(
            total=retry_count,
            connect=retry_count,
            read=0,
            status=0,
            other=0,
            backoff_factor=0.5,
            allowed_methods=["POST"],
            raise_on_status=False,
        )
        session.mount("http://", HTTPAdapter(max_retries=retries))
        session.mount("https://", HTTPAdapter(max_retries=retries))
        return session

    def provider(self, endpoint: str) -> Web3.HTTPProvider:
        """Get or create the provider for an endpoint"""
        with self._lock:
            provider = self._providers.get(endpoint)
            if provider is None:
                provider = Web3.HTTPProvider(
                    endpoint,
                    request_kwargs={"timeout": self.timeout},
                    session=self.session,
                )
                self._providers[endpoint] = provider
            return provider

    def request(self, method: str, endpoint: str, params: List[Any]) -> Dict[str, Any]:
        """
        Send a JSON-RPC call

        Args:
            method: RPC method name
            endpoint: Node URL
            params: Ordered positional parameters

        Returns:
            The decoded reply envelope (``result`` and/or ``error`` members)

        Raises:
            TransportError: If the call fails or the reply can't be decoded
        """
        logger.debug("RPC %s -> %s params=%s", method, endpoint, params)
        try:
            reply = self.provider(endpoint).make_request(method, params)
        except requests.RequestException as e:
            raise TransportError(f"{method} request to {endpoint} failed: {e}") from e
        except ValueError as e:
            raise TransportError(f"invalid JSON reply to {method} from {endpoint}: {e}") from e

        if not isinstance(reply, dict):
            raise TransportError(f"unexpected reply to {method} from {endpoint}: {reply!r}")
        return dict(reply)


_default_transport: Optional[HTTPTransport] = None
_default_lock = threading.Lock()


def default_transport() -> HTTPTransport:
    """Process-wide HTTP transport used when none is passed explicitly"""
    global _default_transport
    with _default_lock:
        if _default_transport is None:
            _default_transport = HTTPTransport()
        return _default_transport
