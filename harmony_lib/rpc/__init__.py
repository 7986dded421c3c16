"""
JSON-RPC access to Harmony nodes.
"""
from .client import RPCClient
from .methods import Method
from .transport import HTTPTransport, Transport, default_transport

__all__ = ["RPCClient", "Method", "HTTPTransport", "Transport", "default_transport"]
