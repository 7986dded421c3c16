"""
harmony-lib - client library for the Harmony sharded proof-of-stake network.
"""
from .accounts import Account, KeyStore
from .client import HarmonyClient
from .config import ChainID, Gas, NetworkConfig, Retry
from .exceptions import (
    ConfigurationError, ConfirmationCancelledError, ConfirmationTimeoutError, HarmonyError, InvariantError,
    MissingAccountError, RPCError, ShardNotFoundError, TransactionRejectedError, TransportError
)
from .network import Network
from .transactions import ConfirmationStatus, SignedTransaction, Transaction, TransactionResult, TxKind
from .version import __version__

__all__ = [
    "HarmonyClient",
    "Account",
    "KeyStore",
    "Network",
    "NetworkConfig",
    "ChainID",
    "Gas",
    "Retry",
    "SignedTransaction",
    "Transaction",
    "TransactionResult",
    "ConfirmationStatus",
    "TxKind",
    "HarmonyError",
    "ConfigurationError",
    "MissingAccountError",
    "TransportError",
    "RPCError",
    "ShardNotFoundError",
    "TransactionRejectedError",
    "ConfirmationTimeoutError",
    "ConfirmationCancelledError",
    "InvariantError",
    "__version__",
]
