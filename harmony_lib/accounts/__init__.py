"""
Accounts and the local key store.
"""
from .account import Account
from .key_store import KeyStore

__all__ = ["Account", "KeyStore"]
