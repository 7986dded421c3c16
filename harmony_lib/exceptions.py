"""
Exceptions raised by harmony-lib.

The hierarchy separates the failure kinds a caller has to tell apart:
configuration problems, transport failures, protocol-level rejections,
confirmation timeouts and violated invariants.
"""
from typing import Optional


class HarmonyError(Exception):
    """Base exception for all harmony-lib errors."""
    pass


# Configuration errors ------------------------------------------------------

class ConfigurationError(HarmonyError):
    """Raised when the caller supplied unusable input or settings."""
    pass


class MissingAccountError(ConfigurationError):
    """Raised when a signing operation has no account or unlocked identity."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message or "keystore account can't be nil - please make sure the account "
                       "you want to use exists in the keystore"
        )


class AccountLockedError(ConfigurationError):
    """Raised when an account can't be unlocked with the given passphrase."""
    pass


class AccountExistsError(ConfigurationError):
    """Raised when importing into a name that is already taken."""
    pass


class KeystoreError(ConfigurationError):
    """Raised when a keystore file can't be read, decrypted or written."""
    pass


class InvalidAmountError(ConfigurationError):
    """Raised for malformed or over-precise decimal amounts."""
    pass


class InvalidAddressError(ConfigurationError):
    """Raised for addresses that are neither valid bech32 nor hex."""
    pass


class BadKeyLengthError(ConfigurationError):
    """Raised when a private key doesn't decode to 32 bytes."""
    pass


class InvalidMnemonicError(ConfigurationError):
    """Raised when a recovery phrase isn't a valid BIP39 mnemonic."""
    pass


# Transport errors ----------------------------------------------------------

class TransportError(HarmonyError):
    """Raised when an RPC call can't be completed or decoded."""
    pass


class RPCError(TransportError):
    """Raised when the node answers a JSON-RPC call with an error member."""

    def __init__(self, message: str, code: Optional[int] = None, method: Optional[str] = None):
        self.code = code
        self.method = method
        super().__init__(f"{message} ({code})" if code is not None else message)


class ShardNotFoundError(TransportError):
    """Raised when the sharding structure has no route for a shard id."""

    def __init__(self, shard_id: int, node: str):
        self.shard_id = shard_id
        self.node = node
        super().__init__(f"no route for shard {shard_id} in the sharding structure of {node}")


# Protocol-level rejection --------------------------------------------------

class TransactionRejectedError(HarmonyError):
    """Raised when a transaction shows up in the network's error sink."""

    def __init__(self, tx_hash: str, message: str, directive_kind: Optional[str] = None):
        self.tx_hash = tx_hash
        self.directive_kind = directive_kind
        self.message = message
        super().__init__(message)


class ConfirmationTimeoutError(HarmonyError):
    """Raised when confirmation polling ran out of time."""

    def __init__(self, tx_hash: str, timeout: int):
        self.tx_hash = tx_hash
        self.timeout = timeout
        super().__init__(f"transaction {tx_hash} was neither confirmed nor rejected within {timeout}s")


class ConfirmationCancelledError(HarmonyError):
    """Raised when confirmation polling was stopped by the caller."""

    def __init__(self, tx_hash: str):
        self.tx_hash = tx_hash
        super().__init__(f"confirmation of transaction {tx_hash} was cancelled")


# Invariant violations ------------------------------------------------------

class InvariantError(HarmonyError):
    """Raised when a value that can't legally occur was computed or returned."""
    pass


class GasLimitError(InvariantError):
    """Raised for a zero or negative gas limit."""
    pass


class EmptyResultError(InvariantError):
    """Raised when an RPC call returned no value where one is mandatory."""
    pass


# Transaction construction --------------------------------------------------

class SigningError(HarmonyError):
    """Raised when a transaction can't be signed."""
    pass


class EncodingError(HarmonyError):
    """Raised when a transaction can't be serialized."""
    pass
