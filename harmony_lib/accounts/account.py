"""
Accounts backed by the local key store.
"""
import json
import logging
from decimal import Decimal
from typing import TYPE_CHECKING, Dict, Optional

from eth_account import Account as EthAccount
from eth_account.signers.local import LocalAccount

from .. import address as addr
from ..exceptions import KeystoreError, MissingAccountError
from .key_store import KeyStore, identity_from_mnemonic, new_mnemonic_identity

if TYPE_CHECKING:
    from ..network.network import Network

logger = logging.getLogger(__name__)


class Account:
    """
    A named account in a key store.

    ``identity`` is the decrypted signing key; it is only set once the
    account has been unlocked. ``mnemonic`` is only set on accounts created
    by :meth:`generate`.
    """

    def __init__(
        self,
        name: Optional[str] = None,
        address: Optional[str] = None,
        passphrase: str = "",
        key_store: Optional[KeyStore] = None,
        identity: Optional[LocalAccount] = None
    ):
        self.name = name
        self.address = addr.to_bech32(address) if address else None
        self.passphrase = passphrase
        self.key_store = key_store
        self.identity = identity
        self.mnemonic: Optional[str] = None

    def __repr__(self) -> str:
        return f"Account(name={self.name!r}, address={self.address!r}, unlocked={self.unlocked})"

    @property
    def unlocked(self) -> bool:
        return self.identity is not None

    def unlock(self) -> LocalAccount:
        """
        Decrypt the account key; a no-op when already unlocked.

        Raises:
            MissingAccountError: If the account has no address or key store
            AccountLockedError: If the passphrase is wrong
        """
        if self.identity is not None:
            return self.identity
        if not self.address or self.key_store is None:
            raise MissingAccountError()

        self.identity = self.key_store.unlock(self.address, self.passphrase)
        logger.debug(f"Unlocked account {self.name or self.address}")
        return self.identity

    def lock(self):
        self.identity = None

    def export_keystore(self, passphrase: Optional[str] = None) -> bytes:
        """Keystore JSON of the account, encrypted with ``passphrase``"""
        self.unlock()
        passphrase = passphrase if passphrase is not None else self.passphrase
        if self.key_store is not None:
            keyfile = self.key_store.encrypt(self.identity.key, passphrase)
        else:
            keyfile = EthAccount.encrypt(self.identity.key, passphrase)
        return json.dumps(keyfile).encode("utf-8")

    # Balances ------------------------------------------------------------

    def all_shard_balances(self, network: "Network") -> Dict[int, Decimal]:
        return network.all_shard_balances(self.address)

    def shard_balance(self, network: "Network", shard_id: int) -> Decimal:
        return network.shard_balance(self.address, shard_id)

    def total_balance(self, network: "Network") -> Decimal:
        return network.total_balance(self.address)

    def nonce(self, network: "Network", shard_id: int = 0) -> int:
        return network.current_nonce(self.address, shard_id)

    # Key store -----------------------------------------------------------

    @classmethod
    def find_by_name(cls, name: str, key_store: Optional[KeyStore] = None) -> Optional["Account"]:
        key_store = key_store or KeyStore()
        address = key_store.find_by_name(name)
        if address is None:
            return None
        return cls(name=name, address=address, key_store=key_store)

    @classmethod
    def find_by_address(cls, address: str, key_store: Optional[KeyStore] = None) -> Optional["Account"]:
        key_store = key_store or KeyStore()
        name = key_store.find_by_address(address)
        if name is None:
            return None
        return cls(name=name, address=address, key_store=key_store)

    @classmethod
    def generate(
        cls,
        name: str,
        passphrase: str = "",
        key_store: Optional[KeyStore] = None,
        mnemonic: Optional[str] = None
    ) -> "Account":
        """
        Derive a key from ``mnemonic``, or from a newly generated one, store it
        and return the unlocked account.

        Raises:
            InvalidMnemonicError: If ``mnemonic`` isn't a valid BIP39 phrase
            AccountExistsError: If the name is taken
        """
        key_store = key_store or KeyStore()
        if mnemonic is None:
            identity, mnemonic = new_mnemonic_identity()
        else:
            identity = identity_from_mnemonic(mnemonic)
        address = key_store.add(name, bytes(identity.key), passphrase)
        account = cls(name=name, address=address, passphrase=passphrase, key_store=key_store, identity=identity)
        account.mnemonic = mnemonic
        return account

    @classmethod
    def _existing(cls, name: Optional[str], address: Optional[str], passphrase: str,
                  key_store: KeyStore) -> Optional["Account"]:
        found = None
        if name and key_store.exists(name):
            found = cls.find_by_name(name, key_store)
        elif address:
            found = cls.find_by_address(address, key_store)
        if found is not None:
            found.passphrase = passphrase
        return found

    @classmethod
    def import_private_key(
        cls,
        private_key: str,
        name: Optional[str] = None,
        passphrase: str = "",
        address: Optional[str] = None,
        key_store: Optional[KeyStore] = None
    ) -> "Account":
        """
        Import a private key, or return the stored account when the name or
        address is already in the key store.

        Raises:
            BadKeyLengthError: If the key isn't 32 bytes
        """
        key_store = key_store or KeyStore()
        existing = cls._existing(name, address, passphrase, key_store)
        if existing is not None:
            return existing

        name = key_store.import_private_key(private_key, name, passphrase)
        return cls(name=name, address=key_store.find_by_name(name), passphrase=passphrase, key_store=key_store)

    @classmethod
    def import_keystore(
        cls,
        key_path: str,
        name: Optional[str] = None,
        passphrase: str = "",
        address: Optional[str] = None,
        key_store: Optional[KeyStore] = None
    ) -> "Account":
        """Import a keystore file, reusing a stored account with the same name or address"""
        key_store = key_store or KeyStore()
        existing = cls._existing(name, address, passphrase, key_store)
        if existing is not None:
            return existing

        name = key_store.import_keystore_file(key_path, name, passphrase)
        stored_address = key_store.find_by_name(name)
        if stored_address is None:
            raise KeystoreError(f"imported key {name} has no address")
        return cls(name=name, address=stored_address, passphrase=passphrase, key_store=key_store)

    @classmethod
    def import_mnemonic(
        cls,
        mnemonic: str,
        name: Optional[str] = None,
        passphrase: str = "",
        address: Optional[str] = None,
        key_store: Optional[KeyStore] = None
    ) -> "Account":
        """Recover an account from its mnemonic, reusing a stored account with the same name or address"""
        key_store = key_store or KeyStore()
        existing = cls._existing(name, address, passphrase, key_store)
        if existing is not None:
            return existing

        name = key_store.import_mnemonic(mnemonic, name, passphrase)
        return cls(name=name, address=key_store.find_by_name(name), passphrase=passphrase, key_store=key_store)
