"""
Local keystore of encrypted account keys.

Each account is a Web3 Secret Storage JSON file named after the account,
kept in one directory. Reads and writes go through a portalocker file lock so
several processes can share the directory.
"""
import json
import logging
import os
import secrets
import stat
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import portalocker
from eth_account import Account as EthAccount
from eth_account.signers.local import LocalAccount
from eth_utils import ValidationError

from .. import address as addr
from ..config import key_store_path
from ..exceptions import (
    AccountExistsError, AccountLockedError, BadKeyLengthError, InvalidAddressError, InvalidMnemonicError,
    KeystoreError
)

logger = logging.getLogger(__name__)

PRIVATE_KEY_LENGTH = 32

# scrypt cost for throwaway stores; None uses the eth_account default
LIGHT_SCRYPT_N = 1 << 12

# BIP44 path of the first account on Harmony (coin type 1023)
HD_PATH = "m/44'/1023'/0'/0/0"

EthAccount.enable_unaudited_hdwallet_features()


class KeyStore:
    """Thread-safe and process-safe key store"""

    def __init__(self, store_path: Optional[str] = None, scrypt_n: Optional[int] = None):
        """
        Initialize the key store.

        Args:
            store_path: Optional custom directory; defaults to
                $HARMONY_KEY_STORE_PATH or ~/.harmony_lib/keystore
            scrypt_n: scrypt cost parameter for newly encrypted keys
        """
        self.store_path = Path(store_path or key_store_path())
        self.scrypt_n = scrypt_n
        self._ensure_dir()

    def _ensure_dir(self):
        """Ensure key store directory exists with proper permissions"""
        if not self.store_path.exists():
            self.store_path.mkdir(parents=True, exist_ok=True)

        if os.name == 'posix':
            os.chmod(self.store_path, stat.S_IRUSR | stat.S_IWUSR | stat.S_IXUSR)  # 0700

    def _get_lock_path(self) -> str:
        return str(self.store_path / ".lock")

    def _key_path(self, name: str) -> Path:
        if not name or "/" in name or name.startswith("."):
            raise KeystoreError(f"invalid account name: {name!r}")
        return self.store_path / f"{name}.json"

    def _read_key(self, name: str) -> Optional[Dict[str, Any]]:
        path = self._key_path(name)
        with portalocker.Lock(self._get_lock_path(), timeout=10):
            try:
                with open(path, 'r') as f:
                    return json.load(f)
            except FileNotFoundError:
                return None
            except json.JSONDecodeError as e:
                raise KeystoreError(f"keystore file for {name} is corrupt: {e}") from e

    def _write_key(self, name: str, keyfile: Dict[str, Any]):
        path = self._key_path(name)
        with portalocker.Lock(self._get_lock_path(), timeout=10):
            with open(path, 'w') as f:
                json.dump(keyfile, f, indent=2)
            if os.name == 'posix':
                os.chmod(path, stat.S_IRUSR | stat.S_IWUSR)  # 0600

    # Lookups -------------------------------------------------------------

    def names(self) -> List[str]:
        """Names of all stored accounts"""
        return sorted(p.stem for p in self.store_path.glob("*.json"))

    def exists(self, name: str) -> bool:
        return self._key_path(name).exists()

    def find_by_name(self, name: str) -> Optional[str]:
        """Bech32 address of a named account, or None"""
        keyfile = self._read_key(name)
        if not keyfile or "address" not in keyfile:
            return None
        return addr.to_bech32("0x" + keyfile["address"])

    def find_by_address(self, address: str) -> Optional[str]:
        """Name of the account holding an address, or None"""
        try:
            target = addr.parse(address)
        except InvalidAddressError:
            return None
        for name in self.names():
            keyfile = self._read_key(name)
            if keyfile and "address" in keyfile and addr.parse("0x" + keyfile["address"]) == target:
                return name
        return None

    # Import / export -----------------------------------------------------

    def _unused_name(self) -> str:
        name = f"{secrets.token_hex(4)}-imported"
        while self.exists(name):
            name = f"{secrets.token_hex(4)}-imported"
        return name

    def add(self, name: str, private_key: bytes, passphrase: str) -> str:
        """
        Encrypt and store a private key under ``name``.

        Returns:
            Bech32 address of the stored key

        Raises:
            AccountExistsError: If the name is taken
        """
        if self.exists(name):
            raise AccountExistsError(f"account {name} already exists")
        keyfile = self.encrypt(private_key, passphrase)
        self._write_key(name, keyfile)
        address = addr.to_bech32("0x" + keyfile["address"])
        logger.info("Stored account %s (%s)", name, address)
        return address

    def import_private_key(self, private_key: str, name: Optional[str], passphrase: str) -> str:
        """
        Import a hex encoded secp256k1 private key.

        Args:
            private_key: 32 byte key as hex, ``0x`` prefix optional
            name: Account name; a random ``-imported`` name is used if empty
            passphrase: Passphrase to encrypt the key with

        Returns:
            The account name

        Raises:
            BadKeyLengthError: If the key isn't 32 bytes of hex
            AccountExistsError: If the name is taken
        """
        cleaned = private_key[2:] if private_key.startswith("0x") else private_key
        try:
            key_bytes = bytes.fromhex(cleaned)
        except ValueError as e:
            raise BadKeyLengthError(f"private key isn't valid hex: {e}") from e
        if len(key_bytes) != PRIVATE_KEY_LENGTH:
            raise BadKeyLengthError(f"private key must be {PRIVATE_KEY_LENGTH} bytes, got {len(key_bytes)}")

        name = name or self._unused_name()
        self.add(name, key_bytes, passphrase)
        return name

    def import_mnemonic(
        self,
        mnemonic: str,
        name: Optional[str],
        passphrase: str,
        account_path: str = HD_PATH
    ) -> str:
        """
        Derive the key of a BIP39 recovery phrase and store it.

        Returns:
            The account name

        Raises:
            InvalidMnemonicError: If the phrase isn't a valid mnemonic
            AccountExistsError: If the name is taken
        """
        identity = identity_from_mnemonic(mnemonic, account_path)
        name = name or self._unused_name()
        self.add(name, bytes(identity.key), passphrase)
        return name

    def import_keystore_file(self, key_path: str, name: Optional[str], passphrase: str) -> str:
        """
        Import an existing keystore file after checking its passphrase.

        Returns:
            The account name

        Raises:
            KeystoreError: If the file can't be read
            AccountLockedError: If the passphrase doesn't decrypt it
            AccountExistsError: If the name is taken
        """
        try:
            with open(os.path.abspath(key_path), 'r') as f:
                keyfile = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise KeystoreError(f"can't read keystore file {key_path}: {e}") from e

        private_key = self._decrypt(keyfile, passphrase)
        name = name or self._unused_name()
        if self.exists(name):
            raise AccountExistsError(f"account {name} already exists")

        keyfile.setdefault("address", EthAccount.from_key(private_key).address[2:].lower())
        self._write_key(name, keyfile)
        return name

    def encrypt(self, private_key: bytes, passphrase: str) -> Dict[str, Any]:
        return EthAccount.encrypt(private_key, passphrase, iterations=self.scrypt_n)

    @staticmethod
    def _decrypt(keyfile: Dict[str, Any], passphrase: str) -> bytes:
        try:
            return bytes(EthAccount.decrypt(keyfile, passphrase))
        except ValueError as e:
            raise AccountLockedError(f"could not decrypt key: {e}") from e

    def unlock(self, address: str, passphrase: str) -> LocalAccount:
        """
        Decrypt the key of an account.

        Args:
            address: Account address, or account name
            passphrase: Passphrase of the key

        Returns:
            Signing identity for the account

        Raises:
            KeystoreError: If no key is stored for the account
            AccountLockedError: If the passphrase is wrong
        """
        name = self.find_by_address(address) or (address if self.exists(address) else None)
        if name is None:
            raise KeystoreError(f"no key stored for {address}")
        keyfile = self._read_key(name)
        if keyfile is None:
            raise KeystoreError(f"no key stored for {address}")
        return EthAccount.from_key(self._decrypt(keyfile, passphrase))

    def export_keystore(self, address: str, passphrase: str, new_passphrase: Optional[str] = None) -> bytes:
        """
        Export an account as keystore JSON, re-encrypted with ``new_passphrase``
        (defaults to the current one).
        """
        identity = self.unlock(address, passphrase)
        keyfile = self.encrypt(identity.key, new_passphrase or passphrase)
        return json.dumps(keyfile).encode("utf-8")

    def delete(self, name: str):
        """Remove a stored account"""
        with portalocker.Lock(self._get_lock_path(), timeout=10):
            self._key_path(name).unlink(missing_ok=True)


def identity_from_mnemonic(mnemonic: str, account_path: str = HD_PATH) -> LocalAccount:
    """
    Signing identity derived from a BIP39 mnemonic, with an empty seed passphrase.

    Raises:
        InvalidMnemonicError: If the phrase isn't a valid mnemonic
    """
    try:
        return EthAccount.from_mnemonic(mnemonic, account_path=account_path)
    except (ValidationError, ValueError) as e:
        raise InvalidMnemonicError(f"invalid mnemonic: {e}") from e


def new_mnemonic_identity(account_path: str = HD_PATH) -> Tuple[LocalAccount, str]:
    """A fresh 12 word mnemonic and the identity derived from it"""
    return EthAccount.create_with_mnemonic(account_path=account_path)
