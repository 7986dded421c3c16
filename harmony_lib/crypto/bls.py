"""
BLS slot keys for validators.

Key generation and signing belong to an external BLS library; this module
carries the serialized public key and the proof-of-possession signature a
validator submits, and encrypts the private key for storage.
"""
import hashlib
import os
from dataclasses import dataclass
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..exceptions import BadKeyLengthError, KeystoreError

PUBLIC_KEY_SIZE = 48
SIGNATURE_SIZE = 96
NONCE_SIZE = 12


def _strip_hex(value: str) -> str:
    return value[2:] if value.lower().startswith("0x") else value


def _passphrase_key(passphrase: str) -> bytes:
    # 32 hex chars of the md5 digest form the AES-256 key
    return hashlib.md5(passphrase.encode("utf-8")).hexdigest().encode("ascii")


@dataclass(frozen=True)
class BLSKey:
    """
    A serialized BLS public key with its signature.

    Attributes:
        public_key: 48 byte serialized public key
        signature: 96 byte signature over the verification message
        private_key_hex: Private key as hex, when known
    """
    public_key: bytes
    signature: bytes
    private_key_hex: Optional[str] = None

    def __post_init__(self):
        if len(self.public_key) != PUBLIC_KEY_SIZE:
            raise BadKeyLengthError(f"bls public key must be {PUBLIC_KEY_SIZE} bytes, got {len(self.public_key)}")
        if len(self.signature) != SIGNATURE_SIZE:
            raise BadKeyLengthError(f"bls signature must be {SIGNATURE_SIZE} bytes, got {len(self.signature)}")

    @classmethod
    def from_hex(cls, public_key_hex: str, signature_hex: str, private_key_hex: Optional[str] = None) -> "BLSKey":
        try:
            public_key = bytes.fromhex(_strip_hex(public_key_hex))
            signature = bytes.fromhex(_strip_hex(signature_hex))
        except ValueError as e:
            raise BadKeyLengthError(f"invalid bls key hex: {e}") from e
        return cls(public_key=public_key, signature=signature, private_key_hex=private_key_hex)

    @property
    def public_key_hex(self) -> str:
        return self.public_key.hex()

    @property
    def signature_hex(self) -> str:
        return self.signature.hex()

    def __repr__(self) -> str:
        return f"BLSKey(public_key={self.public_key_hex})"

    def encrypt(self, passphrase: str) -> str:
        """
        Encrypt the private key with AES-GCM.

        Returns:
            Hex of nonce followed by ciphertext

        Raises:
            KeystoreError: If the key has no private part
        """
        if not self.private_key_hex:
            raise KeystoreError("bls key has no private key to encrypt")
        nonce = os.urandom(NONCE_SIZE)
        ciphertext = AESGCM(_passphrase_key(passphrase)).encrypt(nonce, self.private_key_hex.encode("ascii"), None)
        return (nonce + ciphertext).hex()


def decrypt_private_key(encrypted_hex: str, passphrase: str) -> str:
    """
    Reverse :meth:`BLSKey.encrypt`.

    Raises:
        KeystoreError: If the data is malformed or the passphrase is wrong
    """
    try:
        data = bytes.fromhex(encrypted_hex)
    except ValueError as e:
        raise KeystoreError(f"encrypted bls key isn't hex: {e}") from e
    if len(data) <= NONCE_SIZE:
        raise KeystoreError("encrypted bls key is too short")
    try:
        plain = AESGCM(_passphrase_key(passphrase)).decrypt(data[:NONCE_SIZE], data[NONCE_SIZE:], None)
    except InvalidTag as e:
        raise KeystoreError("could not decrypt bls key - wrong passphrase?") from e
    return plain.decode("ascii")


def parse_public_key(public_key_hex: str) -> bytes:
    """
    Decode a serialized public key given as hex.

    Raises:
        BadKeyLengthError: If it isn't 48 bytes of hex
    """
    try:
        public_key = bytes.fromhex(_strip_hex(public_key_hex))
    except ValueError as e:
        raise BadKeyLengthError(f"invalid bls public key hex: {e}") from e
    if len(public_key) != PUBLIC_KEY_SIZE:
        raise BadKeyLengthError(f"bls public key must be {PUBLIC_KEY_SIZE} bytes, got {len(public_key)}")
    return public_key
