"""
Transaction serialization and signing.

Plain and staking transactions are RLP lists signed EIP-155 style: the
signing hash is the keccak of the list with ``chainId, 0, 0`` appended and
``v = recovery_id + 35 + 2 * chainId``. EVM-style transfers are legacy
Ethereum transactions signed by eth_account.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import rlp
from rlp.exceptions import RLPException
from eth_account import Account as EthAccount
from eth_keys import keys
from eth_keys.exceptions import ValidationError as KeyValidationError
from eth_utils import keccak

from ..exceptions import EncodingError, SigningError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Signature:
    """Signed RLP bytes with the signature values"""
    raw: bytes
    v: int
    r: int
    s: int

    @property
    def tx_hash(self) -> bytes:
        return keccak(self.raw)


def rlp_encode(fields: Sequence[Any]) -> bytes:
    """
    RLP encode a list of ints, bytes and nested lists.

    Raises:
        EncodingError: If a field has no RLP representation
    """
    try:
        return rlp.encode(list(fields))
    except (RLPException, TypeError) as e:
        raise EncodingError(f"can't rlp encode transaction: {e}") from e


def signing_hash(fields: Sequence[Any], chain_id: int) -> bytes:
    return keccak(rlp_encode(list(fields) + [chain_id, 0, 0]))


def sign_fields(fields: Sequence[Any], private_key: bytes, chain_id: int) -> Signature:
    """
    Sign an unsigned transaction given as its RLP field list.

    Args:
        fields: Unsigned transaction fields, in wire order
        private_key: 32 byte secp256k1 key
        chain_id: Chain id to bind the signature to

    Returns:
        The signed transaction bytes and signature values

    Raises:
        SigningError: If the key is unusable
        EncodingError: If the fields can't be encoded
    """
    msg_hash = signing_hash(fields, chain_id)
    try:
        signature = keys.PrivateKey(private_key).sign_msg_hash(msg_hash)
    except (KeyValidationError, ValueError) as e:
        raise SigningError(f"can't sign transaction: {e}") from e

    v = signature.v + 35 + 2 * chain_id
    raw = rlp_encode(list(fields) + [v, signature.r, signature.s])
    return Signature(raw=raw, v=v, r=signature.r, s=signature.s)


def plain_transaction_fields(
    nonce: int,
    gas_price: int,
    gas_limit: int,
    shard_id: int,
    to_shard_id: int,
    to: Optional[bytes],
    value: int,
    data: bytes
) -> List[Any]:
    """Wire order of a cross-shard transfer; an absent recipient is empty"""
    return [nonce, gas_price, gas_limit, shard_id, to_shard_id, to or b"", value, data]


def staking_transaction_fields(directive: int, payload: List[Any], nonce: int, gas_price: int,
                               gas_limit: int) -> List[Any]:
    return [directive, payload, nonce, gas_price, gas_limit]


def sign_eth_transaction(tx: Dict[str, Any], private_key: bytes) -> Signature:
    """
    Sign a legacy Ethereum transaction dict.

    Raises:
        SigningError: If eth_account rejects the transaction or key
    """
    try:
        signed = EthAccount.sign_transaction(tx, private_key)
    except (TypeError, ValueError, KeyValidationError) as e:
        raise SigningError(f"can't sign eth transaction: {e}") from e
    return Signature(raw=bytes(signed.raw_transaction), v=signed.v, r=signed.r, s=signed.s)
