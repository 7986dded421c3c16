"""
Transaction builder.

Turns an intent (transfer or staking directive) into a signed, RLP encoded
transaction ready for submission. Building is deterministic: the same inputs,
nonce included, give the same bytes.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Tuple, Union

from eth_utils import encode_hex

from .. import address as addr
from .. import numeric
from ..config import ChainID
from ..exceptions import MissingAccountError
from ..staking.directives import Directive, StakingPayload
from . import gas as gas_utils
from . import signing


class TxKind(str, Enum):
    """Selects the submission method and the error sink to watch"""
    TRANSACTION = "transaction"
    STAKING = "staking"


@dataclass(frozen=True)
class SignedTransaction:
    """
    A signed transaction.

    Attributes:
        raw: Canonical wire encoding
        signature: ``raw`` as ``0x`` hex, the value submitted to the node
        tx_hash: Keccak hash of ``raw`` as ``0x`` hex
        gas_limit: Resolved gas limit
        nonce: Account nonce used
        kind: Plain or staking transaction
    """
    raw: bytes
    signature: str
    tx_hash: str
    gas_limit: int
    nonce: int
    kind: TxKind


def _signing_key(account: Any) -> bytes:
    identity = getattr(account, "identity", None) if account is not None else None
    if identity is None:
        raise MissingAccountError()
    return bytes(identity.key)


def payload_bytes(data: Union[bytes, str, None]) -> bytes:
    if data is None:
        return b""
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def _signed(sig: signing.Signature, gas_limit: int, nonce: int, kind: TxKind) -> SignedTransaction:
    return SignedTransaction(
        raw=sig.raw,
        signature=encode_hex(sig.raw),
        tx_hash=encode_hex(sig.tx_hash),
        gas_limit=gas_limit,
        nonce=nonce,
        kind=kind,
    )


def build_transaction(
    account: Any,
    chain_id: ChainID,
    nonce: int,
    to: Optional[str],
    amount: numeric.DecLike,
    from_shard: int = 0,
    to_shard: int = 0,
    data: Union[bytes, str, None] = None,
    gas_limit: Optional[int] = gas_utils.GAS_LIMIT_UNSPECIFIED,
    gas_price: numeric.DecLike = Decimal(1),
    logger: Optional[logging.Logger] = None
) -> SignedTransaction:
    """
    Build and sign a cross-shard transfer.

    Args:
        account: Account with an unlocked identity
        chain_id: Chain identity to sign for
        nonce: Account nonce on ``from_shard``
        to: Recipient address, bech32 or hex
        amount: Amount in ONE
        from_shard: Sending shard
        to_shard: Receiving shard
        data: Optional payload
        gas_limit: Gas limit, -1 to infer it from ``data``
        gas_price: Gas price in Gwei
        logger: Optional logger, defaults to this module's

    Returns:
        The signed transaction

    Raises:
        MissingAccountError: If the account is absent or locked
        InvalidAmountError: If amount or gas price are malformed
        InvalidAddressError: If ``to`` can't be parsed
        GasLimitError: If the gas limit resolves to zero
        SigningError: If signing fails
        EncodingError: If encoding fails
    """
    logger = logger or logging.getLogger(__name__)
    private_key = _signing_key(account)

    payload = payload_bytes(data)
    resolved_gas = gas_utils.calculate_gas_limit(gas_limit, payload)
    value = numeric.to_base_units(numeric.new_dec(amount))
    price = gas_utils.gas_price_base_units(numeric.new_dec(gas_price))
    recipient = addr.parse(to) if to else None

    fields = signing.plain_transaction_fields(
        nonce, price, resolved_gas, from_shard, to_shard, recipient, value, payload
    )
    sig = signing.sign_fields(fields, private_key, chain_id.value)
    signed = _signed(sig, resolved_gas, nonce, TxKind.TRANSACTION)

    logger.debug(f"Built transaction {signed.tx_hash} nonce={nonce} gas={resolved_gas} "
                 f"shard {from_shard}->{to_shard}")
    return signed


def build_eth_transaction(
    account: Any,
    chain_id: ChainID,
    nonce: int,
    to: Optional[str],
    amount: numeric.DecLike,
    data: Union[bytes, str, None] = None,
    gas_limit: Optional[int] = gas_utils.GAS_LIMIT_UNSPECIFIED,
    gas_price: numeric.DecLike = Decimal(1),
    logger: Optional[logging.Logger] = None
) -> SignedTransaction:
    """
    Build and sign an EVM-style (legacy Ethereum) transfer.

    Same as :func:`build_transaction` without shard routing; signed against
    the eth-compatible chain id.
    """
    logger = logger or logging.getLogger(__name__)
    private_key = _signing_key(account)

    payload = payload_bytes(data)
    resolved_gas = gas_utils.calculate_gas_limit(gas_limit, payload)
    tx = {
        "nonce": nonce,
        "gasPrice": gas_utils.gas_price_base_units(numeric.new_dec(gas_price)),
        "gas": resolved_gas,
        "value": numeric.to_base_units(numeric.new_dec(amount)),
        "data": payload,
        "chainId": chain_id.eth_value,
    }
    if to:
        tx["to"] = addr.to_checksum(to)

    sig = signing.sign_eth_transaction(tx, private_key)
    signed = _signed(sig, resolved_gas, nonce, TxKind.TRANSACTION)

    logger.debug(f"Built eth transaction {signed.tx_hash} nonce={nonce} gas={resolved_gas}")
    return signed


def build_staking_transaction(
    account: Any,
    chain_id: ChainID,
    nonce: int,
    directive_payload: Union[StakingPayload, Tuple[Directive, StakingPayload]],
    gas_limit: Optional[int] = gas_utils.GAS_LIMIT_UNSPECIFIED,
    gas_price: numeric.DecLike = Decimal(1),
    logger: Optional[logging.Logger] = None
) -> SignedTransaction:
    """
    Build and sign a staking transaction.

    Args:
        account: Account with an unlocked identity
        chain_id: Chain identity to sign for
        nonce: Account nonce on the beacon shard
        directive_payload: A payload, or the ``(directive, payload)`` pair
            returned by the generators in :mod:`harmony_lib.staking.directives`
        gas_limit: Gas limit, -1 to infer it from the encoded payload
        gas_price: Gas price in Gwei, scaled by 1e9 (Nano) into base units
            the same way as for plain transactions; the unscaled truncated
            value is never signed

    Raises:
        MissingAccountError: If the account is absent or locked
        GasLimitError: If the gas limit resolves to zero
        SigningError: If signing fails
        EncodingError: If encoding fails
    """
    logger = logger or logging.getLogger(__name__)
    private_key = _signing_key(account)

    if isinstance(directive_payload, tuple):
        directive, payload = Directive(directive_payload[0]), directive_payload[1]
    else:
        directive, payload = directive_payload.directive, directive_payload

    payload_rlp = payload.to_rlp()
    resolved_gas = gas_utils.calculate_gas_limit(
        gas_limit,
        signing.rlp_encode(payload_rlp),
        is_validator_creation=directive == Directive.CREATE_VALIDATOR,
    )
    price = gas_utils.gas_price_base_units(numeric.new_dec(gas_price))

    fields = signing.staking_transaction_fields(int(directive), payload_rlp, nonce, price, resolved_gas)
    sig = signing.sign_fields(fields, private_key, chain_id.value)
    signed = _signed(sig, resolved_gas, nonce, TxKind.STAKING)

    logger.debug(f"Built {directive.label} staking transaction {signed.tx_hash} nonce={nonce} gas={resolved_gas}")
    return signed
