"""
Transfers end to end: resolve the nonce and shard client, build, sign,
submit and wait for the outcome.
"""
import logging
import threading
from typing import Any, Optional, Union

from .. import numeric
from ..config import DEFAULT_CONFIRMATION_TIMEOUT, Gas
from ..exceptions import MissingAccountError
from ..network.network import Network
from .builder import build_eth_transaction, build_transaction, payload_bytes
from .confirmation import Transaction, submit_and_confirm


def resolve_nonce(network: Network, address: str, shard_id: int, nonce: Optional[int]) -> int:
    """Use an explicit nonce as given, otherwise ask the shard"""
    if nonce is not None and nonce >= 0:
        return nonce
    return network.current_nonce(address, shard_id)


def send_transaction(
    network: Network,
    account: Any,
    to: str,
    amount: numeric.DecLike,
    from_shard: int = 0,
    to_shard: int = 0,
    nonce: Optional[int] = None,
    gas: Optional[Gas] = None,
    data: Union[bytes, str, None] = None,
    timeout: int = DEFAULT_CONFIRMATION_TIMEOUT,
    cancel_event: Optional[threading.Event] = None,
    logger: Optional[logging.Logger] = None
) -> Transaction:
    """
    Send ONE from ``account`` to ``to``, possibly across shards.

    Args:
        network: Network to send on
        account: Account with an unlocked identity
        to: Recipient address
        amount: Amount in ONE
        from_shard: Shard the funds leave from
        to_shard: Shard the funds arrive on
        nonce: Nonce to use, fetched from ``from_shard`` when None
        gas: Gas settings, inferred limit and 1 Gwei price by default
        data: Optional payload
        timeout: Seconds to wait for the outcome; 0 returns after submission
        cancel_event: Stops waiting early when set
        logger: Optional logger

    Returns:
        The transaction record with its outcome

    Raises:
        MissingAccountError: If the account is absent or locked
        TransportError: If submission or polling fails
    """
    logger = logger or logging.getLogger(__name__)
    if account is None or getattr(account, "identity", None) is None:
        raise MissingAccountError()
    gas = gas or Gas()
    amount = numeric.new_dec(amount)

    nonce = resolve_nonce(network, account.address, from_shard, nonce)
    signed = build_transaction(
        account, network.chain_id, nonce, to, amount,
        from_shard=from_shard, to_shard=to_shard, data=data,
        gas_limit=gas.limit, gas_price=gas.price, logger=logger,
    )
    logger.info(f"Sending {amount} ONE from {account.address} (shard {from_shard}) "
                f"to {to} (shard {to_shard}) on {network.name}, nonce {nonce}")

    result = submit_and_confirm(
        network.rpc_client(from_shard), signed, timeout=timeout,
        cancel_event=cancel_event, logger=logger,
    )
    return Transaction.from_result(
        result,
        from_address=account.address,
        to_address=to,
        from_shard_id=from_shard,
        to_shard_id=to_shard,
        amount=amount,
        gas_price=gas.price,
        nonce=nonce,
        data=payload_bytes(data),
    )


def send_eth_transaction(
    network: Network,
    account: Any,
    to: str,
    amount: numeric.DecLike,
    shard_id: int = 0,
    nonce: Optional[int] = None,
    gas: Optional[Gas] = None,
    data: Union[bytes, str, None] = None,
    timeout: int = DEFAULT_CONFIRMATION_TIMEOUT,
    cancel_event: Optional[threading.Event] = None,
    logger: Optional[logging.Logger] = None
) -> Transaction:
    """
    Send ONE as an EVM-style transaction within one shard.

    Same arguments as :func:`send_transaction`, with ``shard_id`` as both
    source and destination.
    """
    logger = logger or logging.getLogger(__name__)
    if account is None or getattr(account, "identity", None) is None:
        raise MissingAccountError()
    gas = gas or Gas()
    amount = numeric.new_dec(amount)

    nonce = resolve_nonce(network, account.address, shard_id, nonce)
    signed = build_eth_transaction(
        account, network.chain_id, nonce, to, amount,
        data=data, gas_limit=gas.limit, gas_price=gas.price, logger=logger,
    )
    logger.info(f"Sending {amount} ONE from {account.address} to {to} as an eth transaction "
                f"on shard {shard_id} of {network.name}, nonce {nonce}")

    result = submit_and_confirm(
        network.rpc_client(shard_id), signed, timeout=timeout,
        cancel_event=cancel_event, logger=logger,
    )
    return Transaction.from_result(
        result,
        from_address=account.address,
        to_address=to,
        from_shard_id=shard_id,
        to_shard_id=shard_id,
        amount=amount,
        gas_price=gas.price,
        nonce=nonce,
        data=payload_bytes(data),
    )
