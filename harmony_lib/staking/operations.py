"""
Staking operations: build the directive payload, sign it as a staking
transaction and submit it to the beacon shard.
"""
import logging
import threading
from typing import Any, Optional, Tuple, Union

from .. import numeric
from ..config import DEFAULT_CONFIRMATION_TIMEOUT, Gas
from ..crypto.bls import BLSKey
from ..exceptions import MissingAccountError
from ..network.network import Network
from ..transactions.builder import build_staking_transaction
from ..transactions.confirmation import TransactionResult, submit_and_confirm
from ..transactions.send import resolve_nonce
from . import directives
from .directives import Description, Directive, StakingPayload
from .types import ValidatorConfig

BEACON_SHARD = 0


def send_staking_transaction(
    network: Network,
    account: Any,
    directive_payload: Union[StakingPayload, Tuple[Directive, StakingPayload]],
    nonce: Optional[int] = None,
    gas: Optional[Gas] = None,
    timeout: int = DEFAULT_CONFIRMATION_TIMEOUT,
    cancel_event: Optional[threading.Event] = None,
    logger: Optional[logging.Logger] = None
) -> TransactionResult:
    """
    Sign and submit a staking directive.

    Args:
        network: Network to send on
        account: Account with an unlocked identity
        directive_payload: Payload or ``(directive, payload)`` pair
        nonce: Nonce to use, fetched from the beacon shard when None
        gas: Gas settings, inferred limit and 1 Gwei price by default
        timeout: Seconds to wait for the outcome; 0 returns after submission
        cancel_event: Stops waiting early when set
        logger: Optional logger

    Raises:
        MissingAccountError: If the account is absent or locked
        TransportError: If submission or polling fails
    """
    logger = logger or logging.getLogger(__name__)
    if account is None or getattr(account, "identity", None) is None:
        raise MissingAccountError()
    gas = gas or Gas()

    nonce = resolve_nonce(network, account.address, BEACON_SHARD, nonce)
    signed = build_staking_transaction(
        account, network.chain_id, nonce, directive_payload,
        gas_limit=gas.limit, gas_price=gas.price, logger=logger,
    )
    return submit_and_confirm(
        network.rpc_client(BEACON_SHARD), signed, timeout=timeout,
        cancel_event=cancel_event, logger=logger,
    )


def delegate(
    network: Network,
    account: Any,
    validator_address: str,
    amount: numeric.DecLike,
    **options
) -> TransactionResult:
    """Delegate ``amount`` ONE from the account to a validator"""
    payload = directives.delegate(account_address(account), validator_address, amount)
    return send_staking_transaction(network, account, payload, **options)


def undelegate(
    network: Network,
    account: Any,
    validator_address: str,
    amount: numeric.DecLike,
    **options
) -> TransactionResult:
    payload = directives.undelegate(account_address(account), validator_address, amount)
    return send_staking_transaction(network, account, payload, **options)


def collect_rewards(network: Network, account: Any, **options) -> TransactionResult:
    payload = directives.collect_rewards(account_address(account))
    return send_staking_transaction(network, account, payload, **options)


def create_validator(network: Network, account: Any, config: ValidatorConfig, **options) -> TransactionResult:
    """
    Register the account as a validator.

    ``config`` supplies the description, commission, delegation bounds,
    initial amount and BLS keys.
    """
    payload = directives.create_validator(
        account_address(account),
        config.to_description(),
        config.to_commission_rates(),
        config.minimum_self_delegation,
        config.maximum_total_delegation,
        config.bls_keys,
        config.amount,
    )
    return send_staking_transaction(network, account, payload, **options)


def edit_validator(
    network: Network,
    account: Any,
    description: Optional[Description] = None,
    commission_rate: Optional[numeric.DecLike] = None,
    min_self_delegation: Optional[numeric.DecLike] = None,
    max_total_delegation: Optional[numeric.DecLike] = None,
    remove_bls_key: Optional[Union[BLSKey, str]] = None,
    add_bls_key: Optional[BLSKey] = None,
    status: Optional[str] = None,
    **options
) -> TransactionResult:
    """Update the account's validator; members left as None stay unchanged"""
    payload = directives.edit_validator(
        account_address(account),
        description=description,
        commission_rate=commission_rate,
        min_self_delegation=min_self_delegation,
        max_total_delegation=max_total_delegation,
        remove_bls_key=remove_bls_key,
        add_bls_key=add_bls_key,
        status=status,
    )
    return send_staking_transaction(network, account, payload, **options)


def edit_validator_status(network: Network, account: Any, status: str, **options) -> TransactionResult:
    """Mark the account's validator ``active`` or ``inactive``"""
    payload = directives.edit_validator_status(account_address(account), status)
    return send_staking_transaction(network, account, payload, **options)


def account_address(account: Any) -> str:
    if account is None or getattr(account, "identity", None) is None:
        raise MissingAccountError()
    return account.address
