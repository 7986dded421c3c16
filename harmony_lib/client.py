"""
HarmonyClient - entry point tying a network, an account and gas settings
together.
"""
import logging
import threading
from decimal import Decimal
from typing import Dict, List, Optional, Union

from .accounts.account import Account
from .config import DEFAULT_CONFIRMATION_TIMEOUT, Gas, Retry
from .crypto.bls import BLSKey
from .exceptions import MissingAccountError
from .models import BlockInfo
from .network.network import Network
from .rpc import queries
from .staking import lookup, operations
from .staking.directives import Description
from .staking.types import DelegationInfo, ValidatorConfig, ValidatorResult
from .transactions.confirmation import Transaction, TransactionResult
from .transactions.send import send_eth_transaction, send_transaction


class HarmonyClient:
    """
    Client for a Harmony network.

    This client handles:
    1. Transfers, plain and EVM-style
    2. Staking directives
    3. Balance, block and validator queries

    Transactions need an unlocked :class:`Account`; queries don't.
    """

    def __init__(
        self,
        network: Union[Network, str] = "testnet",
        account: Optional[Account] = None,
        gas: Optional[Gas] = None,
        timeout: int = DEFAULT_CONFIRMATION_TIMEOUT,
        node: Optional[str] = None,
        retry: Optional[Retry] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the HarmonyClient

        Args:
            network: A Network, or the name of one (mainnet, testnet, localnet, ...)
            account: Account used for signing; unlocked on first use
            gas: Default gas settings
            timeout: Default seconds to wait for confirmations; 0 doesn't wait
            node: Fixed node to send every call to, when ``network`` is a name
            retry: Retry policy for sharding structure lookups, when ``network`` is a name
            logger: Optional logger instance to use for debug/info logging
        """
        if isinstance(network, str):
            network = Network(name=network, node=node, retry=retry)
        self.network = network
        self.account = account
        self.gas = gas or Gas()
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)

    @property
    def address(self) -> str:
        """
        Address of the signing account

        Raises:
            MissingAccountError: If no account is set
        """
        if self.account is None or not self.account.address:
            raise MissingAccountError()
        return self.account.address

    def _signer(self) -> Account:
        if self.account is None:
            raise MissingAccountError()
        self.account.unlock()
        return self.account

    def _options(self, nonce: Optional[int], gas: Optional[Gas], timeout: Optional[int],
                 cancel_event: Optional[threading.Event]) -> dict:
        return {
            "nonce": nonce,
            "gas": gas or self.gas,
            "timeout": self.timeout if timeout is None else timeout,
            "cancel_event": cancel_event,
            "logger": self.logger,
        }

    # Transfers ---------------------------------------------------------------

    def send_transaction(
        self,
        to: str,
        amount: Union[Decimal, int, str],
        from_shard: int = 0,
        to_shard: int = 0,
        data: Union[bytes, str, None] = None,
        nonce: Optional[int] = None,
        gas: Optional[Gas] = None,
        timeout: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> Transaction:
        """
        Send ONE, possibly across shards.

        Args:
            to: Recipient address
            amount: Amount in ONE
            from_shard: Sending shard
            to_shard: Receiving shard
            data: Optional payload
            nonce: Nonce to use, fetched from the network when None
            gas: Gas settings, the client default when None
            timeout: Seconds to wait, the client default when None
            cancel_event: Stops waiting early when set

        Returns:
            The transaction record with its outcome

        Raises:
            MissingAccountError: If no account is set
            AccountLockedError: If the account can't be unlocked
            TransportError: If the network can't be reached
        """
        return send_transaction(
            self.network, self._signer(), to, amount,
            from_shard=from_shard, to_shard=to_shard, data=data,
            **self._options(nonce, gas, timeout, cancel_event),
        )

    def send_eth_transaction(
        self,
        to: str,
        amount: Union[Decimal, int, str],
        shard_id: int = 0,
        data: Union[bytes, str, None] = None,
        nonce: Optional[int] = None,
        gas: Optional[Gas] = None,
        timeout: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> Transaction:
        """Send ONE as an EVM-style transaction within one shard."""
        return send_eth_transaction(
            self.network, self._signer(), to, amount,
            shard_id=shard_id, data=data,
            **self._options(nonce, gas, timeout, cancel_event),
        )

    # Staking -----------------------------------------------------------------

    def delegate(self, validator_address: str, amount: Union[Decimal, int, str], nonce: Optional[int] = None,
                 gas: Optional[Gas] = None, timeout: Optional[int] = None,
                 cancel_event: Optional[threading.Event] = None) -> TransactionResult:
        return operations.delegate(
            self.network, self._signer(), validator_address, amount,
            **self._options(nonce, gas, timeout, cancel_event),
        )

    def undelegate(self, validator_address: str, amount: Union[Decimal, int, str], nonce: Optional[int] = None,
                   gas: Optional[Gas] = None, timeout: Optional[int] = None,
                   cancel_event: Optional[threading.Event] = None) -> TransactionResult:
        return operations.undelegate(
            self.network, self._signer(), validator_address, amount,
            **self._options(nonce, gas, timeout, cancel_event),
        )

    def collect_rewards(self, nonce: Optional[int] = None, gas: Optional[Gas] = None,
                        timeout: Optional[int] = None,
                        cancel_event: Optional[threading.Event] = None) -> TransactionResult:
        return operations.collect_rewards(
            self.network, self._signer(), **self._options(nonce, gas, timeout, cancel_event)
        )

    def create_validator(self, config: ValidatorConfig, nonce: Optional[int] = None, gas: Optional[Gas] = None,
                         timeout: Optional[int] = None,
                         cancel_event: Optional[threading.Event] = None) -> TransactionResult:
        return operations.create_validator(
            self.network, self._signer(), config, **self._options(nonce, gas, timeout, cancel_event)
        )

    def edit_validator(
        self,
        description: Optional[Description] = None,
        commission_rate: Optional[Union[Decimal, str]] = None,
        min_self_delegation: Optional[Union[Decimal, int, str]] = None,
        max_total_delegation: Optional[Union[Decimal, int, str]] = None,
        remove_bls_key: Optional[Union[BLSKey, str]] = None,
        add_bls_key: Optional[BLSKey] = None,
        status: Optional[str] = None,
        nonce: Optional[int] = None,
        gas: Optional[Gas] = None,
        timeout: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> TransactionResult:
        return operations.edit_validator(
            self.network, self._signer(),
            description=description,
            commission_rate=commission_rate,
            min_self_delegation=min_self_delegation,
            max_total_delegation=max_total_delegation,
            remove_bls_key=remove_bls_key,
            add_bls_key=add_bls_key,
            status=status,
            **self._options(nonce, gas, timeout, cancel_event),
        )

    def edit_validator_status(self, status: str, nonce: Optional[int] = None, gas: Optional[Gas] = None,
                              timeout: Optional[int] = None,
                              cancel_event: Optional[threading.Event] = None) -> TransactionResult:
        return operations.edit_validator_status(
            self.network, self._signer(), status, **self._options(nonce, gas, timeout, cancel_event)
        )

    # Queries -----------------------------------------------------------------

    def balance(self, address: Optional[str] = None, shard_id: int = 0) -> Decimal:
        return self.network.shard_balance(address or self.address, shard_id)

    def all_shard_balances(self, address: Optional[str] = None) -> Dict[int, Decimal]:
        return self.network.all_shard_balances(address or self.address)

    def total_balance(self, address: Optional[str] = None) -> Decimal:
        return self.network.total_balance(address or self.address)

    def nonce(self, address: Optional[str] = None, shard_id: int = 0) -> int:
        return self.network.current_nonce(address or self.address, shard_id)

    def block(self, block_number: int, shard_id: int = 0, include_transactions: bool = False) -> BlockInfo:
        return queries.get_block_by_number(self.network.rpc_client(shard_id), block_number, include_transactions)

    def current_block_number(self, shard_id: int = 0) -> int:
        return queries.get_current_block_number(self.network.rpc_client(shard_id))

    def current_epoch(self) -> int:
        return queries.get_current_epoch(self.network.rpc_client(operations.BEACON_SHARD))

    def all_validators(self) -> List[str]:
        return lookup.all_validators(self.network.rpc_client(operations.BEACON_SHARD))

    def elected_validators(self) -> List[str]:
        return lookup.elected_validators(self.network.rpc_client(operations.BEACON_SHARD))

    def validator_exists(self, validator_address: str) -> bool:
        return lookup.validator_exists(self.network.rpc_client(operations.BEACON_SHARD), validator_address)

    def validator_information(self, validator_address: str) -> ValidatorResult:
        return lookup.validator_information(self.network.rpc_client(operations.BEACON_SHARD), validator_address)

    def all_validator_information(self, fetch_all_pages: bool = True,
                                  block_number: Optional[int] = None) -> List[ValidatorResult]:
        return lookup.all_validator_information(
            self.network.rpc_client(operations.BEACON_SHARD), fetch_all_pages, block_number
        )

    def delegations_by_delegator(self, delegator_address: Optional[str] = None) -> List[DelegationInfo]:
        return lookup.delegations_by_delegator(
            self.network.rpc_client(operations.BEACON_SHARD), delegator_address or self.address
        )

    def delegations_by_validator(self, validator_address: str) -> List[DelegationInfo]:
        return lookup.delegations_by_validator(self.network.rpc_client(operations.BEACON_SHARD), validator_address)
