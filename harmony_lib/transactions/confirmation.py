"""
Submission and confirmation of signed transactions.

After submission the node is polled once per interval. Each round first
checks the error sink, then the receipt, so a transaction the network has
already rejected is never reported as pending or confirmed.
"""
import logging
import threading
import time
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import ValidationError

from ..exceptions import (
    ConfirmationCancelledError, ConfirmationTimeoutError, TransactionRejectedError, TransportError
)
from ..models import Failure, TxReceipt, is_successful_status
from ..rpc.client import RPCClient
from ..rpc.methods import Method
from .builder import SignedTransaction, TxKind

DEFAULT_POLL_INTERVAL = 1


class ConfirmationStatus(str, Enum):
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"


@dataclass
class TransactionResult:
    """
    Outcome of submitting a transaction.

    ``receipt`` is only set when confirmed; ``error`` and ``directive_kind``
    only when rejected. A timed out result carries neither.
    """
    tx_hash: str
    status: ConfirmationStatus
    receipt: Optional[TxReceipt] = None
    error: Optional[str] = None
    directive_kind: Optional[str] = None
    timeout: int = 0

    @property
    def success(self) -> bool:
        return self.status == ConfirmationStatus.CONFIRMED and is_transaction_successful(self.receipt)

    def raise_for_status(self) -> "TransactionResult":
        """
        Raise if the transaction was rejected, timed out or cancelled.

        Returns:
            self, for chaining
        """
        if self.status == ConfirmationStatus.REJECTED:
            raise TransactionRejectedError(self.tx_hash, self.error or "", self.directive_kind)
        if self.status == ConfirmationStatus.TIMED_OUT:
            raise ConfirmationTimeoutError(self.tx_hash, self.timeout)
        if self.status == ConfirmationStatus.CANCELLED:
            raise ConfirmationCancelledError(self.tx_hash)
        return self


@dataclass
class Transaction:
    """A submitted transfer together with its outcome"""
    from_address: str
    to_address: Optional[str]
    from_shard_id: int
    to_shard_id: int
    amount: Decimal
    gas_price: Decimal
    nonce: int
    data: bytes = b""
    timeout: int = 0
    tx_hash: Optional[str] = None
    success: bool = False
    response: Optional[TxReceipt] = None
    error: Optional[str] = None
    status: Optional[ConfirmationStatus] = None

    @classmethod
    def from_result(cls, result: TransactionResult, **details) -> "Transaction":
        return cls(
            tx_hash=result.tx_hash,
            success=result.success,
            response=result.receipt,
            error=result.error,
            status=result.status,
            timeout=result.timeout,
            **details,
        )


def is_transaction_successful(receipt: Optional[Union[TxReceipt, Dict[str, Any]]]) -> bool:
    """True for a receipt with status 1"""
    if not receipt:
        return False
    if isinstance(receipt, TxReceipt):
        return receipt.success
    return is_successful_status(receipt.get("status"))


def send_raw_transaction(client: RPCClient, signature: str, kind: TxKind = TxKind.TRANSACTION) -> str:
    """
    Submit a hex encoded signed transaction.

    Returns:
        The transaction hash reported by the node

    Raises:
        RPCError: If the node refuses the transaction
        TransportError: If the call fails or no hash comes back
    """
    method = Method.SEND_RAW_STAKING_TRANSACTION if kind == TxKind.STAKING else Method.SEND_RAW_TRANSACTION
    tx_hash = client.call(method, [signature])
    if not isinstance(tx_hash, str) or not tx_hash:
        raise TransportError(f"{method} returned no transaction hash: {tx_hash!r}")
    return tx_hash


def get_transaction_receipt(client: RPCClient, tx_hash: str) -> Optional[TxReceipt]:
    """
    Receipt of a transaction, or None while it isn't included

    Raises:
        TransportError: If the node replies with something that isn't a receipt
    """
    receipt = client.call(Method.GET_TRANSACTION_RECEIPT, [tx_hash])
    if not receipt:
        return None
    try:
        return TxReceipt.model_validate(receipt)
    except ValidationError as e:
        raise TransportError(f"{Method.GET_TRANSACTION_RECEIPT} returned a malformed receipt: {e}") from e


def _failures(client: RPCClient, method: str) -> List[Failure]:
    result = client.call(method, [])
    if result is None:
        return []
    if not isinstance(result, list):
        raise TransportError(f"{method} returned {result!r}, expected a list")
    try:
        return [Failure.model_validate(entry) for entry in result]
    except ValidationError as e:
        raise TransportError(f"{method} returned a malformed failure: {e}") from e


def transaction_failures(client: RPCClient) -> List[Failure]:
    """Plain transactions currently in the node's error sink"""
    return _failures(client, Method.GET_CURRENT_TRANSACTION_ERROR_SINK)


def staking_failures(client: RPCClient) -> List[Failure]:
    """Staking transactions currently in the node's error sink"""
    return _failures(client, Method.GET_CURRENT_STAKING_ERROR_SINK)


def all_failures(client: RPCClient) -> List[Failure]:
    return transaction_failures(client) + staking_failures(client)


def failure_for_transaction(failures: List[Failure], tx_hash: str) -> Optional[Failure]:
    target = tx_hash.lower()
    for failure in failures:
        if failure.tx_hash_id.lower() == target:
            return failure
    return None


def _sink_for(kind: TxKind) -> Callable[[RPCClient], List[Failure]]:
    return staking_failures if kind == TxKind.STAKING else transaction_failures


def wait_for_confirmation(
    client: RPCClient,
    kind: TxKind,
    tx_hash: str,
    timeout: int,
    *,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    cancel_event: Optional[threading.Event] = None,
    logger: Optional[logging.Logger] = None
) -> TransactionResult:
    """
    Poll until the transaction is rejected, confirmed or the budget runs out.

    Args:
        client: Client of the shard the transaction was sent to
        kind: Selects the error sink to check
        tx_hash: Hash returned on submission
        timeout: Budget in seconds
        poll_interval: Seconds between two rounds
        cancel_event: Stops polling early when set
        logger: Optional logger, defaults to this module's

    Returns:
        A rejected, confirmed, timed out or cancelled result

    Raises:
        TransportError: If a poll fails; polls aren't retried
    """
    logger = logger or logging.getLogger(__name__)
    sink = _sink_for(kind)
    remaining = timeout

    while True:
        if cancel_event is not None and cancel_event.is_set():
            logger.info(f"Stopped waiting for {tx_hash}")
            return TransactionResult(tx_hash, ConfirmationStatus.CANCELLED, timeout=timeout)

        failure = failure_for_transaction(sink(client), tx_hash)
        if failure is not None:
            logger.warning(f"Transaction {tx_hash} rejected: {failure.error_message}")
            return TransactionResult(
                tx_hash,
                ConfirmationStatus.REJECTED,
                error=failure.error_message,
                directive_kind=failure.directive_kind,
                timeout=timeout,
            )

        receipt = get_transaction_receipt(client, tx_hash)
        if receipt:
            logger.info(f"Transaction {tx_hash} confirmed")
            return TransactionResult(tx_hash, ConfirmationStatus.CONFIRMED, receipt=receipt, timeout=timeout)

        if remaining <= 0:
            logger.warning(f"Transaction {tx_hash} not confirmed within {timeout}s")
            return TransactionResult(tx_hash, ConfirmationStatus.TIMED_OUT, timeout=timeout)

        logger.debug(f"Waiting for {tx_hash}, {remaining}s left")
        if cancel_event is not None:
            cancel_event.wait(poll_interval)
        else:
            time.sleep(poll_interval)
        remaining -= poll_interval


def submit_and_confirm(
    client: RPCClient,
    signed: Union[SignedTransaction, str],
    kind: Optional[TxKind] = None,
    timeout: int = 0,
    *,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    cancel_event: Optional[threading.Event] = None,
    logger: Optional[logging.Logger] = None
) -> TransactionResult:
    """
    Submit a signed transaction and wait for its outcome.

    With ``timeout <= 0`` the call returns right after submission with a
    ``submitted`` result holding only the hash.

    Raises:
        RPCError: If submission is refused
        TransportError: If submission or a poll fails
    """
    logger = logger or logging.getLogger(__name__)
    if isinstance(signed, SignedTransaction):
        kind = kind or signed.kind
        signature = signed.signature
    else:
        signature = signed
    kind = kind or TxKind.TRANSACTION

    tx_hash = send_raw_transaction(client, signature, kind)
    logger.info(f"Submitted {kind.value} {tx_hash} to {client.endpoint}")

    if timeout <= 0:
        return TransactionResult(tx_hash, ConfirmationStatus.SUBMITTED)

    return wait_for_confirmation(
        client, kind, tx_hash, timeout,
        poll_interval=poll_interval, cancel_event=cancel_event, logger=logger,
    )
