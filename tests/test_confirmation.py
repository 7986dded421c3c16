"""
Tests for submission and confirmation polling.
"""
import threading

import pytest

from harmony_lib.exceptions import (
    ConfirmationCancelledError, ConfirmationTimeoutError, RPCError, TransactionRejectedError, TransportError
)
from harmony_lib.rpc.client import RPCClient
from harmony_lib.rpc.methods import Method
from harmony_lib.transactions import (
    ConfirmationStatus, SignedTransaction, TransactionResult, TxKind, failure_for_transaction,
    is_transaction_successful, submit_and_confirm, wait_for_confirmation
)
from harmony_lib.models import Failure, TxReceipt

from conftest import TEST_NODE, FakeTransport, sequence

TX_HASH = "0x" + "ab" * 32
RECEIPT = {"transactionHash": TX_HASH, "blockNumber": "0x10", "status": "0x1"}


def _signed(kind=TxKind.TRANSACTION):
    return SignedTransaction(raw=b"\x01", signature="0x01", tx_hash=TX_HASH, gas_limit=21000, nonce=0, kind=kind)


def _client(**handlers):
    transport = FakeTransport({
        Method.SEND_RAW_TRANSACTION: TX_HASH,
        Method.SEND_RAW_STAKING_TRANSACTION: TX_HASH,
        Method.GET_CURRENT_TRANSACTION_ERROR_SINK: [],
        Method.GET_CURRENT_STAKING_ERROR_SINK: [],
        Method.GET_TRANSACTION_RECEIPT: None,
    })
    for method, handler in handlers.items():
        transport.on(getattr(Method, method), handler)
    return RPCClient(TEST_NODE, transport), transport


def test_fire_and_forget_does_not_poll():
    client, transport = _client()

    result = submit_and_confirm(client, _signed(), timeout=0)

    assert result.status == ConfirmationStatus.SUBMITTED
    assert result.tx_hash == TX_HASH
    assert transport.methods() == [Method.SEND_RAW_TRANSACTION]
    assert transport.calls[0][2] == ["0x01"]


def test_staking_submission_uses_staking_method():
    client, transport = _client()
    submit_and_confirm(client, _signed(TxKind.STAKING))
    assert transport.methods() == [Method.SEND_RAW_STAKING_TRANSACTION]


def test_confirmed_after_a_few_polls():
    client, transport = _client(GET_TRANSACTION_RECEIPT=sequence(None, None, RECEIPT))

    result = submit_and_confirm(client, _signed(), timeout=10)

    assert result.status == ConfirmationStatus.CONFIRMED
    assert isinstance(result.receipt, TxReceipt)
    assert result.receipt.tx_hash == TX_HASH
    assert result.receipt.block_number == "0x10"
    assert result.success
    assert transport.count(Method.GET_TRANSACTION_RECEIPT) == 3


def test_rejection_wins_over_receipt():
    failure = {"tx-hash-id": TX_HASH.upper().replace("0X", "0x"), "error-message": "insufficient balance",
               "directive-kind": None, "time-at-rejection": 1600000000}
    client, transport = _client(GET_CURRENT_TRANSACTION_ERROR_SINK=[failure], GET_TRANSACTION_RECEIPT=RECEIPT)

    result = submit_and_confirm(client, _signed(), timeout=5)

    assert result.status == ConfirmationStatus.REJECTED
    assert result.error == "insufficient balance"
    assert result.receipt is None
    assert transport.count(Method.GET_TRANSACTION_RECEIPT) == 0
    with pytest.raises(TransactionRejectedError) as excinfo:
        result.raise_for_status()
    assert excinfo.value.tx_hash == TX_HASH


def test_staking_rejection_reports_directive():
    failure = {"tx-hash-id": TX_HASH, "error-message": "validator exists", "directive-kind": "CreateValidator"}
    client, transport = _client(GET_CURRENT_STAKING_ERROR_SINK=[failure])

    result = submit_and_confirm(client, _signed(TxKind.STAKING), timeout=5)

    assert result.status == ConfirmationStatus.REJECTED
    assert result.directive_kind == "CreateValidator"
    assert transport.count(Method.GET_CURRENT_TRANSACTION_ERROR_SINK) == 0


def test_timeout_makes_one_check_per_second_plus_one():
    client, transport = _client()

    result = wait_for_confirmation(client, TxKind.TRANSACTION, TX_HASH, 2)

    assert result.status == ConfirmationStatus.TIMED_OUT
    assert result.receipt is None and result.error is None
    assert transport.count(Method.GET_TRANSACTION_RECEIPT) == 3
    assert transport.count(Method.GET_CURRENT_TRANSACTION_ERROR_SINK) == 3
    with pytest.raises(ConfirmationTimeoutError) as excinfo:
        result.raise_for_status()
    assert excinfo.value.timeout == 2


def test_cancel_stops_polling():
    event = threading.Event()

    def receipt(_endpoint, _params):
        event.set()
        return None

    client, transport = _client(GET_TRANSACTION_RECEIPT=receipt)

    result = submit_and_confirm(client, _signed(), timeout=30, cancel_event=event)

    assert result.status == ConfirmationStatus.CANCELLED
    assert transport.count(Method.GET_TRANSACTION_RECEIPT) == 1
    with pytest.raises(ConfirmationCancelledError):
        result.raise_for_status()


def test_poll_failure_propagates():
    client, _ = _client(GET_TRANSACTION_RECEIPT=TransportError("connection reset"))
    with pytest.raises(TransportError):
        submit_and_confirm(client, _signed(), timeout=5)


def test_refused_submission_raises_rpc_error():
    refused = {"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "nonce too low"}}
    client, transport = _client(SEND_RAW_TRANSACTION=refused)

    with pytest.raises(RPCError) as excinfo:
        submit_and_confirm(client, "0xdeadbeef", timeout=5)
    assert str(excinfo.value) == "nonce too low (-32000)"
    assert transport.methods() == [Method.SEND_RAW_TRANSACTION]


def test_malformed_receipt_is_a_transport_error():
    client, _ = _client(GET_TRANSACTION_RECEIPT={"status": "0x1"})
    with pytest.raises(TransportError):
        wait_for_confirmation(client, TxKind.TRANSACTION, TX_HASH, 1)


def test_empty_hash_is_a_transport_error():
    client, _ = _client(SEND_RAW_TRANSACTION="")
    with pytest.raises(TransportError):
        submit_and_confirm(client, _signed())


def test_malformed_sink_is_a_transport_error():
    client, _ = _client(GET_CURRENT_TRANSACTION_ERROR_SINK={"not": "a list"})
    with pytest.raises(TransportError):
        wait_for_confirmation(client, TxKind.TRANSACTION, TX_HASH, 1)


def test_confirmed_result_passes_raise_for_status():
    result = TransactionResult(TX_HASH, ConfirmationStatus.CONFIRMED, receipt=TxReceipt.model_validate(RECEIPT))
    assert result.raise_for_status() is result


@pytest.mark.parametrize("receipt,expected", [
    ({"status": "0x1"}, True),
    ({"status": 1}, True),
    ({"status": "0x0"}, False),
    ({}, False),
    (None, False),
    (TxReceipt(transactionHash=TX_HASH, status="0x1"), True),
    (TxReceipt(transactionHash=TX_HASH, status=0), False),
])
def test_is_transaction_successful(receipt, expected):
    assert is_transaction_successful(receipt) is expected


def test_failure_lookup_ignores_case():
    failures = [Failure(tx_hash_id="0xABCD", error_message="bad")]
    assert failure_for_transaction(failures, "0xabcd").error_message == "bad"
    assert failure_for_transaction(failures, "0xef") is None
