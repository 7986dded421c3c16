"""
Building, signing, submitting and confirming transactions.
"""
from .builder import SignedTransaction, TxKind, build_eth_transaction, build_staking_transaction, build_transaction
from .confirmation import (
    ConfirmationStatus, Transaction, TransactionResult, all_failures, failure_for_transaction,
    get_transaction_receipt, is_transaction_successful, send_raw_transaction, staking_failures,
    submit_and_confirm, transaction_failures, wait_for_confirmation
)
from .gas import (
    GAS_LIMIT_UNSPECIFIED, TX_GAS, TX_GAS_CONTRACT_CREATION, TX_GAS_VALIDATOR_CREATION, bump_gas_price,
    calculate_gas_limit, intrinsic_gas
)
from .send import send_eth_transaction, send_transaction

__all__ = [
    "SignedTransaction",
    "TxKind",
    "build_transaction",
    "build_eth_transaction",
    "build_staking_transaction",
    "ConfirmationStatus",
    "Transaction",
    "TransactionResult",
    "send_raw_transaction",
    "get_transaction_receipt",
    "transaction_failures",
    "staking_failures",
    "all_failures",
    "failure_for_transaction",
    "is_transaction_successful",
    "wait_for_confirmation",
    "submit_and_confirm",
    "GAS_LIMIT_UNSPECIFIED",
    "TX_GAS",
    "TX_GAS_CONTRACT_CREATION",
    "TX_GAS_VALIDATOR_CREATION",
    "intrinsic_gas",
    "calculate_gas_limit",
    "bump_gas_price",
    "send_transaction",
    "send_eth_transaction",
]
