"""
Read-only queries: balances, blocks, nonces.
"""
import logging
from decimal import Decimal
from typing import Dict, Mapping

from .. import numeric
from ..address import to_bech32
from ..exceptions import EmptyResultError, InvalidAmountError, TransportError
from ..models import BlockInfo
from ..utils import hex_to_decimal
from .client import RPCClient
from .methods import Method

logger = logging.getLogger(__name__)


def _hex_result(value, method: str) -> int:
    if value is None or value == "":
        raise EmptyResultError(f"{method} returned an empty result")
    if isinstance(value, int):
        return value
    try:
        return numeric.parse_raw_integer(value)
    except InvalidAmountError as e:
        raise TransportError(f"{method} returned a malformed number: {value!r}") from e


def _uint64_result(value, method: str) -> int:
    if isinstance(value, str) and value.startswith("0x"):
        try:
            return hex_to_decimal(value)
        except InvalidAmountError as e:
            raise TransportError(f"{method} returned a malformed uint64: {value!r}") from e
    return _hex_result(value, method)


def get_balance(client: RPCClient, address: str) -> Decimal:
    """
    Balance of an address on the client's shard, in ONE.

    Raises:
        EmptyResultError: If the node returned no balance
    """
    result = client.call(Method.GET_BALANCE, [to_bech32(address), "latest"])
    return numeric.from_base_units(_hex_result(result, Method.GET_BALANCE))


def all_shard_balances(address: str, shards: Mapping[int, RPCClient]) -> Dict[int, Decimal]:
    """
    Balances of an address on every given shard.

    Args:
        address: Account address
        shards: Mapping of shard id to the client for that shard
    """
    balances = {}
    for shard_id, client in shards.items():
        try:
            balances[shard_id] = get_balance(client, address)
        except TransportError as e:
            raise TransportError(f"balance lookup on shard {shard_id} failed: {e}") from e
    return balances


def shard_balance(address: str, shard_id: int, shards: Mapping[int, RPCClient]) -> Decimal:
    """Balance on one shard; shards without a client count as zero."""
    if shard_id not in shards:
        return Decimal(0)
    return get_balance(shards[shard_id], address)


def total_balance(address: str, shards: Mapping[int, RPCClient]) -> Decimal:
    total = Decimal(0)
    for balance in all_shard_balances(address, shards).values():
        total = numeric.add(total, balance)
    return total


def get_next_nonce(client: RPCClient, address: str) -> int:
    """Next nonce the account must use on the client's shard."""
    result = client.call(Method.GET_TRANSACTION_COUNT, [to_bech32(address), "latest"])
    return _hex_result(result, Method.GET_TRANSACTION_COUNT)


def get_current_epoch(client: RPCClient) -> int:
    """Epoch of the latest block header."""
    header = client.call(Method.GET_LATEST_BLOCK_HEADER, [])
    if not header or "epoch" not in header:
        raise EmptyResultError(f"{Method.GET_LATEST_BLOCK_HEADER} returned no epoch")
    return _hex_result(header["epoch"], Method.GET_LATEST_BLOCK_HEADER)


def get_block_by_number(client: RPCClient, block_number: int, include_transactions: bool = False) -> BlockInfo:
    """
    Fetch a block.

    Raises:
        RPCError: If the node rejects the request
        EmptyResultError: If the block doesn't exist
    """
    result = client.call(Method.GET_BLOCK_BY_NUMBER, [hex(block_number), include_transactions])
    if not result:
        raise EmptyResultError(f"block {block_number} not found")
    block = BlockInfo.model_validate(result)
    block.block_number = block_number
    return block


def get_current_block_number(client: RPCClient) -> int:
    return _uint64_result(client.call(Method.BLOCK_NUMBER, []), Method.BLOCK_NUMBER)


def get_transaction_count_by_block_number(client: RPCClient, block_number: int) -> int:
    result = client.call(Method.GET_BLOCK_TRANSACTION_COUNT_BY_NUMBER, [hex(block_number)])
    return _uint64_result(result, Method.GET_BLOCK_TRANSACTION_COUNT_BY_NUMBER)
