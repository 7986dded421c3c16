"""
Typed RPC reply models for harmony-lib.

Fields a node may omit default to ``None`` so an absent field stays
distinguishable from one present with a zero value. Raw base-unit values are
kept as received; the converted Decimal is exposed next to them.
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from . import numeric


class RPCModel(BaseModel):
    """Base for reply models: aliases match the wire names, extras are kept."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class ShardRoute(RPCModel):
    """One entry of the sharding structure"""
    shard_id: int = Field(..., alias="shardID")
    http: str
    ws: Optional[str] = None
    current: Optional[bool] = None


class Failure(RPCModel):
    """A rejected transaction reported by an error sink"""
    tx_hash_id: str = Field(..., alias="tx-hash-id")
    error_message: str = Field("", alias="error-message")
    directive_kind: Optional[str] = Field(None, alias="directive-kind")
    time_at_rejection: Optional[int] = Field(None, alias="time-at-rejection")


class BlockInfo(RPCModel):
    """Subset of a block as returned by hmy_getBlockByNumber"""
    block_number: Optional[int] = Field(None, exclude=True)
    difficulty: Optional[int] = None
    extra_data: Optional[str] = Field(None, alias="extraData")
    hash: Optional[str] = None
    nonce: Optional[Union[int, str]] = None
    raw_timestamp: Optional[Union[int, str]] = Field(None, alias="timestamp")

    @property
    def timestamp(self) -> Optional[datetime]:
        """Block time in UTC, or None if the node didn't send one"""
        if self.raw_timestamp is None or self.raw_timestamp == "":
            return None
        seconds = numeric.parse_raw_integer(self.raw_timestamp)
        return datetime.fromtimestamp(seconds, tz=timezone.utc)


class TxReceipt(RPCModel):
    """Transaction receipt; only the members the library reasons about are typed"""
    tx_hash: str = Field(..., alias="transactionHash")
    block_number: Optional[Union[int, str]] = Field(None, alias="blockNumber")
    block_hash: Optional[str] = Field(None, alias="blockHash")
    status: Optional[Union[int, str]] = None
    gas_used: Optional[Union[int, str]] = Field(None, alias="gasUsed")
    from_address: Optional[str] = Field(None, alias="from")
    to_address: Optional[str] = Field(None, alias="to")
    logs: List[Dict[str, Any]] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return is_successful_status(self.status)


def is_successful_status(status: Any) -> bool:
    """Receipt status is ``"0x1"`` on v1 endpoints and ``1`` on v2 endpoints"""
    if status is None or status == "":
        return False
    if isinstance(status, str):
        return status.lower() == "0x1"
    return status == 1


def dec_from_raw(raw: Optional[Union[int, str]]) -> Optional[Decimal]:
    """Base units (int, decimal or hex string) to ONE; absent stays None"""
    if raw is None or raw == "":
        return None
    return numeric.from_base_units(raw)


def dec_from_string(raw: Optional[Union[int, str]]) -> Optional[Decimal]:
    """Plain decimal (rates, percentages); absent stays None"""
    if raw is None or raw == "":
        return None
    return numeric.new_dec(raw if isinstance(raw, (int, str)) else str(raw))
