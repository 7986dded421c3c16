"""
Typed staking replies and validator settings.

Reply models keep the raw wire values (``raw_*``) and expose the converted
Decimal next to them; a member the node omitted converts to ``None``.
"""
from decimal import Decimal
from typing import List, Optional, Union

from pydantic import Field

from ..crypto.bls import BLSKey
from ..models import RPCModel, dec_from_raw, dec_from_string
from .directives import CommissionRates, Description, Eligibility, determine_epos_status

RawAmount = Optional[Union[int, str]]


class UndelegationInfo(RPCModel):
    raw_amount: RawAmount = Field(None, alias="Amount")
    epoch: Optional[int] = Field(None, alias="Epoch")

    @property
    def amount(self) -> Optional[Decimal]:
        return dec_from_raw(self.raw_amount)


class DelegationInfo(RPCModel):
    undelegations: List[UndelegationInfo] = Field(default_factory=list, alias="Undelegations")
    delegator_address: Optional[str] = Field(None, alias="delegator-address")
    validator_address: Optional[str] = Field(None, alias="validator-address")
    raw_amount: RawAmount = Field(None, alias="amount")
    raw_reward: RawAmount = Field(None, alias="reward")

    @property
    def amount(self) -> Optional[Decimal]:
        return dec_from_raw(self.raw_amount)

    @property
    def reward(self) -> Optional[Decimal]:
        return dec_from_raw(self.raw_reward)


class ValidatorAvailability(RPCModel):
    blocks_signed: Optional[int] = Field(None, alias="num-blocks-signed")
    blocks_to_sign: Optional[int] = Field(None, alias="num-blocks-to-sign")


class ValidatorInfo(RPCModel):
    """The ``validator`` member of a validator information reply"""
    address: Optional[str] = None
    bls_public_keys: List[str] = Field(default_factory=list, alias="bls-public-keys")
    creation_height: Optional[int] = Field(None, alias="creation-height")
    raw_max_total_delegation: RawAmount = Field(None, alias="max-total-delegation")
    raw_min_self_delegation: RawAmount = Field(None, alias="min-self-delegation")
    name: Optional[str] = None
    identity: Optional[str] = None
    website: Optional[str] = None
    security_contact: Optional[str] = Field(None, alias="security-contact")
    details: Optional[str] = None
    raw_rate: Optional[str] = Field(None, alias="rate")
    raw_max_change_rate: Optional[str] = Field(None, alias="max-change-rate")
    raw_max_rate: Optional[str] = Field(None, alias="max-rate")
    eligibility_status: Optional[str] = Field(None, alias="epos-eligibility-status")
    last_epoch_in_committee: Optional[int] = Field(None, alias="last-epoch-in-committee")
    update_height: Optional[int] = Field(None, alias="update-height")
    availability: Optional[ValidatorAvailability] = None
    delegations: List[DelegationInfo] = Field(default_factory=list)

    @property
    def max_total_delegation(self) -> Optional[Decimal]:
        return dec_from_raw(self.raw_max_total_delegation)

    @property
    def min_self_delegation(self) -> Optional[Decimal]:
        return dec_from_raw(self.raw_min_self_delegation)

    @property
    def rate(self) -> Optional[Decimal]:
        return dec_from_string(self.raw_rate)

    @property
    def max_change_rate(self) -> Optional[Decimal]:
        return dec_from_string(self.raw_max_change_rate)

    @property
    def max_rate(self) -> Optional[Decimal]:
        return dec_from_string(self.raw_max_rate)

    @property
    def eligibility(self) -> Eligibility:
        return determine_epos_status(self.eligibility_status)


class EpochPerformance(RPCModel):
    current_epoch_signed: Optional[int] = Field(None, alias="current-epoch-signed")
    current_epoch_to_sign: Optional[int] = Field(None, alias="current-epoch-to-sign")
    raw_current_epoch_signing_percentage: Optional[str] = Field(None, alias="current-epoch-signing-percentage")

    @property
    def current_epoch_signing_percentage(self) -> Optional[Decimal]:
        return dec_from_string(self.raw_current_epoch_signing_percentage)


class BlockStatistics(RPCModel):
    signed: Optional[int] = None
    to_sign: Optional[int] = Field(None, alias="to-sign")


class ValidatorLifetime(RPCModel):
    raw_apr: Optional[str] = Field(None, alias="apr")
    raw_reward_accumulated: RawAmount = Field(None, alias="reward-accumulated")
    blocks: Optional[BlockStatistics] = None

    @property
    def apr(self) -> Optional[Decimal]:
        return dec_from_string(self.raw_apr)

    @property
    def reward_accumulated(self) -> Optional[Decimal]:
        return dec_from_raw(self.raw_reward_accumulated)


class ValidatorResult(RPCModel):
    """One validator information reply"""
    current_epoch_performance: Optional[EpochPerformance] = Field(None, alias="current-epoch-performance")
    validator: Optional[ValidatorInfo] = None
    currently_in_committee: Optional[bool] = Field(None, alias="currently-in-committee")
    epos_status: Optional[str] = Field(None, alias="epos-status")
    raw_total_delegation: RawAmount = Field(None, alias="total-delegation")
    lifetime: Optional[ValidatorLifetime] = None

    @property
    def total_delegation(self) -> Optional[Decimal]:
        return dec_from_raw(self.raw_total_delegation)


class ValidatorDetails(RPCModel):
    name: str = ""
    identity: str = ""
    website: str = ""
    security_contact: str = ""
    details: str = ""


class Commission(RPCModel):
    """Commission settings as configured, rates as decimal fractions"""
    raw_rate: Optional[str] = Field(None, alias="rate")
    raw_max_rate: Optional[str] = Field(None, alias="max_rate")
    raw_max_change_rate: Optional[str] = Field(None, alias="max_change_rate")

    @property
    def rate(self) -> Optional[Decimal]:
        return dec_from_string(self.raw_rate)

    @property
    def max_rate(self) -> Optional[Decimal]:
        return dec_from_string(self.raw_max_rate)

    @property
    def max_change_rate(self) -> Optional[Decimal]:
        return dec_from_string(self.raw_max_change_rate)


class ValidatorConfig(RPCModel):
    """
    Settings of a validator to create or edit, typically loaded from a
    config file. Amounts are in ONE.
    """
    raw_shard_id: Optional[Union[int, str]] = Field(None, alias="shard_id")
    details: ValidatorDetails = Field(default_factory=ValidatorDetails)
    commission: Commission = Field(default_factory=Commission)
    raw_minimum_self_delegation: Optional[str] = Field(None, alias="minimum_self_delegation")
    raw_maximum_total_delegation: Optional[str] = Field(None, alias="maximum_total_delegation")
    raw_amount: Optional[str] = Field(None, alias="amount")
    eligibility_status: Optional[str] = Field(None, alias="eligibility-status")
    bls_keys: List[BLSKey] = Field(default_factory=list, exclude=True)

    @property
    def shard_id(self) -> int:
        if self.raw_shard_id is None or self.raw_shard_id == "":
            return 0
        return int(self.raw_shard_id)

    @property
    def minimum_self_delegation(self) -> Optional[Decimal]:
        return dec_from_string(self.raw_minimum_self_delegation)

    @property
    def maximum_total_delegation(self) -> Optional[Decimal]:
        return dec_from_string(self.raw_maximum_total_delegation)

    @property
    def amount(self) -> Optional[Decimal]:
        return dec_from_string(self.raw_amount)

    @property
    def eligibility(self) -> Eligibility:
        return determine_epos_status(self.eligibility_status)

    def to_description(self) -> Description:
        return Description(
            name=self.details.name,
            identity=self.details.identity,
            website=self.details.website,
            security_contact=self.details.security_contact,
            details=self.details.details,
        )

    def to_commission_rates(self) -> CommissionRates:
        return CommissionRates(
            rate=self.commission.rate,
            max_rate=self.commission.max_rate,
            max_change_rate=self.commission.max_change_rate,
        )
