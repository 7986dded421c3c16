"""
Staking directives and their payloads.

Every generator returns a ``(Directive, payload)`` pair. Payloads are plain
dataclasses holding wire values (20 byte addresses, base-unit integers);
``to_rlp()`` gives the nested list that goes into a staking transaction.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from enum import IntEnum
from typing import Any, ClassVar, List, Optional, Sequence, Tuple, Union

from .. import address as addr
from .. import numeric
from ..crypto.bls import BLSKey, parse_public_key


class Directive(IntEnum):
    CREATE_VALIDATOR = 0
    EDIT_VALIDATOR = 1
    DELEGATE = 2
    UNDELEGATE = 3
    COLLECT_REWARDS = 4

    @property
    def label(self) -> str:
        return "".join(part.capitalize() for part in self.name.split("_"))


class Eligibility(IntEnum):
    UNSPECIFIED = 0
    ACTIVE = 1
    INACTIVE = 2


def determine_epos_status(status: Optional[str]) -> Eligibility:
    """Map a status string to an eligibility; unknown strings are unspecified."""
    lowered = (status or "").strip().lower()
    if lowered == "active":
        return Eligibility.ACTIVE
    if lowered == "inactive":
        return Eligibility.INACTIVE
    return Eligibility.UNSPECIFIED


def _dec_rlp(value: Optional[Decimal]) -> List[Any]:
    # fixed-point decimals travel as a one element list of the scaled integer
    if value is None:
        return []
    return [numeric.to_base_units(value)]


def _optional_int(value: Optional[int]) -> Union[int, bytes]:
    return b"" if value is None else value


@dataclass(frozen=True)
class Description:
    name: str = ""
    identity: str = ""
    website: str = ""
    security_contact: str = ""
    details: str = ""

    def to_rlp(self) -> List[bytes]:
        return [
            self.name.encode("utf-8"),
            self.identity.encode("utf-8"),
            self.website.encode("utf-8"),
            self.security_contact.encode("utf-8"),
            self.details.encode("utf-8"),
        ]


@dataclass(frozen=True)
class CommissionRates:
    """Commission rates as fractions, e.g. ``Decimal("0.1")`` for 10%"""
    rate: Decimal
    max_rate: Decimal
    max_change_rate: Decimal

    def to_rlp(self) -> List[List[int]]:
        return [_dec_rlp(self.rate), _dec_rlp(self.max_rate), _dec_rlp(self.max_change_rate)]


@dataclass(frozen=True)
class Delegate:
    directive: ClassVar[Directive] = Directive.DELEGATE
    delegator_address: bytes
    validator_address: bytes
    amount: int

    def to_rlp(self) -> List[Any]:
        return [self.delegator_address, self.validator_address, self.amount]


@dataclass(frozen=True)
class Undelegate:
    directive: ClassVar[Directive] = Directive.UNDELEGATE
    delegator_address: bytes
    validator_address: bytes
    amount: int

    def to_rlp(self) -> List[Any]:
        return [self.delegator_address, self.validator_address, self.amount]


@dataclass(frozen=True)
class CollectRewards:
    directive: ClassVar[Directive] = Directive.COLLECT_REWARDS
    delegator_address: bytes

    def to_rlp(self) -> List[Any]:
        return [self.delegator_address]


@dataclass(frozen=True)
class CreateValidator:
    directive: ClassVar[Directive] = Directive.CREATE_VALIDATOR
    validator_address: bytes
    description: Description
    commission_rates: CommissionRates
    min_self_delegation: int
    max_total_delegation: int
    slot_pub_keys: Tuple[bytes, ...]
    slot_key_sigs: Tuple[bytes, ...]
    amount: int

    def to_rlp(self) -> List[Any]:
        return [
            self.validator_address,
            self.description.to_rlp(),
            self.commission_rates.to_rlp(),
            self.min_self_delegation,
            self.max_total_delegation,
            list(self.slot_pub_keys),
            list(self.slot_key_sigs),
            self.amount,
        ]


@dataclass(frozen=True)
class EditValidator:
    """Validator update; ``None`` members are left unchanged"""
    directive: ClassVar[Directive] = Directive.EDIT_VALIDATOR
    validator_address: bytes
    description: Description = field(default_factory=Description)
    commission_rate: Optional[Decimal] = None
    min_self_delegation: Optional[int] = None
    max_total_delegation: Optional[int] = None
    slot_key_to_remove: Optional[bytes] = None
    slot_key_to_add: Optional[bytes] = None
    slot_key_to_add_sig: Optional[bytes] = None
    epos_status: Eligibility = Eligibility.UNSPECIFIED

    def to_rlp(self) -> List[Any]:
        return [
            self.validator_address,
            self.description.to_rlp(),
            _dec_rlp(self.commission_rate),
            _optional_int(self.min_self_delegation),
            _optional_int(self.max_total_delegation),
            self.slot_key_to_remove or b"",
            self.slot_key_to_add or b"",
            self.slot_key_to_add_sig or b"",
            int(self.epos_status),
        ]


StakingPayload = Union[Delegate, Undelegate, CollectRewards, CreateValidator, EditValidator]


def process_bls_keys(bls_keys: Sequence[BLSKey]) -> Tuple[List[bytes], List[bytes]]:
    """Split keys into parallel public key and signature lists, keeping their order."""
    pub_keys = [key.public_key for key in bls_keys]
    signatures = [key.signature for key in bls_keys]
    return pub_keys, signatures


def _base_units(amount: Optional[numeric.DecLike]) -> Optional[int]:
    if amount is None:
        return None
    return numeric.to_base_units(numeric.new_dec(amount))


def _public_key(key: Optional[Union[BLSKey, str]]) -> Optional[bytes]:
    if key is None:
        return None
    if isinstance(key, BLSKey):
        return key.public_key
    return parse_public_key(key)


def delegate(delegator: str, validator: str, amount: numeric.DecLike) -> Tuple[Directive, Delegate]:
    payload = Delegate(
        delegator_address=addr.parse(delegator),
        validator_address=addr.parse(validator),
        amount=_base_units(amount),
    )
    return payload.directive, payload


def undelegate(delegator: str, validator: str, amount: numeric.DecLike) -> Tuple[Directive, Undelegate]:
    payload = Undelegate(
        delegator_address=addr.parse(delegator),
        validator_address=addr.parse(validator),
        amount=_base_units(amount),
    )
    return payload.directive, payload


def collect_rewards(delegator: str) -> Tuple[Directive, CollectRewards]:
    payload = CollectRewards(delegator_address=addr.parse(delegator))
    return payload.directive, payload


def create_validator(
    validator_address: str,
    description: Description,
    commission_rates: CommissionRates,
    min_self_delegation: numeric.DecLike,
    max_total_delegation: numeric.DecLike,
    bls_keys: Sequence[BLSKey],
    amount: numeric.DecLike
) -> Tuple[Directive, CreateValidator]:
    """
    Payload registering a new validator.

    Delegation bounds and the initial amount are given in ONE.
    """
    pub_keys, signatures = process_bls_keys(bls_keys)
    payload = CreateValidator(
        validator_address=addr.parse(validator_address),
        description=description,
        commission_rates=commission_rates,
        min_self_delegation=_base_units(min_self_delegation),
        max_total_delegation=_base_units(max_total_delegation),
        slot_pub_keys=tuple(pub_keys),
        slot_key_sigs=tuple(signatures),
        amount=_base_units(amount),
    )
    return payload.directive, payload


def edit_validator(
    validator_address: str,
    description: Optional[Description] = None,
    commission_rate: Optional[numeric.DecLike] = None,
    min_self_delegation: Optional[numeric.DecLike] = None,
    max_total_delegation: Optional[numeric.DecLike] = None,
    remove_bls_key: Optional[Union[BLSKey, str]] = None,
    add_bls_key: Optional[BLSKey] = None,
    status: Optional[str] = None
) -> Tuple[Directive, EditValidator]:
    """
    Payload updating a validator.

    Only the given members change. ``remove_bls_key`` may be a key or the hex
    of its public key; ``add_bls_key`` also carries the proof signature.
    """
    payload = EditValidator(
        validator_address=addr.parse(validator_address),
        description=description or Description(),
        commission_rate=None if commission_rate is None else numeric.new_dec(commission_rate),
        min_self_delegation=_base_units(min_self_delegation),
        max_total_delegation=_base_units(max_total_delegation),
        slot_key_to_remove=_public_key(remove_bls_key),
        slot_key_to_add=add_bls_key.public_key if add_bls_key else None,
        slot_key_to_add_sig=add_bls_key.signature if add_bls_key else None,
        epos_status=determine_epos_status(status),
    )
    return payload.directive, payload


def edit_validator_status(validator_address: str, status: str) -> Tuple[Directive, EditValidator]:
    """Payload that only flips a validator between active and inactive."""
    return edit_validator(validator_address, status=status)
