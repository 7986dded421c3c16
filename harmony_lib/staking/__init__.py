"""
Staking directives, lookups and typed replies.

The operations that sign and submit directives live in
:mod:`harmony_lib.staking.operations`.
"""
from .directives import (
    CollectRewards, CommissionRates, CreateValidator, Delegate, Description, Directive, EditValidator,
    Eligibility, Undelegate, determine_epos_status, process_bls_keys
)
from .lookup import (
    all_validator_information, all_validators, delegations_by_delegator, delegations_by_validator,
    elected_validator_exists, elected_validators, validator_exists, validator_information
)
from .types import DelegationInfo, UndelegationInfo, ValidatorConfig, ValidatorInfo, ValidatorResult

__all__ = [
    "Directive",
    "Eligibility",
    "determine_epos_status",
    "process_bls_keys",
    "Description",
    "CommissionRates",
    "Delegate",
    "Undelegate",
    "CollectRewards",
    "CreateValidator",
    "EditValidator",
    "all_validators",
    "elected_validators",
    "validator_exists",
    "elected_validator_exists",
    "validator_information",
    "all_validator_information",
    "delegations_by_validator",
    "delegations_by_delegator",
    "DelegationInfo",
    "UndelegationInfo",
    "ValidatorConfig",
    "ValidatorInfo",
    "ValidatorResult",
]
