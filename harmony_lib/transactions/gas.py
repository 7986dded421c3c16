"""
Gas limit inference and gas price helpers.
"""
from decimal import Decimal
from typing import Optional

from .. import numeric
from ..exceptions import GasLimitError

TX_GAS = 21000
TX_GAS_CONTRACT_CREATION = 53000
TX_GAS_VALIDATOR_CREATION = 5300000
TX_DATA_ZERO_GAS = 4
TX_DATA_NON_ZERO_GAS = 16

GAS_LIMIT_UNSPECIFIED = -1

DEFAULT_PRICE_BUMP = 10


def intrinsic_gas(data: bytes, is_validator_creation: bool = False) -> int:
    """
    Gas charged before execution: a fixed base plus a per-byte data cost.

    Args:
        data: Transaction payload
        is_validator_creation: Use the validator creation base cost

    Returns:
        Intrinsic gas
    """
    gas = TX_GAS_VALIDATOR_CREATION if is_validator_creation else TX_GAS
    if data:
        non_zero = sum(1 for b in data if b != 0)
        gas += non_zero * TX_DATA_NON_ZERO_GAS
        gas += (len(data) - non_zero) * TX_DATA_ZERO_GAS
    return gas


def calculate_gas_limit(
    gas_limit: Optional[int],
    data: bytes = b"",
    is_validator_creation: bool = False
) -> int:
    """
    Resolve the gas limit of a transaction.

    ``None`` or :data:`GAS_LIMIT_UNSPECIFIED` infer the limit from the
    payload; any other value is used as given.

    Raises:
        GasLimitError: If the resolved limit isn't positive
    """
    if gas_limit is None or gas_limit == GAS_LIMIT_UNSPECIFIED:
        if not data and not is_validator_creation:
            resolved = TX_GAS_CONTRACT_CREATION
        else:
            resolved = intrinsic_gas(data, is_validator_creation)
        if resolved == 0:
            raise GasLimitError("calculated gas limit is 0 - this shouldn't be possible")
        return resolved

    if gas_limit <= 0:
        raise GasLimitError(f"gas limit must be positive, got {gas_limit}")
    return gas_limit


def bump_gas_price(gas_price: Decimal, price_bump: int = DEFAULT_PRICE_BUMP) -> Decimal:
    """Raise a gas price by ``price_bump`` percent, e.g. to replace a pending transaction."""
    return numeric.quo(numeric.mul(gas_price, Decimal(100 + price_bump)), Decimal(100))


def gas_price_base_units(gas_price: Decimal) -> int:
    """Gas price in Gwei to wei."""
    return numeric.to_base_units(gas_price, numeric.NANO)
