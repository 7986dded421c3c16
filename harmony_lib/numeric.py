"""
Fixed-point amount handling.

Human-facing amounts are ``decimal.Decimal`` values with at most 18
fractional digits. On the wire every amount is an integer number of base
units (1 ONE = 10**18 base units, gas prices are quoted in Gwei = 10**9).
``None`` is the nil amount and is never treated as zero.
"""
import decimal
from decimal import Decimal
from typing import Optional, Union

from .exceptions import InvalidAmountError

PRECISION = 18
ONE = 10 ** 18
NANO = 10 ** 9

# 256-bit integers have 78 digits, plus the fractional part
_CONTEXT = decimal.Context(prec=120, rounding=decimal.ROUND_HALF_EVEN, traps=[
    decimal.InvalidOperation, decimal.DivisionByZero, decimal.Overflow,
])
_QUANTUM = Decimal(1).scaleb(-PRECISION)

Amount = Optional[Decimal]
DecLike = Union[Decimal, int, str]


def new_dec(value: DecLike) -> Decimal:
    """
    Parse an exact decimal.

    Args:
        value: Decimal, int or decimal string such as ``"1.25"``

    Returns:
        The parsed Decimal

    Raises:
        InvalidAmountError: If the value is malformed, not finite, a float,
            or has more than 18 fractional digits
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidAmountError(f"amounts must not be floats: {value!r}")

    if isinstance(value, Decimal):
        dec = value
    elif isinstance(value, int):
        dec = Decimal(value)
    elif isinstance(value, str):
        text = value.strip().replace("_", "")
        if not text:
            raise InvalidAmountError("empty amount string")
        try:
            dec = Decimal(text)
        except decimal.InvalidOperation as exc:
            raise InvalidAmountError(f"malformed decimal string: {value!r}") from exc
    else:
        raise InvalidAmountError(f"unsupported amount type: {type(value).__name__}")

    if not dec.is_finite():
        raise InvalidAmountError(f"amount must be finite: {value!r}")

    exponent = dec.normalize(_CONTEXT).as_tuple().exponent
    if isinstance(exponent, int) and exponent < -PRECISION:
        raise InvalidAmountError(f"too much precision, at most {PRECISION} decimals allowed: {value!r}")

    return dec


def new_dec_from_hex(raw: str) -> Decimal:
    """Parse a hex encoded integer (``0x`` prefix optional) into a Decimal."""
    if raw is None:
        raise InvalidAmountError("empty hex value")
    cleaned = raw.strip()
    if cleaned.lower().startswith("0x"):
        cleaned = cleaned[2:]
    if not cleaned:
        return Decimal(0)
    try:
        return Decimal(int(cleaned, 16))
    except ValueError as exc:
        raise InvalidAmountError(f"malformed hex integer: {raw!r}") from exc


def parse_raw_integer(raw: Union[int, str]) -> int:
    """
    Decode an integer as the node returns it: JSON number, decimal string or hex string.
    """
    if isinstance(raw, bool):
        raise InvalidAmountError(f"unsupported raw amount: {raw!r}")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        text = raw.strip()
        try:
            if text.lower().startswith("0x"):
                return int(text, 16) if len(text) > 2 else 0
            return int(text, 10)
        except ValueError as exc:
            raise InvalidAmountError(f"malformed raw amount: {raw!r}") from exc
    raise InvalidAmountError(f"unsupported raw amount type: {type(raw).__name__}")


def to_base_units(amount: Amount, denomination: int = ONE) -> Optional[int]:
    """
    Scale a human-readable amount to integer base units.

    ``round(amount * denomination)`` with half-even rounding; nil stays nil.
    """
    if amount is None:
        return None
    value = amount if isinstance(amount, Decimal) else new_dec(amount)
    scaled = _CONTEXT.multiply(value, Decimal(denomination))
    return int(scaled.to_integral_value(rounding=decimal.ROUND_HALF_EVEN, context=_CONTEXT))


def from_base_units(raw: Union[int, str, None], denomination: int = ONE) -> Amount:
    """Convert integer base units (int, decimal or hex string) to an exact Decimal."""
    if raw is None:
        return None
    value = parse_raw_integer(raw)
    return _CONTEXT.divide(Decimal(value), Decimal(denomination))


def add(a: Decimal, b: Decimal) -> Decimal:
    return _CONTEXT.add(a, b)


def mul(a: Decimal, b: Decimal) -> Decimal:
    return _CONTEXT.multiply(a, b)


def quo(a: Decimal, b: Decimal) -> Decimal:
    """Divide, truncating toward zero at 18 fractional digits."""
    result = _CONTEXT.divide(a, b)
    return result.quantize(_QUANTUM, rounding=decimal.ROUND_DOWN, context=_CONTEXT)


def truncate_int(amount: Decimal) -> int:
    """Drop the fractional part (toward zero)."""
    return int(amount.to_integral_value(rounding=decimal.ROUND_DOWN, context=_CONTEXT))


def is_nil(amount: Amount) -> bool:
    return amount is None


def is_zero(amount: Amount) -> bool:
    return amount is not None and amount.is_zero()


def is_negative(amount: Amount) -> bool:
    return amount is not None and amount.is_signed() and not amount.is_zero()
