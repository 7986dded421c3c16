"""
Small public helpers: uint64 hex parsing and filler payloads for load tests.
"""
from .exceptions import InvalidAmountError

__all__ = ["hex_to_decimal", "generate_tx_data"]


def hex_to_decimal(value: str) -> int:
    """
    Parse an unsigned 64 bit hex value such as a block number.

    Raises:
        InvalidAmountError: If the value isn't hex or overflows 64 bits
    """
    cleaned = value.replace("0x", "")
    try:
        result = int(cleaned, 16)
    except ValueError as e:
        raise InvalidAmountError(f"invalid hex value: {value!r}") from e
    if result < 0 or result >= 1 << 64:
        raise InvalidAmountError(f"hex value out of range: {value!r}")
    return result


def generate_tx_data(char: str, byte_size: int) -> str:
    """Payload of ``byte_size`` repetitions of ``char``, for load testing."""
    return char * max(byte_size, 0)
