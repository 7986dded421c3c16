"""
Address parsing for bech32 ``one1...`` and ``0x`` hex addresses.
"""
from typing import Union

import bech32
from eth_utils import is_hex_address, to_canonical_address, to_checksum_address

from .exceptions import InvalidAddressError

HRP = "one"
ADDRESS_LENGTH = 20


def parse(address: Union[str, bytes]) -> bytes:
    """
    Parse an address into its 20 byte binary form.

    Args:
        address: bech32 ``one1...`` string, ``0x`` hex string or raw bytes

    Returns:
        20 address bytes

    Raises:
        InvalidAddressError: If the address can't be decoded
    """
    if isinstance(address, (bytes, bytearray)):
        if len(address) != ADDRESS_LENGTH:
            raise InvalidAddressError(f"address must be {ADDRESS_LENGTH} bytes, got {len(address)}")
        return bytes(address)

    if not isinstance(address, str) or not address:
        raise InvalidAddressError(f"invalid address: {address!r}")

    if is_hex_address(address):
        return to_canonical_address(address)

    hrp, data = bech32.bech32_decode(address)
    if hrp != HRP or data is None:
        raise InvalidAddressError(f"invalid bech32 address: {address}")

    decoded = bech32.convertbits(data, 5, 8, False)
    if decoded is None or len(decoded) != ADDRESS_LENGTH:
        raise InvalidAddressError(f"invalid bech32 payload length for {address}")

    return bytes(decoded)


def to_bech32(address: Union[str, bytes]) -> str:
    """Format any supported address as ``one1...``."""
    raw = parse(address)
    return bech32.bech32_encode(HRP, bech32.convertbits(raw, 8, 5))


def to_checksum(address: Union[str, bytes]) -> str:
    """Format any supported address as an EIP-55 checksummed hex string."""
    return to_checksum_address(parse(address))


def is_valid(address: Union[str, bytes]) -> bool:
    try:
        parse(address)
    except InvalidAddressError:
        return False
    return True
