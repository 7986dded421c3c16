"""
Key material helpers.
"""
from .bls import BLSKey, decrypt_private_key, parse_public_key

__all__ = ["BLSKey", "decrypt_private_key", "parse_public_key"]
