"""
ZKBallot Crypto Hashing Module

Provides the hash and byte-coercion helpers shared by the Merkle verifier
and the commitment scheme:
- keccak256: Web3 standard, used for leaves, tree nodes and commitments
- to_bytes32: accept a 32-byte digest as bytes or 0x-prefixed hex
- identity_bytes: canonical 20-byte form of an address identity
"""

from typing import Union

from Crypto.Hash import keccak as _keccak
from eth_utils import (
    decode_hex,
    encode_hex,
    is_address,
    is_hex,
    to_canonical_address,
    to_checksum_address,
)

from ..constants import HASH_SIZE, ZERO_HASH
from ..exceptions import InvalidIdentityError, ValidationError


HashLike = Union[bytes, str]


def keccak256(data: Union[bytes, str]) -> bytes:
    """
    Compute Keccak-256 hash (Ethereum standard).

    Args:
        data: Input bytes or 0x-prefixed hex string

    Returns:
        32-byte hash
    """
    if isinstance(data, str):
        data = decode_hex(data)

    k = _keccak.new(digest_bits=256)
    k.update(data)
    return k.digest()


def keccak256_hex(data: Union[bytes, str]) -> str:
    """Keccak-256 as a 0x-prefixed hex string."""
    return encode_hex(keccak256(data))


def to_bytes32(value: HashLike, what: str = "hash") -> bytes:
    """
    Coerce a 32-byte digest given as bytes or hex string.

    Raises ValidationError when the value is not exactly 32 bytes.
    """
    if isinstance(value, str):
        if not is_hex(value):
            raise ValidationError(f"{what} is not a hex string: {value!r}")
        try:
            value = decode_hex(value)
        except ValueError as e:
            # binascii.Error (odd length) subclasses ValueError
            raise ValidationError(f"{what} is not valid hex: {value!r} ({e})") from None
    if not isinstance(value, (bytes, bytearray)):
        raise ValidationError(f"{what} must be bytes or hex, got {type(value).__name__}")
    if len(value) != HASH_SIZE:
        raise ValidationError(f"{what} must be {HASH_SIZE} bytes, got {len(value)}")
    return bytes(value)


def is_zero_hash(value: bytes) -> bool:
    return value == ZERO_HASH


def normalize_identity(identity: str) -> str:
    """Checksum form of an address; used as the key for every per-voter map."""
    if not isinstance(identity, str) or not is_address(identity):
        raise InvalidIdentityError(f"Invalid identity address: {identity!r}")
    return to_checksum_address(identity)


def identity_bytes(identity: str) -> bytes:
    """20 canonical address bytes of *identity*."""
    if not isinstance(identity, str) or not is_address(identity):
        raise InvalidIdentityError(f"Invalid identity address: {identity!r}")
    return bytes(to_canonical_address(identity))
