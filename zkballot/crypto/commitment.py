"""
Vote commitment format.

    commitment = keccak256(uint8(choice) ++ bytes32(salt))

This is the packed encoding a client produces before committing, and the
one the ballot recomputes at reveal time.
"""

import secrets
from enum import IntEnum
from typing import Tuple, Union

from eth_abi.packed import encode_packed

from .hashing import HashLike, keccak256, to_bytes32
from ..constants import SALT_SIZE
from ..exceptions import InvalidChoiceError, InvalidSaltError, ValidationError


class VoteChoice(IntEnum):
    """Ballot options; the value is the byte that enters the commitment."""
    ABSTAIN = 0
    FOR = 1
    AGAINST = 2

    @classmethod
    def parse(cls, value: Union[int, str, "VoteChoice"]) -> "VoteChoice":
        """Accepts a member, its integer value, or its name (any case)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise InvalidChoiceError(f"Invalid vote choice: {value!r}") from None
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidChoiceError(f"Invalid vote choice: {value!r}")
        try:
            return cls(value)
        except ValueError:
            raise InvalidChoiceError(f"Invalid vote choice: {value}") from None


def generate_salt() -> bytes:
    """Fresh 32-byte secret salt."""
    return secrets.token_bytes(SALT_SIZE)


def to_salt(salt: HashLike) -> bytes:
    try:
        return to_bytes32(salt, "salt")
    except ValidationError as e:
        raise InvalidSaltError(str(e)) from None


def compute_commitment(choice: Union[int, str, VoteChoice], salt: HashLike) -> bytes:
    """Commitment hash for (*choice*, *salt*)."""
    vote = VoteChoice.parse(choice)
    return keccak256(encode_packed(["uint8", "bytes32"], [int(vote), to_salt(salt)]))


def make_commitment(choice: Union[int, str, VoteChoice]) -> Tuple[bytes, bytes]:
    """Draw a salt and return ``(commitment, salt)``; keep the salt secret until reveal."""
    salt = generate_salt()
    return compute_commitment(choice, salt), salt
