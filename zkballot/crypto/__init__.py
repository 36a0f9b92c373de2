"""
ZKBallot Crypto Module

This module provides the cryptographic primitives of the ballot:
- Hash functions (keccak256) and 32-byte coercion
- Sorted-pair Merkle trees for voter eligibility
- The commit-reveal vote commitment format
"""

from .hashing import (
    identity_bytes,
    is_zero_hash,
    keccak256,
    keccak256_hex,
    normalize_identity,
    to_bytes32,
)
from .merkle import (
    MerkleTree,
    eligibility_tree,
    hash_pair,
    leaf_for,
    process_proof,
    verify_proof,
)
from .commitment import (
    VoteChoice,
    compute_commitment,
    generate_salt,
    make_commitment,
)

__all__ = [
    # Hashing
    "keccak256",
    "keccak256_hex",
    "to_bytes32",
    "is_zero_hash",
    "identity_bytes",
    "normalize_identity",
    # Merkle
    "MerkleTree",
    "eligibility_tree",
    "hash_pair",
    "leaf_for",
    "process_proof",
    "verify_proof",
    # Commitments
    "VoteChoice",
    "compute_commitment",
    "generate_salt",
    "make_commitment",
]
