"""
Eligibility Merkle Tree Test Suite

Coverage:
  - keccak256 and 32-byte coercion helpers
  - Sorted-pair hashing and proof folding
  - MerkleTree roots and proofs (even, odd, single leaf)
  - Rejection of non-members and tampered proofs

Run with:
    pytest tests/test_merkle.py -v
"""

import os
import sys

import pytest

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from eth_utils import encode_hex, to_canonical_address

from zkballot.crypto.hashing import (
    identity_bytes,
    keccak256,
    keccak256_hex,
    normalize_identity,
    to_bytes32,
)
from zkballot.crypto.merkle import (
    MerkleTree,
    eligibility_tree,
    hash_pair,
    leaf_for,
    process_proof,
    verify_proof,
)
from zkballot.exceptions import InvalidIdentityError, ValidationError


# ══════════════════════════════════════════════════════════════════════
#  HELPERS
# ══════════════════════════════════════════════════════════════════════

VOTER_A = "0x" + "a1" * 20
VOTER_B = "0x" + "b2" * 20
VOTER_C = "0x" + "c3" * 20
VOTER_D = "0x" + "d4" * 20
VOTER_E = "0x" + "e5" * 20

EMPTY_KECCAK = "0xc5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"

# Eligibility root of the three addresses 0xb1..b1, 0xc2..c2, 0xd3..d3
PINNED_VOTERS = ["0x" + "b1" * 20, "0x" + "c2" * 20, "0x" + "d3" * 20]
PINNED_ROOT = "0xc7349acbc00fd9b892c6877d901fdeb9fe7b9817a4619d9bad6f0e592dd66285"
PINNED_FIRST_LEAF = "0x68096aa5c6798f0fc17584df4078dc41c39d2308150806422ceb167ee004f876"


# ══════════════════════════════════════════════════════════════════════
#  HASHING
# ══════════════════════════════════════════════════════════════════════


class TestHashing:
    """keccak256 and byte helpers."""

    def test_keccak_empty_vector(self):
        assert keccak256_hex(b"") == EMPTY_KECCAK

    def test_keccak_accepts_hex(self):
        assert keccak256("0x" + "ab" * 4) == keccak256(bytes.fromhex("ab" * 4))

    def test_keccak_length(self):
        assert len(keccak256(b"zkballot")) == 32

    def test_to_bytes32_hex_and_bytes(self):
        raw = bytes(range(32))
        assert to_bytes32(raw) == raw
        assert to_bytes32(encode_hex(raw)) == raw

    def test_to_bytes32_wrong_length(self):
        with pytest.raises(ValidationError, match="32 bytes"):
            to_bytes32(b"\x01" * 31)

    def test_to_bytes32_not_hex(self):
        with pytest.raises(ValidationError, match="not a hex"):
            to_bytes32("0xnothex")

    def test_to_bytes32_odd_length_hex(self):
        with pytest.raises(ValidationError, match="not valid hex"):
            to_bytes32("0xabc")

    def test_identity_bytes(self):
        assert identity_bytes(VOTER_A) == bytes(to_canonical_address(VOTER_A))
        assert len(identity_bytes(VOTER_A)) == 20

    def test_identity_case_insensitive(self):
        assert normalize_identity(VOTER_A) == normalize_identity(VOTER_A.upper().replace("0X", "0x"))

    def test_invalid_identity(self):
        with pytest.raises(InvalidIdentityError):
            identity_bytes("alice")


# ══════════════════════════════════════════════════════════════════════
#  PAIR HASHING / VERIFY
# ══════════════════════════════════════════════════════════════════════


class TestVerifyProof:
    """Stateless proof checking."""

    def test_hash_pair_is_order_independent(self):
        a, b = keccak256(b"a"), keccak256(b"b")
        assert hash_pair(a, b) == hash_pair(b, a)

    def test_hash_pair_sorts_bytes(self):
        a, b = keccak256(b"a"), keccak256(b"b")
        lo, hi = sorted([a, b])
        assert hash_pair(a, b) == keccak256(lo + hi)

    def test_leaf_is_hash_of_address_bytes(self):
        assert leaf_for(VOTER_A) == keccak256(bytes(to_canonical_address(VOTER_A)))

    def test_two_leaf_proof(self):
        la, lb = leaf_for(VOTER_A), leaf_for(VOTER_B)
        root = hash_pair(la, lb)
        assert verify_proof([lb], root, la)
        assert verify_proof([la], root, lb)

    def test_empty_proof_single_leaf(self):
        la = leaf_for(VOTER_A)
        assert verify_proof([], la, la)

    def test_mismatch_returns_false(self):
        la, lb = leaf_for(VOTER_A), leaf_for(VOTER_B)
        root = hash_pair(la, lb)
        assert verify_proof([lb], root, leaf_for(VOTER_C)) is False

    def test_process_proof_folds(self):
        la, lb, lc = leaf_for(VOTER_A), leaf_for(VOTER_B), leaf_for(VOTER_C)
        assert process_proof([lb, lc], la) == hash_pair(hash_pair(la, lb), lc)

    def test_malformed_proof_element_raises(self):
        la = leaf_for(VOTER_A)
        with pytest.raises(ValidationError):
            verify_proof([b"\x00" * 5], la, la)

    def test_odd_length_proof_element_raises(self):
        la = leaf_for(VOTER_A)
        with pytest.raises(ValidationError):
            verify_proof(["0x123"], la, la)


# ══════════════════════════════════════════════════════════════════════
#  TREE
# ══════════════════════════════════════════════════════════════════════


class TestMerkleTree:
    """Client-side tree construction."""

    def test_empty_tree_raises(self):
        with pytest.raises(ValidationError, match="at least one leaf"):
            MerkleTree([])

    def test_single_leaf_root_is_leaf(self):
        tree = eligibility_tree([VOTER_A])
        assert tree.root == leaf_for(VOTER_A)
        assert tree.get_proof(leaf_for(VOTER_A)) == []
        assert tree.depth == 0

    def test_two_leaves(self):
        tree = eligibility_tree([VOTER_A, VOTER_B])
        assert tree.root == hash_pair(leaf_for(VOTER_A), leaf_for(VOTER_B))

    def test_odd_node_is_promoted(self):
        tree = eligibility_tree([VOTER_A, VOTER_B, VOTER_C])
        la, lb, lc = leaf_for(VOTER_A), leaf_for(VOTER_B), leaf_for(VOTER_C)
        assert tree.root == hash_pair(hash_pair(la, lb), lc)
        assert tree.get_proof(lc) == [hash_pair(la, lb)]

    def test_known_three_voter_root(self):
        tree = eligibility_tree(PINNED_VOTERS)
        assert encode_hex(tree.leaves[0]) == PINNED_FIRST_LEAF
        assert tree.hex_root == PINNED_ROOT

    def test_every_member_verifies(self):
        voters = [VOTER_A, VOTER_B, VOTER_C, VOTER_D, VOTER_E]
        tree = eligibility_tree(voters)
        for voter in voters:
            leaf = leaf_for(voter)
            assert verify_proof(tree.get_proof(leaf), tree.root, leaf)

    def test_hex_proof_verifies(self):
        tree = eligibility_tree([VOTER_A, VOTER_B, VOTER_C])
        leaf = leaf_for(VOTER_B)
        proof = tree.get_hex_proof(leaf)
        assert all(p.startswith("0x") for p in proof)
        assert verify_proof(proof, tree.hex_root, encode_hex(leaf))

    def test_sibling_order_does_not_change_root(self):
        assert eligibility_tree([VOTER_A, VOTER_B]).root == eligibility_tree([VOTER_B, VOTER_A]).root

    def test_non_member_never_verifies(self):
        """Tree over {A, B, C}: no proof from the tree works for D."""
        tree = eligibility_tree([VOTER_A, VOTER_B, VOTER_C])
        outsider = leaf_for(VOTER_D)
        for member in (VOTER_A, VOTER_B, VOTER_C):
            proof = tree.get_proof(leaf_for(member))
            assert not verify_proof(proof, tree.root, outsider)
        assert not verify_proof([], tree.root, outsider)

    def test_get_proof_for_non_member_raises(self):
        tree = eligibility_tree([VOTER_A, VOTER_B, VOTER_C])
        with pytest.raises(ValidationError, match="not part of the tree"):
            tree.get_proof(leaf_for(VOTER_D))

    def test_tampered_proof_fails(self):
        tree = eligibility_tree([VOTER_A, VOTER_B, VOTER_C, VOTER_D])
        leaf = leaf_for(VOTER_A)
        proof = tree.get_proof(leaf)
        proof[0] = keccak256(b"tampered")
        assert not verify_proof(proof, tree.root, leaf)

    def test_verify_method(self):
        tree = eligibility_tree([VOTER_A, VOTER_B])
        leaf = leaf_for(VOTER_A)
        assert tree.verify(tree.get_proof(leaf), leaf)

    def test_len_and_repr(self):
        tree = eligibility_tree([VOTER_A, VOTER_B, VOTER_C])
        assert len(tree) == 3
        assert tree.hex_root in repr(tree)
