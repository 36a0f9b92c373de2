"""
Eligibility Merkle Trees

Voter eligibility is committed to as the root of a keccak256 Merkle tree
over the voters' address leaves. Nodes are built with the sorted-pair
convention, so a proof is just the list of sibling hashes (no left/right
flags) and the order of children never affects the root.

    leaf   = keccak256(address_bytes)
    parent = keccak256(min(a, b) ++ max(a, b))

`verify_proof` is the on-ballot side; `MerkleTree` is the client side that
produces roots and proofs compatible with it.
"""

from typing import Iterable, List, Optional, Sequence

from eth_utils import encode_hex

from .hashing import HashLike, identity_bytes, keccak256, to_bytes32
from ..exceptions import ValidationError


def hash_pair(a: bytes, b: bytes) -> bytes:
    """Sorted-pair parent hash."""
    if a <= b:
        return keccak256(a + b)
    return keccak256(b + a)


def leaf_for(identity: str) -> bytes:
    """Eligibility leaf of an address identity."""
    return keccak256(identity_bytes(identity))


def process_proof(proof: Sequence[HashLike], leaf: HashLike) -> bytes:
    """Fold *proof* over *leaf* and return the implied root."""
    computed = to_bytes32(leaf, "leaf")
    for sibling in proof:
        computed = hash_pair(computed, to_bytes32(sibling, "proof element"))
    return computed


def verify_proof(proof: Sequence[HashLike], root: HashLike, leaf: HashLike) -> bool:
    """
    Check that *leaf* is included under *root*.

    Returns False on a mismatch. Malformed input (an element that is not a
    32-byte digest) raises ValidationError.
    """
    return process_proof(proof, leaf) == to_bytes32(root, "root")


class MerkleTree:
    """
    Sorted-pair keccak256 Merkle tree.

    Leaves keep their insertion order. At each level an unpaired last node
    is promoted unchanged; a single-leaf tree has the leaf as its root.

    Usage:
        tree = MerkleTree([leaf_for(a) for a in voters])
        root = tree.root
        proof = tree.get_proof(leaf_for(voters[0]))
    """

    def __init__(self, leaves: Iterable[HashLike]):
        self._leaves: List[bytes] = [to_bytes32(l, "leaf") for l in leaves]
        if not self._leaves:
            raise ValidationError("Merkle tree needs at least one leaf")
        self._layers: List[List[bytes]] = self._build_layers(self._leaves)

    @staticmethod
    def _build_layers(leaves: List[bytes]) -> List[List[bytes]]:
        layers = [list(leaves)]
        current = layers[0]
        while len(current) > 1:
            nxt: List[bytes] = []
            for i in range(0, len(current), 2):
                if i + 1 < len(current):
                    nxt.append(hash_pair(current[i], current[i + 1]))
                else:
                    nxt.append(current[i])
            layers.append(nxt)
            current = nxt
        return layers

    # ── Properties ────────────────────────────────────────────────────

    @property
    def root(self) -> bytes:
        return self._layers[-1][0]

    @property
    def hex_root(self) -> str:
        return encode_hex(self.root)

    @property
    def leaves(self) -> List[bytes]:
        return list(self._leaves)

    @property
    def depth(self) -> int:
        return len(self._layers) - 1

    def __len__(self) -> int:
        return len(self._leaves)

    # ── Proofs ────────────────────────────────────────────────────────

    def index_of(self, leaf: HashLike) -> Optional[int]:
        target = to_bytes32(leaf, "leaf")
        try:
            return self._leaves.index(target)
        except ValueError:
            return None

    def get_proof(self, leaf: HashLike) -> List[bytes]:
        """
        Sibling path for *leaf*.

        Raises ValidationError if the leaf is not in the tree.
        """
        index = self.index_of(leaf)
        if index is None:
            raise ValidationError("Leaf is not part of the tree")

        proof: List[bytes] = []
        for layer in self._layers[:-1]:
            sibling = index ^ 1
            # Promoted nodes have no sibling at this level
            if sibling < len(layer):
                proof.append(layer[sibling])
            index //= 2
        return proof

    def get_hex_proof(self, leaf: HashLike) -> List[str]:
        return [encode_hex(p) for p in self.get_proof(leaf)]

    def verify(self, proof: Sequence[HashLike], leaf: HashLike) -> bool:
        return verify_proof(proof, self.root, leaf)

    def __repr__(self) -> str:
        return f"<MerkleTree leaves={len(self._leaves)} root={self.hex_root}>"


def eligibility_tree(identities: Iterable[str]) -> MerkleTree:
    """Build the eligibility tree for a list of address identities."""
    return MerkleTree(leaf_for(identity) for identity in identities)
