"""
ZKBallot

Anonymous commit-reveal voting: voters prove eligibility with a Merkle
proof, submit a sealed commitment, and disclose it in a later window.
Only disclosed, validly committed votes are tallied.
"""

__version__ = "0.1.0"

from .governance import (
    ADMIN_ROLE,
    DEFAULT_ADMIN_ROLE,
    PROPOSER_ROLE,
    ProposalState,
    VotingParameters,
    ZKBallot,
)
from .crypto import (
    MerkleTree,
    VoteChoice,
    compute_commitment,
    eligibility_tree,
    leaf_for,
    make_commitment,
    verify_proof,
)

__all__ = [
    "ADMIN_ROLE",
    "DEFAULT_ADMIN_ROLE",
    "PROPOSER_ROLE",
    "ProposalState",
    "VotingParameters",
    "ZKBallot",
    "MerkleTree",
    "VoteChoice",
    "compute_commitment",
    "eligibility_tree",
    "leaf_for",
    "make_commitment",
    "verify_proof",
    "__version__",
]
