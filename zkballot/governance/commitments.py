"""
Commit-Reveal Engine

Implements:
  - One commitment per (proposal, voter), accepted only in the commit
    window and only with a Merkle proof of eligibility
  - Reveal of (choice, salt) in the reveal window, checked against the
    stored commitment before the weighted vote reaches the tally

Each operation runs its checks in a fixed order and mutates nothing until
every check has passed.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Union

from eth_utils import encode_hex

from ..crypto.commitment import VoteChoice, compute_commitment, to_salt
from ..crypto.hashing import HashLike, is_zero_hash, to_bytes32
from ..crypto.merkle import leaf_for, verify_proof
from ..exceptions import (
    AlreadyRevealedError,
    AlreadyVotedError,
    CommitmentNotFoundError,
    InvalidCommitmentError,
    NotEligibleError,
    RevealClosedError,
    RevealMismatchError,
    ValidationError,
    VotingClosedError,
)
from ..logger import get_logger
from .proposals import Proposal, ProposalState

logger = get_logger(__name__)


@dataclass
class CommitmentRecord:
    """A voter's sealed vote on one proposal."""
    proposal_id: int
    voter: str
    commitment: bytes
    committed_at: int
    revealed: bool = False
    revealed_at: Optional[int] = None
    choice: Optional[VoteChoice] = None
    weight: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "proposalId": self.proposal_id,
            "voter": self.voter,
            "commitment": encode_hex(self.commitment),
            "committedAt": self.committed_at,
            "revealed": self.revealed,
            "revealedAt": self.revealed_at,
            "choice": self.choice.name if self.choice is not None else None,
            "weight": self.weight,
        }


class CommitmentEngine:
    """
    Per-proposal, per-voter commitment store.

    Voter keys are expected in normalized (checksum) form.
    """

    def __init__(self):
        # proposal_id → {voter → CommitmentRecord}
        self._commitments: Dict[int, Dict[str, CommitmentRecord]] = {}

    # ── Queries ───────────────────────────────────────────────────────

    def get(self, proposal_id: int, voter: str) -> Optional[CommitmentRecord]:
        return self._commitments.get(proposal_id, {}).get(voter)

    def has_voted(self, proposal_id: int, voter: str) -> bool:
        return voter in self._commitments.get(proposal_id, {})

    def has_revealed(self, proposal_id: int, voter: str) -> bool:
        record = self.get(proposal_id, voter)
        return record is not None and record.revealed

    def commit_count(self, proposal_id: int) -> int:
        return len(self._commitments.get(proposal_id, {}))

    def reveal_count(self, proposal_id: int) -> int:
        return sum(1 for r in self._commitments.get(proposal_id, {}).values() if r.revealed)

    # ── Commit ────────────────────────────────────────────────────────

    def commit(
        self,
        proposal: Proposal,
        voter: str,
        commitment: HashLike,
        proof: Sequence[HashLike],
        now: int,
    ) -> CommitmentRecord:
        """
        Record *voter*'s sealed vote.

        Checks, in order: ACTIVE state, commit window, no earlier commitment,
        non-zero commitment, eligibility proof.
        """
        proposal.require_state(ProposalState.ACTIVE, "commit to")
        if not proposal.in_commit_window(now):
            raise VotingClosedError(
                f"Voting closed for proposal #{proposal.id} "
                f"(window [{proposal.start_time}, {proposal.end_time}), now={now})"
            )
        if self.has_voted(proposal.id, voter):
            raise AlreadyVotedError(f"{voter} has already voted on proposal #{proposal.id}")
        try:
            sealed = to_bytes32(commitment, "commitment")
        except ValidationError as e:
            raise InvalidCommitmentError(str(e)) from None
        if is_zero_hash(sealed):
            raise InvalidCommitmentError("Invalid commitment")
        if not verify_proof(proof, proposal.eligibility_root, leaf_for(voter)):
            raise NotEligibleError(f"Not eligible to vote: {voter} on proposal #{proposal.id}")

        record = CommitmentRecord(
            proposal_id=proposal.id,
            voter=voter,
            commitment=sealed,
            committed_at=now,
        )
        self._commitments.setdefault(proposal.id, {})[voter] = record
        logger.info(f"Commit: {voter} on Proposal #{proposal.id} ({encode_hex(sealed)})")
        return record

    # ── Reveal ────────────────────────────────────────────────────────

    def reveal(
        self,
        proposal: Proposal,
        voter: str,
        choice: Union[int, str, VoteChoice],
        salt: HashLike,
        weight: int,
        now: int,
    ) -> CommitmentRecord:
        """
        Open *voter*'s commitment and add *weight* to the tally.

        Checks, in order: ACTIVE state, reveal window, commitment present,
        not yet revealed, valid choice and salt, hash match.
        """
        proposal.require_state(ProposalState.ACTIVE, "reveal on")
        if not proposal.in_reveal_window(now):
            raise RevealClosedError(
                f"Reveal closed for proposal #{proposal.id} "
                f"(window [{proposal.end_time}, {proposal.reveal_end_time}), now={now})"
            )
        record = self.get(proposal.id, voter)
        if record is None:
            raise CommitmentNotFoundError(f"No commitment from {voter} on proposal #{proposal.id}")
        if record.revealed:
            raise AlreadyRevealedError(f"{voter} has already revealed on proposal #{proposal.id}")
        vote = VoteChoice.parse(choice)
        secret = to_salt(salt)
        if compute_commitment(vote, secret) != record.commitment:
            raise RevealMismatchError("Invalid reveal")

        proposal.tally.add_vote(vote, weight)
        record.revealed = True
        record.revealed_at = now
        record.choice = vote
        record.weight = weight
        logger.info(
            f"Reveal: {voter} → {vote.name} on Proposal #{proposal.id} (weight={weight})"
        )
        return record
