"""
Ballot Proposals

Defines the proposal lifecycle states, the Proposal dataclass that tracks a
single ballot from creation to execution, and the append-only registry
that owns every proposal.

Lifecycle:
    ACTIVE ──finalize──▶ ENDED ──execute──▶ EXECUTED
       │  └─finalize (quorum missed)─▶ CANCELLED
       └──────────cancel──────────────▶ CANCELLED
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List

from eth_utils import encode_hex

from ..crypto.hashing import HashLike, is_zero_hash, normalize_identity, to_bytes32
from ..exceptions import (
    InvalidProposalError,
    PhaseError,
    ProposalNotFoundError,
    ValidationError,
)
from ..logger import get_logger
from .tally import Tally

logger = get_logger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  ENUMS
# ══════════════════════════════════════════════════════════════════════

class ProposalState(IntEnum):
    """Lifecycle stage."""
    PENDING = 0     # Reserved; no transition produces it
    ACTIVE = 1      # Commit window, then reveal window
    ENDED = 2       # Finalized with quorum
    EXECUTED = 3    # Executed by an admin
    CANCELLED = 4   # Cancelled by an admin or for missing quorum


# Valid forward transitions
_VALID_TRANSITIONS: Dict[ProposalState, set] = {
    ProposalState.PENDING:   set(),
    ProposalState.ACTIVE:    {ProposalState.ENDED, ProposalState.CANCELLED},
    ProposalState.ENDED:     {ProposalState.EXECUTED},
    # Terminal states
    ProposalState.EXECUTED:  set(),
    ProposalState.CANCELLED: set(),
}


# ══════════════════════════════════════════════════════════════════════
#  PROPOSAL
# ══════════════════════════════════════════════════════════════════════

@dataclass
class Proposal:
    """
    A single commit-reveal ballot.

    Fields:
        id:               Sequential identifier, starting at 0
        proposer:         Address of the creator
        title:            Short title (non-empty)
        description:      Detailed description
        content_ref:      Off-chain content reference (e.g. IPFS hash)
        eligibility_root: Merkle root of the eligible voter set (non-zero)
        start_time:       Commit window opens
        end_time:         Commit window closes, reveal window opens
        reveal_end_time:  Reveal window closes
        required_quorum:  Quorum value compared at finalization
        state:            Current lifecycle stage
        tally:            Weighted per-choice counters
        executed:         Set once by execution
    """
    id: int
    proposer: str
    title: str
    description: str
    content_ref: str
    eligibility_root: bytes
    start_time: int
    end_time: int
    reveal_end_time: int
    required_quorum: int
    state: ProposalState = ProposalState.ACTIVE
    tally: Tally = field(default_factory=Tally)
    executed: bool = False
    _history: List[Dict[str, Any]] = field(default_factory=list, repr=False)

    def __post_init__(self):
        if not self.title:
            raise InvalidProposalError("Title required")
        if is_zero_hash(self.eligibility_root):
            raise InvalidProposalError("Invalid merkle root")
        if not (self.start_time < self.end_time < self.reveal_end_time):
            raise InvalidProposalError(
                f"Invalid schedule: start={self.start_time} end={self.end_time} "
                f"revealEnd={self.reveal_end_time}"
            )
        self._history.append({
            "from": "INIT",
            "to": self.state.name,
            "reason": "created",
            "timestamp": self.start_time,
        })

    # ── Properties ────────────────────────────────────────────────────

    @property
    def voting_period(self) -> int:
        return self.end_time - self.start_time

    @property
    def reveal_period(self) -> int:
        return self.reveal_end_time - self.end_time

    @property
    def is_terminal(self) -> bool:
        return not _VALID_TRANSITIONS[self.state]

    @property
    def history(self) -> List[Dict[str, Any]]:
        return list(self._history)

    def in_commit_window(self, now: int) -> bool:
        return self.start_time <= now < self.end_time

    def in_reveal_window(self, now: int) -> bool:
        return self.end_time <= now < self.reveal_end_time

    # ── State transitions ─────────────────────────────────────────────

    def require_state(self, expected: ProposalState, action: str) -> None:
        """Reject *action* unless the proposal is in *expected* state."""
        if self.state != expected:
            raise PhaseError(
                f"Cannot {action} proposal #{self.id}: "
                f"state is {self.state.name}, requires {expected.name}"
            )

    def transition_to(self, new_state: ProposalState, reason: str, now: int) -> None:
        """
        Advance proposal to *new_state*.

        Raises PhaseError on invalid transitions.
        """
        allowed = _VALID_TRANSITIONS.get(self.state, set())
        if new_state not in allowed:
            raise PhaseError(
                f"Cannot transition from {self.state.name} → {new_state.name}. "
                f"Allowed: {[s.name for s in allowed]}"
            )
        old = self.state
        self._history.append({
            "from": old.name,
            "to": new_state.name,
            "reason": reason,
            "timestamp": now,
        })
        self.state = new_state
        logger.info(f"Proposal #{self.id} ({self.title}): {old.name} → {new_state.name} | {reason}")

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "proposer": self.proposer,
            "title": self.title,
            "description": self.description,
            "contentRef": self.content_ref,
            "eligibilityRoot": encode_hex(self.eligibility_root),
            "startTime": self.start_time,
            "endTime": self.end_time,
            "revealEndTime": self.reveal_end_time,
            "state": self.state.name,
            "requiredQuorum": self.required_quorum,
            **self.tally.to_dict(),
            "executed": self.executed,
            "historyLength": len(self._history),
        }

    def __repr__(self) -> str:
        return f"<Proposal #{self.id} '{self.title}' state={self.state.name}>"


# ══════════════════════════════════════════════════════════════════════
#  REGISTRY
# ══════════════════════════════════════════════════════════════════════

class ProposalRegistry:
    """
    Append-only store of proposals.

    Ids are list indices, so lookup is O(1) and nothing can dangle: no
    proposal is ever removed.
    """

    def __init__(self):
        self._proposals: List[Proposal] = []

    def create(
        self,
        proposer: str,
        title: str,
        description: str,
        content_ref: str,
        eligibility_root: HashLike,
        now: int,
        voting_period: int,
        reveal_period: int,
        required_quorum: int,
    ) -> Proposal:
        """Validate and append a new ACTIVE proposal starting at *now*."""
        if not title:
            raise InvalidProposalError("Title required")
        try:
            root = to_bytes32(eligibility_root, "merkle root")
        except ValidationError as e:
            raise InvalidProposalError(str(e)) from None
        if is_zero_hash(root):
            raise InvalidProposalError("Invalid merkle root")
        if voting_period <= 0 or reveal_period <= 0:
            raise InvalidProposalError(
                f"Periods must be positive (voting={voting_period}, reveal={reveal_period})"
            )

        end_time = now + voting_period
        proposal = Proposal(
            id=len(self._proposals),
            proposer=normalize_identity(proposer),
            title=title,
            description=description or "",
            content_ref=content_ref or "",
            eligibility_root=root,
            start_time=now,
            end_time=end_time,
            reveal_end_time=end_time + reveal_period,
            required_quorum=required_quorum,
        )
        self._proposals.append(proposal)
        logger.info(
            f"Proposal #{proposal.id} created by {proposal.proposer}: '{title}' "
            f"(voting until {proposal.end_time}, reveal until {proposal.reveal_end_time})"
        )
        return proposal

    def get(self, proposal_id: int) -> Proposal:
        """Raises ProposalNotFoundError for unknown ids."""
        if isinstance(proposal_id, bool) or not isinstance(proposal_id, int):
            raise ProposalNotFoundError(f"Invalid proposal id: {proposal_id!r}")
        if not 0 <= proposal_id < len(self._proposals):
            raise ProposalNotFoundError(f"Proposal #{proposal_id} does not exist")
        return self._proposals[proposal_id]

    def __len__(self) -> int:
        return len(self._proposals)

    def __iter__(self):
        return iter(list(self._proposals))
