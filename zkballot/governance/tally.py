"""
Weighted Tally Engine

Accumulates revealed votes per choice and answers the two questions asked
at the end of a proposal: was quorum met, and did it pass.

  - Weight comes from the VotingPowerTable; an unset voter weighs 1
  - Abstain counts toward the total (and therefore toward quorum)
  - Passing means strictly more For weight than Against weight
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

from ..constants import DEFAULT_VOTING_POWER
from ..crypto.commitment import VoteChoice
from ..crypto.hashing import normalize_identity
from ..exceptions import InvalidParameterError, LengthMismatchError
from ..logger import get_logger

logger = get_logger(__name__)


@dataclass
class Tally:
    """Per-proposal weighted counters."""
    for_votes: int = 0
    against_votes: int = 0
    abstain_votes: int = 0
    total_votes: int = 0

    def add_vote(self, choice: VoteChoice, weight: int) -> None:
        """Add *weight* to *choice* and to the total."""
        if weight < 0:
            raise InvalidParameterError(f"Vote weight cannot be negative: {weight}")
        if choice == VoteChoice.FOR:
            self.for_votes += weight
        elif choice == VoteChoice.AGAINST:
            self.against_votes += weight
        else:
            self.abstain_votes += weight
        self.total_votes += weight

    def for_choice(self, choice: VoteChoice) -> int:
        return {
            VoteChoice.FOR: self.for_votes,
            VoteChoice.AGAINST: self.against_votes,
            VoteChoice.ABSTAIN: self.abstain_votes,
        }[VoteChoice(choice)]

    @property
    def is_consistent(self) -> bool:
        return self.for_votes + self.against_votes + self.abstain_votes == self.total_votes

    def as_tuple(self) -> Tuple[int, int, int, int]:
        """``(for, against, abstain, total)``."""
        return (self.for_votes, self.against_votes, self.abstain_votes, self.total_votes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "forVotes": self.for_votes,
            "againstVotes": self.against_votes,
            "abstainVotes": self.abstain_votes,
            "totalVotes": self.total_votes,
        }


def quorum_satisfied(tally: Tally, required_quorum: int) -> bool:
    """
    Quorum check applied at finalization.

    ``required_quorum`` is configured as a percentage but is compared with
    the absolute weighted vote total; there is no eligible-voter count to
    take a percentage of.
    """
    return tally.total_votes >= required_quorum


def passed(tally: Tally) -> bool:
    return tally.for_votes > tally.against_votes


class VotingPowerTable:
    """
    Identity → weight. Process-wide, shared by every proposal.

    Only unset identities fall back to DEFAULT_VOTING_POWER; an explicit
    zero is kept as zero.
    """

    def __init__(self, initial: Optional[Dict[str, int]] = None):
        self._power: Dict[str, int] = {}
        for identity, weight in (initial or {}).items():
            self.set(identity, weight)

    @staticmethod
    def _check_weight(weight: int) -> int:
        if isinstance(weight, bool) or not isinstance(weight, int):
            raise InvalidParameterError(f"Voting power must be an integer, got {weight!r}")
        if weight < 0:
            raise InvalidParameterError(f"Voting power cannot be negative: {weight}")
        return weight

    def set(self, identity: str, weight: int) -> str:
        """Store *weight*; returns the normalized identity."""
        key = normalize_identity(identity)
        self._power[key] = self._check_weight(weight)
        return key

    def validate_batch(self, identities: Iterable[str], weights: Iterable[int]) -> list:
        """
        Check a batch before anything is written.

        Returns the list of ``(normalized identity, weight)`` pairs.
        """
        identities = list(identities)
        weights = list(weights)
        if len(identities) != len(weights):
            raise LengthMismatchError(
                f"Length mismatch: {len(identities)} identities, {len(weights)} weights"
            )
        return [
            (normalize_identity(i), self._check_weight(w))
            for i, w in zip(identities, weights)
        ]

    def get(self, identity: str) -> int:
        return self._power.get(normalize_identity(identity), DEFAULT_VOTING_POWER)

    def is_set(self, identity: str) -> bool:
        return normalize_identity(identity) in self._power

    def __len__(self) -> int:
        return len(self._power)

    def to_dict(self) -> Dict[str, int]:
        return dict(self._power)
