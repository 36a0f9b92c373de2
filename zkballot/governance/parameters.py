"""
Voting Parameters

Defaults read by proposal creation: voting period, reveal period and the
minimum quorum copied onto each new proposal. Owned by the ballot and
changed only through its admin-gated update operation.
"""

from dataclasses import dataclass
from typing import Any, Dict

from ..constants import (
    DEFAULT_MINIMUM_QUORUM,
    DEFAULT_REVEAL_PERIOD_SECONDS,
    DEFAULT_VOTING_PERIOD_SECONDS,
    MAX_QUORUM_PERCENT,
    MIN_PERIOD_SECONDS,
)
from ..exceptions import InvalidParameterError


@dataclass(frozen=True)
class VotingParameters:
    """
    Process-wide voting defaults.

    Fields:
        voting_period:   Default commit window length (seconds)
        reveal_period:   Reveal window length (seconds)
        minimum_quorum:  Quorum percentage copied onto new proposals
    """
    voting_period: int = DEFAULT_VOTING_PERIOD_SECONDS
    reveal_period: int = DEFAULT_REVEAL_PERIOD_SECONDS
    minimum_quorum: int = DEFAULT_MINIMUM_QUORUM

    def validate(self) -> "VotingParameters":
        """
        Enforce the period floor and the quorum range.

        Raises InvalidParameterError; returns self for chaining.
        """
        for name in ("voting_period", "reveal_period", "minimum_quorum"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidParameterError(f"{name} must be an integer, got {value!r}")
        if self.voting_period < MIN_PERIOD_SECONDS:
            raise InvalidParameterError(
                f"Voting period {self.voting_period}s < minimum {MIN_PERIOD_SECONDS}s"
            )
        if self.reveal_period < MIN_PERIOD_SECONDS:
            raise InvalidParameterError(
                f"Reveal period {self.reveal_period}s < minimum {MIN_PERIOD_SECONDS}s"
            )
        if not 0 <= self.minimum_quorum <= MAX_QUORUM_PERCENT:
            raise InvalidParameterError(
                f"Quorum {self.minimum_quorum} outside 0-{MAX_QUORUM_PERCENT}"
            )
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "votingPeriod": self.voting_period,
            "revealPeriod": self.reveal_period,
            "minimumQuorum": self.minimum_quorum,
        }
