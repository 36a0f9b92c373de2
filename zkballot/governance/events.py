"""
Ballot events.

One frozen dataclass per successful state transition. Events carry only
what is public at the time: a commit event exposes the opaque commitment
hash, never the choice or salt.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from eth_utils import encode_hex


@dataclass(frozen=True)
class BallotEvent:
    """Common base; ``name`` is the event's wire name."""
    timestamp: int

    name = "BallotEvent"
    proposal_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"event": self.name, "timestamp": self.timestamp}


@dataclass(frozen=True)
class ProposalCreated(BallotEvent):
    name = "ProposalCreated"
    proposal_id: int = 0
    proposer: str = ""
    title: str = ""
    start_time: int = 0
    end_time: int = 0
    reveal_end_time: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.name,
            "proposalId": self.proposal_id,
            "proposer": self.proposer,
            "title": self.title,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "revealEndTime": self.reveal_end_time,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class VoteCommitted(BallotEvent):
    name = "VoteCommitted"
    proposal_id: int = 0
    voter: str = ""
    commitment: bytes = b""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.name,
            "proposalId": self.proposal_id,
            "voter": self.voter,
            "commitment": encode_hex(self.commitment),
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class VoteRevealed(BallotEvent):
    name = "VoteRevealed"
    proposal_id: int = 0
    voter: str = ""
    choice: int = 0
    weight: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.name,
            "proposalId": self.proposal_id,
            "voter": self.voter,
            "choice": self.choice,
            "weight": self.weight,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class ProposalFinalized(BallotEvent):
    name = "ProposalFinalized"
    proposal_id: int = 0
    state: str = ""
    for_votes: int = 0
    against_votes: int = 0
    abstain_votes: int = 0
    total_votes: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.name,
            "proposalId": self.proposal_id,
            "state": self.state,
            "forVotes": self.for_votes,
            "againstVotes": self.against_votes,
            "abstainVotes": self.abstain_votes,
            "totalVotes": self.total_votes,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class ProposalExecuted(BallotEvent):
    name = "ProposalExecuted"
    proposal_id: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.name,
            "proposalId": self.proposal_id,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class ProposalCancelled(BallotEvent):
    name = "ProposalCancelled"
    proposal_id: int = 0
    reason: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.name,
            "proposalId": self.proposal_id,
            "reason": self.reason,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class VotingPowerUpdated(BallotEvent):
    name = "VotingPowerUpdated"
    voter: str = ""
    power: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.name,
            "voter": self.voter,
            "power": self.power,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class VotingParametersUpdated(BallotEvent):
    name = "VotingParametersUpdated"
    voting_period: int = 0
    reveal_period: int = 0
    minimum_quorum: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.name,
            "votingPeriod": self.voting_period,
            "revealPeriod": self.reveal_period,
            "minimumQuorum": self.minimum_quorum,
            "timestamp": self.timestamp,
        }


def filter_events(events: List[BallotEvent], proposal_id: int) -> List[BallotEvent]:
    return [e for e in events if e.proposal_id == proposal_id]
