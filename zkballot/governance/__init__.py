"""
ZKBallot Governance

Provides:
  - ProposalState / Proposal / ProposalRegistry      (proposals.py)
  - CommitmentRecord / CommitmentEngine              (commitments.py)
  - Tally / VotingPowerTable                         (tally.py)
  - AccessControl and role ids                       (access.py)
  - VotingParameters                                 (parameters.py)
  - Ballot events                                    (events.py)
  - ZKBallot request surface                         (ballot.py)
"""

from .proposals import (
    Proposal,
    ProposalRegistry,
    ProposalState,
)
from .commitments import (
    CommitmentEngine,
    CommitmentRecord,
)
from .tally import (
    Tally,
    VotingPowerTable,
    passed,
    quorum_satisfied,
)
from .access import (
    ADMIN_ROLE,
    DEFAULT_ADMIN_ROLE,
    PROPOSER_ROLE,
    AccessControl,
)
from .parameters import VotingParameters
from .events import (
    BallotEvent,
    ProposalCancelled,
    ProposalCreated,
    ProposalExecuted,
    ProposalFinalized,
    VoteCommitted,
    VoteRevealed,
    VotingParametersUpdated,
    VotingPowerUpdated,
)
from .ballot import ZKBallot

__all__ = [
    # Proposals
    "Proposal",
    "ProposalRegistry",
    "ProposalState",
    # Commitments
    "CommitmentEngine",
    "CommitmentRecord",
    # Tally
    "Tally",
    "VotingPowerTable",
    "passed",
    "quorum_satisfied",
    # Access control
    "ADMIN_ROLE",
    "DEFAULT_ADMIN_ROLE",
    "PROPOSER_ROLE",
    "AccessControl",
    # Parameters
    "VotingParameters",
    # Events
    "BallotEvent",
    "ProposalCancelled",
    "ProposalCreated",
    "ProposalExecuted",
    "ProposalFinalized",
    "VoteCommitted",
    "VoteRevealed",
    "VotingParametersUpdated",
    "VotingPowerUpdated",
    # Ballot
    "ZKBallot",
]
