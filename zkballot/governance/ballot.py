"""
ZKBallot: commit-reveal voting with Merkle eligibility

The ballot ties the components together behind one request surface:

  - ProposalRegistry   proposals and their lifecycle
  - CommitmentEngine   sealed votes and their reveal
  - VotingPowerTable   per-identity weights (unset → 1)
  - AccessControl      admin / proposer gates
  - VotingParameters   defaults read at proposal creation

Every mutating request takes the authenticated caller as its first
argument, runs under a single lock, and is non-reentrant: a request issued
while another one is still running (e.g. from an event listener) raises
ReentrancyError. All checks run before any state is written, so a rejected
request leaves the ballot unchanged.
"""

import functools
import threading
import time
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from ..crypto.commitment import VoteChoice
from ..crypto.hashing import HashLike, normalize_identity
from ..exceptions import (
    AlreadyExecutedError,
    BallotError,
    InvalidProposalError,
    PhaseError,
    ProposalNotPassedError,
    ReentrancyError,
)
from ..logger import get_logger
from .access import ADMIN_ROLE, PROPOSER_ROLE, AccessControl
from .commitments import CommitmentEngine
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
    filter_events,
)
from .parameters import VotingParameters
from .proposals import ProposalRegistry, ProposalState
from .tally import VotingPowerTable, passed, quorum_satisfied

logger = get_logger(__name__)


def nonreentrant(method: Callable) -> Callable:
    """Serialize a mutating request and reject nested requests."""

    @functools.wraps(method)
    def wrapper(self: "ZKBallot", *args, **kwargs):
        with self._lock:
            if self._entered:
                raise ReentrancyError(
                    f"{method.__name__} called while another ballot operation is in progress"
                )
            self._entered = True
            try:
                return method(self, *args, **kwargs)
            except BallotError as e:
                logger.debug(f"Rejected {method.__name__}: {type(e).__name__}: {e}")
                raise
            finally:
                self._entered = False

    return wrapper


class ZKBallot:
    """
    Anonymous commit-reveal ballot.

    Args:
        admin:      Deployer; receives the admin and proposer roles
        parameters: Initial voting defaults (validated)
        clock:      Callable returning the current time in seconds
    """

    def __init__(
        self,
        admin: str,
        parameters: Optional[VotingParameters] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self._clock = clock or time.time
        self._last_now = 0
        self._lock = threading.RLock()
        self._entered = False

        self.access = AccessControl(deployer=admin)
        self._parameters = (parameters or VotingParameters()).validate()
        self._registry = ProposalRegistry()
        self._commitments = CommitmentEngine()
        self._voting_power = VotingPowerTable()

        self._events: List[BallotEvent] = []
        self._listeners: List[Callable[[BallotEvent], None]] = []

        logger.info(
            f"Ballot deployed by {normalize_identity(admin)} "
            f"(votingPeriod={self._parameters.voting_period}s, "
            f"revealPeriod={self._parameters.reveal_period}s, "
            f"quorum={self._parameters.minimum_quorum})"
        )

    @classmethod
    def from_config(cls, admin: str, config, clock: Optional[Callable[[], float]] = None) -> "ZKBallot":
        """Build a ballot from a loaded ``BallotConfig``."""
        return cls(admin, parameters=config.voting.to_parameters(), clock=clock)

    # ── Internals ─────────────────────────────────────────────────────

    def _now(self) -> int:
        # Never run backwards even if the injected clock does
        now = max(int(self._clock()), self._last_now)
        self._last_now = now
        return now

    def _emit(self, event: BallotEvent) -> BallotEvent:
        self._events.append(event)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"Listener {listener!r} failed on {event.name}")
        return event

    def add_listener(self, listener: Callable[[BallotEvent], None]) -> None:
        """
        Subscribe to events. Listeners run after the state change is
        applied; a listener that issues a mutating request gets
        ReentrancyError. A listener that raises is logged and skipped,
        the request and the remaining listeners are unaffected.
        """
        self._listeners.append(listener)

    def remove_listener(self, listener: Callable[[BallotEvent], None]) -> None:
        self._listeners.remove(listener)

    # ── Proposals ─────────────────────────────────────────────────────

    @nonreentrant
    def create_proposal(
        self,
        caller: str,
        title: str,
        description: str,
        content_ref: str,
        eligibility_root: HashLike,
        voting_period_seconds: int = 0,
    ) -> int:
        """
        Open a new proposal; voting starts immediately.

        ``voting_period_seconds == 0`` selects the default voting period.
        """
        self.access.require_role(PROPOSER_ROLE, caller)
        if isinstance(voting_period_seconds, bool) or not isinstance(voting_period_seconds, int):
            raise InvalidProposalError(f"Invalid voting period: {voting_period_seconds!r}")
        if voting_period_seconds < 0:
            raise InvalidProposalError(f"Voting period cannot be negative: {voting_period_seconds}")

        params = self._parameters
        now = self._now()
        proposal = self._registry.create(
            proposer=caller,
            title=title,
            description=description,
            content_ref=content_ref,
            eligibility_root=eligibility_root,
            now=now,
            voting_period=voting_period_seconds or params.voting_period,
            reveal_period=params.reveal_period,
            required_quorum=params.minimum_quorum,
        )
        self._emit(ProposalCreated(
            timestamp=now,
            proposal_id=proposal.id,
            proposer=proposal.proposer,
            title=proposal.title,
            start_time=proposal.start_time,
            end_time=proposal.end_time,
            reveal_end_time=proposal.reveal_end_time,
        ))
        return proposal.id

    @nonreentrant
    def finalize_proposal(self, caller: str, proposal_id: int) -> ProposalFinalized:
        """
        Close a proposal once its reveal window is over. Open to anyone.

        Moves to ENDED, or to CANCELLED when total votes fall short of the
        required quorum.
        """
        normalize_identity(caller)
        proposal = self._registry.get(proposal_id)
        proposal.require_state(ProposalState.ACTIVE, "finalize")
        now = self._now()
        if now < proposal.reveal_end_time:
            raise PhaseError(
                f"Reveal period not ended for proposal #{proposal.id} "
                f"(ends {proposal.reveal_end_time}, now={now})"
            )

        tally = proposal.tally
        if quorum_satisfied(tally, proposal.required_quorum):
            proposal.transition_to(ProposalState.ENDED, "Finalized", now)
        else:
            proposal.transition_to(
                ProposalState.CANCELLED,
                f"Quorum not reached ({tally.total_votes} < {proposal.required_quorum})",
                now,
            )
            logger.warning(
                f"Proposal #{proposal.id}: quorum not reached "
                f"({tally.total_votes}/{proposal.required_quorum})"
            )

        event = ProposalFinalized(
            timestamp=now,
            proposal_id=proposal.id,
            state=proposal.state.name,
            for_votes=tally.for_votes,
            against_votes=tally.against_votes,
            abstain_votes=tally.abstain_votes,
            total_votes=tally.total_votes,
        )
        self._emit(event)
        return event

    @nonreentrant
    def execute_proposal(self, caller: str, proposal_id: int) -> ProposalExecuted:
        """ENDED → EXECUTED. Admin only; requires For > Against."""
        self.access.require_role(ADMIN_ROLE, caller)
        proposal = self._registry.get(proposal_id)
        proposal.require_state(ProposalState.ENDED, "execute")
        if proposal.executed:
            raise AlreadyExecutedError(f"Proposal #{proposal.id} already executed")
        if not passed(proposal.tally):
            raise ProposalNotPassedError(
                f"Proposal #{proposal.id} did not pass "
                f"(for={proposal.tally.for_votes}, against={proposal.tally.against_votes})"
            )

        now = self._now()
        proposal.transition_to(ProposalState.EXECUTED, "Executed", now)
        proposal.executed = True
        event = ProposalExecuted(timestamp=now, proposal_id=proposal.id)
        self._emit(event)
        return event

    @nonreentrant
    def cancel_proposal(self, caller: str, proposal_id: int, reason: str = "Cancelled by admin") -> ProposalCancelled:
        """ACTIVE → CANCELLED. Admin only."""
        self.access.require_role(ADMIN_ROLE, caller)
        proposal = self._registry.get(proposal_id)
        proposal.require_state(ProposalState.ACTIVE, "cancel")

        now = self._now()
        proposal.transition_to(ProposalState.CANCELLED, reason, now)
        event = ProposalCancelled(timestamp=now, proposal_id=proposal.id, reason=reason)
        self._emit(event)
        return event

    # ── Votes ─────────────────────────────────────────────────────────

    @nonreentrant
    def commit_vote(
        self,
        caller: str,
        proposal_id: int,
        commitment: HashLike,
        merkle_proof: Sequence[HashLike],
    ) -> VoteCommitted:
        """Submit a sealed vote during the commit window."""
        voter = normalize_identity(caller)
        proposal = self._registry.get(proposal_id)
        now = self._now()
        record = self._commitments.commit(proposal, voter, commitment, merkle_proof, now)
        event = VoteCommitted(
            timestamp=now,
            proposal_id=proposal.id,
            voter=voter,
            commitment=record.commitment,
        )
        self._emit(event)
        return event

    @nonreentrant
    def reveal_vote(
        self,
        caller: str,
        proposal_id: int,
        choice: Union[int, str, VoteChoice],
        salt: HashLike,
    ) -> VoteRevealed:
        """Open a sealed vote during the reveal window."""
        voter = normalize_identity(caller)
        proposal = self._registry.get(proposal_id)
        now = self._now()
        weight = self._voting_power.get(voter)
        record = self._commitments.reveal(proposal, voter, choice, salt, weight, now)
        event = VoteRevealed(
            timestamp=now,
            proposal_id=proposal.id,
            voter=voter,
            choice=int(record.choice),
            weight=weight,
        )
        self._emit(event)
        return event

    # ── Administration ────────────────────────────────────────────────

    @nonreentrant
    def set_voting_power(self, caller: str, identity: str, weight: int) -> VotingPowerUpdated:
        self.access.require_role(ADMIN_ROLE, caller)
        voter = self._voting_power.set(identity, weight)
        logger.info(f"Voting power of {voter} set to {weight}")
        event = VotingPowerUpdated(timestamp=self._now(), voter=voter, power=weight)
        self._emit(event)
        return event

    @nonreentrant
    def batch_set_voting_power(
        self,
        caller: str,
        identities: Sequence[str],
        weights: Sequence[int],
    ) -> List[VotingPowerUpdated]:
        """Set several weights at once; nothing is written if any entry is invalid."""
        self.access.require_role(ADMIN_ROLE, caller)
        pairs = self._voting_power.validate_batch(identities, weights)
        now = self._now()
        events = []
        for voter, weight in pairs:
            self._voting_power.set(voter, weight)
            events.append(VotingPowerUpdated(timestamp=now, voter=voter, power=weight))
        logger.info(f"Voting power set for {len(pairs)} identities")
        for event in events:
            self._emit(event)
        return events

    @nonreentrant
    def update_voting_parameters(
        self,
        caller: str,
        voting_period: int,
        reveal_period: int,
        quorum: int,
    ) -> VotingParametersUpdated:
        """Replace the defaults used by future proposals."""
        self.access.require_role(ADMIN_ROLE, caller)
        params = VotingParameters(
            voting_period=voting_period,
            reveal_period=reveal_period,
            minimum_quorum=quorum,
        ).validate()
        old = self._parameters
        self._parameters = params
        logger.info(f"Voting parameters changed: {old.to_dict()} → {params.to_dict()}")
        event = VotingParametersUpdated(
            timestamp=self._now(),
            voting_period=params.voting_period,
            reveal_period=params.reveal_period,
            minimum_quorum=params.minimum_quorum,
        )
        self._emit(event)
        return event

    # ── Queries ───────────────────────────────────────────────────────

    @property
    def parameters(self) -> VotingParameters:
        return self._parameters

    @property
    def default_voting_period(self) -> int:
        return self._parameters.voting_period

    @property
    def default_reveal_period(self) -> int:
        return self._parameters.reveal_period

    @property
    def minimum_quorum(self) -> int:
        return self._parameters.minimum_quorum

    @property
    def proposal_count(self) -> int:
        return len(self._registry)

    @property
    def events(self) -> List[BallotEvent]:
        return list(self._events)

    def events_for(self, proposal_id: int) -> List[BallotEvent]:
        return filter_events(self._events, proposal_id)

    def has_role(self, role: bytes, account: str) -> bool:
        return self.access.has_role(role, account)

    def get_proposal(self, proposal_id: int) -> Dict[str, Any]:
        """Full metadata snapshot of a proposal."""
        return self._registry.get(proposal_id).to_dict()

    def get_proposal_info(self, proposal_id: int) -> Tuple[str, str, str, int, int, int, ProposalState]:
        """``(proposer, title, description, start, end, revealEnd, state)``."""
        p = self._registry.get(proposal_id)
        return (p.proposer, p.title, p.description, p.start_time, p.end_time, p.reveal_end_time, p.state)

    def get_proposal_results(self, proposal_id: int) -> Tuple[int, int, int, int]:
        """``(for, against, abstain, total)``."""
        return self._registry.get(proposal_id).tally.as_tuple()

    def get_state(self, proposal_id: int) -> ProposalState:
        return self._registry.get(proposal_id).state

    def get_history(self, proposal_id: int) -> List[Dict[str, Any]]:
        return self._registry.get(proposal_id).history

    def has_voted(self, proposal_id: int, voter: str) -> bool:
        return self._commitments.has_voted(proposal_id, normalize_identity(voter))

    def has_revealed(self, proposal_id: int, voter: str) -> bool:
        return self._commitments.has_revealed(proposal_id, normalize_identity(voter))

    def get_commitment(self, proposal_id: int, voter: str) -> Optional[Dict[str, Any]]:
        record = self._commitments.get(proposal_id, normalize_identity(voter))
        return record.to_dict() if record is not None else None

    def voting_power_of(self, identity: str) -> int:
        return self._voting_power.get(identity)

    def participation(self, proposal_id: int) -> Dict[str, int]:
        """Commit and reveal counts for a proposal."""
        self._registry.get(proposal_id)
        return {
            "commits": self._commitments.commit_count(proposal_id),
            "reveals": self._commitments.reveal_count(proposal_id),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parameters": self._parameters.to_dict(),
            "proposalCount": len(self._registry),
            "proposals": {p.id: p.to_dict() for p in self._registry},
            "weightedVoters": len(self._voting_power),
            "events": len(self._events),
        }

    def __repr__(self) -> str:
        return f"<ZKBallot proposals={len(self._registry)} events={len(self._events)}>"
