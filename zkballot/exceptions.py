"""
ZKBallot Exceptions

Custom exception classes for the ballot state machine. Every rejected
request raises one of these; none are retried internally.
"""


class BallotError(Exception):
    """Base exception for ZKBallot."""
    pass


class ConfigurationError(BallotError):
    """Configuration error."""
    pass


class ReentrancyError(BallotError):
    """A mutating operation was entered while another one was running."""
    pass


# ══════════════════════════════════════════════════════════════════════
#  AUTHORIZATION
# ══════════════════════════════════════════════════════════════════════

class AuthorizationError(BallotError):
    """Caller lacks the role required for the operation."""


class MissingRoleError(AuthorizationError):
    """Raised by role gates."""

    def __init__(self, account: str, role_name: str):
        self.account = account
        self.role_name = role_name
        super().__init__(f"{account} is missing role {role_name}")


# ══════════════════════════════════════════════════════════════════════
#  VALIDATION
# ══════════════════════════════════════════════════════════════════════

class ValidationError(BallotError):
    """Request input is malformed or out of range."""


class InvalidProposalError(ValidationError):
    """Proposal creation data is invalid (empty title, zero root, ...)."""


class InvalidCommitmentError(ValidationError):
    """Commitment hash is zero or malformed."""


class InvalidChoiceError(ValidationError):
    """Vote choice is not Abstain / For / Against."""


class InvalidSaltError(ValidationError):
    """Salt is not exactly 32 bytes."""


class InvalidIdentityError(ValidationError):
    """Identity is not a valid address."""


class InvalidParameterError(ValidationError):
    """Voting parameter or voting power out of range."""


class LengthMismatchError(ValidationError):
    """Batch inputs have different lengths."""


class CommitmentNotFoundError(ValidationError):
    """Reveal attempted without a prior commitment."""


class ProposalNotPassedError(ValidationError):
    """Execution attempted on a proposal without a For majority."""


# ══════════════════════════════════════════════════════════════════════
#  PHASE
# ══════════════════════════════════════════════════════════════════════

class PhaseError(BallotError):
    """Operation attempted outside its required state or time window."""


class ProposalNotFoundError(PhaseError):
    """No proposal with the given id."""


class VotingClosedError(PhaseError):
    """Commit attempted outside [start_time, end_time)."""


class RevealClosedError(PhaseError):
    """Reveal attempted outside [end_time, reveal_end_time)."""


# ══════════════════════════════════════════════════════════════════════
#  DUPLICATES
# ══════════════════════════════════════════════════════════════════════

class DuplicateError(BallotError):
    """Action was already performed."""


class AlreadyVotedError(DuplicateError):
    """Voter already committed on this proposal."""


class AlreadyRevealedError(DuplicateError):
    """Voter already revealed on this proposal."""


class AlreadyExecutedError(DuplicateError):
    """Proposal was already executed."""


# ══════════════════════════════════════════════════════════════════════
#  CRYPTOGRAPHIC CHECKS
# ══════════════════════════════════════════════════════════════════════

class ProofError(BallotError):
    """Merkle proof does not verify."""


class NotEligibleError(ProofError):
    """Caller is not in the proposal's eligibility set."""


class RevealMismatchError(BallotError):
    """Recomputed commitment does not equal the stored commitment."""
