"""
Role-Based Access Control

Roles are 32-byte identifiers. ``DEFAULT_ADMIN_ROLE`` is the zero hash and
administers every other role; ``ADMIN_ROLE`` gates parameter updates,
voting-power assignment and execute/cancel; ``PROPOSER_ROLE`` gates
proposal creation.
"""

from typing import Dict, Optional, Set

from eth_utils import encode_hex

from ..constants import (
    ADMIN_ROLE_NAME,
    DEFAULT_ADMIN_ROLE_NAME,
    PROPOSER_ROLE_NAME,
    ZERO_HASH,
)
from ..crypto.hashing import keccak256, normalize_identity
from ..exceptions import MissingRoleError
from ..logger import get_logger

logger = get_logger(__name__)


DEFAULT_ADMIN_ROLE = ZERO_HASH
ADMIN_ROLE = keccak256(ADMIN_ROLE_NAME.encode())
PROPOSER_ROLE = keccak256(PROPOSER_ROLE_NAME.encode())

ROLE_NAMES: Dict[bytes, str] = {
    DEFAULT_ADMIN_ROLE: DEFAULT_ADMIN_ROLE_NAME,
    ADMIN_ROLE: ADMIN_ROLE_NAME,
    PROPOSER_ROLE: PROPOSER_ROLE_NAME,
}


def role_name(role: bytes) -> str:
    return ROLE_NAMES.get(role, encode_hex(role))


class AccessControl:
    """Set-membership role registry."""

    def __init__(self, deployer: Optional[str] = None):
        self._members: Dict[bytes, Set[str]] = {}
        self._role_admin: Dict[bytes, bytes] = {}
        if deployer is not None:
            for role in (DEFAULT_ADMIN_ROLE, ADMIN_ROLE, PROPOSER_ROLE):
                self._grant(role, deployer)

    # ── Queries ───────────────────────────────────────────────────────

    def has_role(self, role: bytes, account: str) -> bool:
        return normalize_identity(account) in self._members.get(role, set())

    def get_role_admin(self, role: bytes) -> bytes:
        return self._role_admin.get(role, DEFAULT_ADMIN_ROLE)

    def members(self, role: bytes) -> Set[str]:
        return set(self._members.get(role, set()))

    def require_role(self, role: bytes, account: str) -> None:
        """Raise MissingRoleError unless *account* holds *role*."""
        if not self.has_role(role, account):
            raise MissingRoleError(account, role_name(role))

    # ── Administration ────────────────────────────────────────────────

    def _grant(self, role: bytes, account: str) -> bool:
        members = self._members.setdefault(role, set())
        account = normalize_identity(account)
        if account in members:
            return False
        members.add(account)
        logger.info(f"Role {role_name(role)} granted to {account}")
        return True

    def grant_role(self, caller: str, role: bytes, account: str) -> bool:
        """Grant *role*; caller must hold the role's admin role."""
        self.require_role(self.get_role_admin(role), caller)
        return self._grant(role, account)

    def revoke_role(self, caller: str, role: bytes, account: str) -> bool:
        """Revoke *role*; caller must hold the role's admin role."""
        self.require_role(self.get_role_admin(role), caller)
        members = self._members.get(role, set())
        account = normalize_identity(account)
        if account not in members:
            return False
        members.discard(account)
        logger.info(f"Role {role_name(role)} revoked from {account}")
        return True

    def __repr__(self) -> str:
        counts = {role_name(r): len(m) for r, m in self._members.items()}
        return f"<AccessControl {counts}>"
