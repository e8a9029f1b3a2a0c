"""Username and Baid uniqueness rules for accounts.

The unique indexes on ``auth_users`` are the source of truth. The guard runs
the friendly pre-checks and maps an index violation from a lost race back to
the same conflict the pre-check would have reported.
"""

from enum import Enum
from typing import TYPE_CHECKING, Optional

import structlog

if TYPE_CHECKING:
    from taiko_webui.services.identity_store import IdentityStore

logger = structlog.get_logger(__name__)

USERNAME_CONSTRAINT = "auth_users_username_key"
BAID_CONSTRAINT = "auth_users_baid_key"


class ConflictKind(str, Enum):
    """Which uniqueness rule a candidate account breaks."""

    NONE = "none"
    USERNAME_TAKEN = "username_taken"
    BAID_TAKEN = "baid_taken"


def conflict_from_constraint(constraint_name: Optional[str]) -> ConflictKind:
    """Map a unique-index name reported by the database to a conflict kind."""
    if constraint_name == USERNAME_CONSTRAINT:
        return ConflictKind.USERNAME_TAKEN
    if constraint_name == BAID_CONSTRAINT:
        return ConflictKind.BAID_TAKEN
    # Unnamed violation; username is the only other unique column users pick
    logger.warning("unknown_unique_constraint", constraint=constraint_name)
    return ConflictKind.USERNAME_TAKEN


class UniquenessGuard:
    """Pre-checks that a username is free and a Baid is not yet linked."""

    def __init__(self, store: "IdentityStore"):
        self.store = store

    async def check_registration(self, username: str, baid: int) -> ConflictKind:
        """Return the conflict a new (username, baid) account would cause.

        Username clashes are reported before Baid clashes.
        """
        unique, kind = await self.store.is_auth_user_unique(username, baid)
        if unique:
            return ConflictKind.NONE
        return kind

    async def is_username_available(self, username: str) -> bool:
        """True if no account currently uses ``username``."""
        existing = await self.store.get_auth_user_by_username(username)
        return existing is None
