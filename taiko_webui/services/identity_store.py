"""Persistence of accounts and the arcade access code resolver."""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import asyncpg
import structlog

from taiko_webui.database import get_pool
from taiko_webui.models.user import AuthUser
from taiko_webui.services.uniqueness_guard import ConflictKind, conflict_from_constraint

logger = structlog.get_logger(__name__)


class IdentityStoreError(Exception):
    """The store could not complete a read or write."""


class DuplicateAuthUserError(IdentityStoreError):
    """A write was rejected by the username or Baid unique index."""

    def __init__(self, kind: ConflictKind, constraint: Optional[str] = None):
        self.kind = kind
        self.constraint = constraint
        super().__init__(f"Duplicate auth user ({kind.value})")


@asynccontextmanager
async def _connection() -> AsyncIterator[asyncpg.Connection]:
    """Acquire a pooled connection, wrapping driver failures."""
    try:
        pool = await get_pool()
        async with pool.acquire() as conn:
            yield conn
    except asyncpg.UniqueViolationError as e:
        raise DuplicateAuthUserError(
            conflict_from_constraint(e.constraint_name), e.constraint_name
        ) from e
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, RuntimeError) as e:
        raise IdentityStoreError(str(e)) from e


class IdentityStore:
    """asyncpg-backed store for ``auth_users`` rows.

    Access codes live in the game server's ``cards`` table and are only read.
    """

    async def get_baid_from_access_code(self, access_code: str) -> Optional[int]:
        """Resolve an arcade access code to its Baid.

        Args:
            access_code: Code printed on / stored in the arcade card

        Returns:
            The Baid, or None if the code is unknown
        """
        async with _connection() as conn:
            return await conn.fetchval(
                "SELECT baid FROM cards WHERE access_code = $1",
                access_code,
            )

    async def is_auth_user_unique(
        self, username: str, baid: int
    ) -> tuple[bool, ConflictKind]:
        """Check whether an account with this username or Baid already exists.

        Args:
            username: Candidate username
            baid: Candidate Baid

        Returns:
            Tuple of (unique, conflict kind). A username clash wins over a
            Baid clash when both apply.
        """
        async with _connection() as conn:
            rows = await conn.fetch(
                """
                SELECT username, baid
                FROM auth_users
                WHERE username = $1 OR baid = $2
                """,
                username,
                baid,
            )

        if any(row["username"] == username for row in rows):
            return False, ConflictKind.USERNAME_TAKEN
        if rows:
            return False, ConflictKind.BAID_TAKEN
        return True, ConflictKind.NONE

    async def insert_auth_user(self, user: AuthUser) -> None:
        """Insert a new account.

        Raises:
            DuplicateAuthUserError: If the username or Baid is already taken
        """
        async with _connection() as conn:
            await conn.execute(
                """
                INSERT INTO auth_users (username, baid, password_hash)
                VALUES ($1, $2, $3)
                """,
                user.username,
                user.baid,
                user.password_hash,
            )

        logger.info("auth_user_inserted", username=user.username, baid=user.baid)

    async def get_auth_user_by_username(self, username: str) -> Optional[AuthUser]:
        """Get an account by exact username.

        Returns:
            AuthUser or None if not found
        """
        async with _connection() as conn:
            row = await conn.fetchrow(
                """
                SELECT username, baid, password_hash
                FROM auth_users
                WHERE username = $1
                """,
                username,
            )

        if row is None:
            return None

        return AuthUser(
            username=row["username"],
            baid=row["baid"],
            password_hash=row["password_hash"],
        )

    async def get_username_by_baid(self, baid: int) -> Optional[str]:
        async with _connection() as conn:
            return await conn.fetchval(
                "SELECT username FROM auth_users WHERE baid = $1",
                baid,
            )

    async def get_password_hash_by_baid(self, baid: int) -> Optional[str]:
        async with _connection() as conn:
            return await conn.fetchval(
                "SELECT password_hash FROM auth_users WHERE baid = $1",
                baid,
            )

    async def change_username(self, baid: int, new_username: str) -> None:
        """Rename the account linked to ``baid``.

        Raises:
            DuplicateAuthUserError: If another account holds ``new_username``
        """
        async with _connection() as conn:
            result = await conn.execute(
                """
                UPDATE auth_users
                SET username = $1, updated_at = NOW()
                WHERE baid = $2
                """,
                new_username,
                baid,
            )

        if result == "UPDATE 0":
            logger.warning("change_username_no_account", baid=baid)
        else:
            logger.info("username_changed", baid=baid, username=new_username)

    async def change_password(self, baid: int, new_hash: str) -> None:
        """Replace the stored password hash for ``baid``."""
        async with _connection() as conn:
            result = await conn.execute(
                """
                UPDATE auth_users
                SET password_hash = $1, updated_at = NOW()
                WHERE baid = $2
                """,
                new_hash,
                baid,
            )

        if result == "UPDATE 0":
            logger.warning("change_password_no_account", baid=baid)
        else:
            logger.info("password_changed", baid=baid)
