"""Account registration, login and credential changes."""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import structlog

from taiko_webui.exceptions import (
    AuthFailureError,
    ConflictError,
    InputInvalidError,
    InternalError,
    NotFoundError,
)
from taiko_webui.models.user import AuthUser, SimpleAuthUser
from taiko_webui.services.identity_store import (
    DuplicateAuthUserError,
    IdentityStore,
    IdentityStoreError,
)
from taiko_webui.services.password_hasher import PasswordHasher
from taiko_webui.services.session_tokens import SessionTokenCodec
from taiko_webui.services.uniqueness_guard import ConflictKind, UniquenessGuard

logger = structlog.get_logger(__name__)

# Constants
USERNAME_MAX_LENGTH = 20
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 100

INVALID_FORM = "Invalid form"
USERNAME_LENGTH_MESSAGE = "Username must be less than or equal to 20 characters long"
BAD_CREDENTIALS_MESSAGE = "Username or Password is incorrect"
UNAUTHORIZED_MESSAGE = "Unauthorized"


@dataclass(frozen=True)
class LoginResult:
    """A freshly issued session for a verified account."""

    user: SimpleAuthUser
    token: str
    expires_at: datetime


def _password_length_ok(password: str) -> bool:
    return PASSWORD_MIN_LENGTH <= len(password) <= PASSWORD_MAX_LENGTH


def _registration_conflict(kind: ConflictKind) -> ConflictError:
    if kind == ConflictKind.USERNAME_TAKEN:
        return ConflictError("Username already exists", kind, status_code=400)
    return ConflictError("Access code already linked", kind, status_code=400)


class AuthService:
    """Orchestrates the account state machine.

    Unregistered -> Registered (register), Registered -> Authenticated
    (login), Authenticated -> Authenticated (change_username,
    change_password). Logout is purely a cookie operation and lives in the
    route.

    Every failure is raised as an ``AuthError`` subclass carrying the HTTP
    status and client message.
    """

    def __init__(
        self,
        store: IdentityStore,
        hasher: PasswordHasher,
        codec: SessionTokenCodec,
    ):
        self.store = store
        self.hasher = hasher
        self.codec = codec
        self.guard = UniquenessGuard(store)

    async def _hash(self, password: str, message: str) -> str:
        try:
            return await asyncio.to_thread(self.hasher.hash, password)
        except (OSError, ValueError) as e:
            logger.error("password_hash_failed", error=str(e))
            raise InternalError(message) from e

    async def _verify(self, password_hash: str, password: str) -> bool:
        return await asyncio.to_thread(self.hasher.verify, password_hash, password)

    async def _has_account(self, baid: int) -> bool:
        try:
            return await self.store.get_username_by_baid(baid) is not None
        except IdentityStoreError as e:
            logger.error("username_lookup_failed", baid=baid, error=str(e))
            raise InternalError("Error getting user") from e

    async def register(self, username: str, password: str, access_code: str) -> None:
        """Create an account linking ``username`` to the access code's Baid.

        No session is issued; the client logs in afterwards.

        Raises:
            InputInvalidError: Missing fields or username too long
            NotFoundError: Unknown access code
            ConflictError: Username taken or Baid already linked (400)
            InternalError: Store or hashing failure
        """
        if not username or not password or not access_code:
            raise InputInvalidError(INVALID_FORM)
        if len(username) > USERNAME_MAX_LENGTH:
            raise InputInvalidError(USERNAME_LENGTH_MESSAGE)

        try:
            baid = await self.store.get_baid_from_access_code(access_code)
        except IdentityStoreError as e:
            logger.error("access_code_lookup_failed", error=str(e))
            raise InternalError("Error getting access code") from e
        if baid is None:
            raise NotFoundError("Access code not found")

        try:
            kind = await self.guard.check_registration(username, baid)
        except IdentityStoreError as e:
            logger.error("uniqueness_check_failed", error=str(e))
            raise InternalError("Error checking if user is unique") from e
        if kind != ConflictKind.NONE:
            logger.info("registration_conflict", username=username, baid=baid, conflict=kind.value)
            raise _registration_conflict(kind)

        password_hash = await self._hash(password, "Error hashing password")
        user = AuthUser(username=username, baid=baid, password_hash=password_hash)

        try:
            await self.store.insert_auth_user(user)
        except DuplicateAuthUserError as e:
            # Lost a race with a concurrent registration
            logger.info("registration_conflict", username=username, baid=baid, conflict=e.kind.value)
            raise _registration_conflict(e.kind) from e
        except IdentityStoreError as e:
            logger.error("auth_user_insert_failed", error=str(e))
            raise InternalError("Error inserting user") from e

        logger.info("user_registered", username=username, baid=baid)

    async def login(
        self,
        username: str,
        password: str,
        session_baid: Optional[int] = None,
    ) -> LoginResult:
        """Verify credentials and mint a session token.

        Args:
            username: Account username
            password: Plain-text password
            session_baid: Baid from a valid session cookie on the request, if any

        Returns:
            LoginResult with the client projection, token and cookie expiry

        Raises:
            InputInvalidError: Already logged in, or missing fields
            AuthFailureError: Unknown user or wrong password (same message)
            InternalError: Store failure
        """
        if session_baid is not None and await self._has_account(session_baid):
            raise InputInvalidError("User already logged in")
        if not username or not password:
            logger.info("login_invalid_form", username=username)
            raise InputInvalidError(INVALID_FORM)

        try:
            user = await self.store.get_auth_user_by_username(username)
        except IdentityStoreError as e:
            logger.error("auth_user_lookup_failed", error=str(e))
            raise InternalError("Error getting user") from e

        if user is None or not await self._verify(user.password_hash, password):
            logger.info("login_failed", username=username)
            raise AuthFailureError(BAD_CREDENTIALS_MESSAGE)

        now = datetime.now(timezone.utc)
        try:
            token = self.codec.mint(user.baid, now=now)
        except (TypeError, ValueError) as e:
            logger.error("session_token_mint_failed", error=str(e))
            raise InternalError("Error creating token") from e

        logger.info("user_logged_in", username=user.username, baid=user.baid)
        return LoginResult(
            user=user.to_simple(),
            token=token,
            expires_at=now + self.codec.ttl,
        )

    async def session(self, baid: int) -> SimpleAuthUser:
        """Describe the account behind an authenticated session.

        Raises:
            AuthFailureError: The Baid no longer has an account
            InternalError: Store failure
        """
        try:
            username = await self.store.get_username_by_baid(baid)
        except IdentityStoreError as e:
            logger.error("username_lookup_failed", baid=baid, error=str(e))
            raise InternalError("Error getting user") from e

        if username is None:
            logger.warning("session_without_account", baid=baid)
            raise AuthFailureError(UNAUTHORIZED_MESSAGE)

        return SimpleAuthUser(username=username, baid=baid)

    async def change_username(self, baid: int, new_username: str) -> None:
        """Rename the account linked to ``baid``.

        Raises:
            InputInvalidError: Username not 1-20 chars
            ConflictError: Username already in use (409)
            InternalError: Store failure
        """
        if not 1 <= len(new_username) <= USERNAME_MAX_LENGTH:
            raise InputInvalidError(USERNAME_LENGTH_MESSAGE)

        try:
            available = await self.guard.is_username_available(new_username)
        except IdentityStoreError as e:
            logger.error("uniqueness_check_failed", error=str(e))
            raise InternalError("Error checking if username is unique") from e
        if not available:
            raise ConflictError("Username already in use", ConflictKind.USERNAME_TAKEN)

        try:
            await self.store.change_username(baid, new_username)
        except DuplicateAuthUserError as e:
            raise ConflictError("Username already in use", e.kind) from e
        except IdentityStoreError as e:
            logger.error("change_username_failed", baid=baid, error=str(e))
            raise InternalError("Error changing username") from e

    async def change_password(
        self, baid: int, current_password: str, new_password: str
    ) -> None:
        """Replace the password of the account linked to ``baid``.

        The current password is checked before the new one is validated.

        Raises:
            AuthFailureError: Current password is wrong
            InputInvalidError: New password not 8-100 chars
            InternalError: No stored hash, store or hashing failure
        """
        try:
            password_hash = await self.store.get_password_hash_by_baid(baid)
        except IdentityStoreError as e:
            logger.error("password_hash_lookup_failed", baid=baid, error=str(e))
            raise InternalError("Error checking password") from e
        if password_hash is None:
            logger.error("password_hash_missing", baid=baid)
            raise InternalError("Error checking password")

        if not await self._verify(password_hash, current_password):
            logger.info("change_password_rejected", baid=baid)
            raise AuthFailureError("Password is incorrect")

        if not _password_length_ok(new_password):
            raise InputInvalidError("New password must be between 8 and 100 characters")

        new_hash = await self._hash(new_password, "Error hashing new password")

        try:
            await self.store.change_password(baid, new_hash)
        except IdentityStoreError as e:
            logger.error("change_password_failed", baid=baid, error=str(e))
            raise InternalError("Error changing password") from e
