"""FastAPI dependencies wiring the auth services together."""

from datetime import timedelta
from functools import lru_cache

from fastapi import Depends, Request

from taiko_webui.config import get_settings
from taiko_webui.exceptions import AuthFailureError
from taiko_webui.services.auth_service import UNAUTHORIZED_MESSAGE, AuthService
from taiko_webui.services.identity_store import IdentityStore
from taiko_webui.services.password_hasher import PasswordHasher
from taiko_webui.services.request_authenticator import RequestAuthenticator, SessionCheck
from taiko_webui.services.session_tokens import SessionTokenCodec


@lru_cache
def get_session_codec() -> SessionTokenCodec:
    """Build the process-wide token codec from the configured secret."""
    settings = get_settings()
    return SessionTokenCodec(
        settings.session_secret,
        ttl=timedelta(days=settings.session_ttl_days),
    )


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=get_settings().bcrypt_rounds)


def get_identity_store() -> IdentityStore:
    return IdentityStore()


def get_request_authenticator(
    codec: SessionTokenCodec = Depends(get_session_codec),
) -> RequestAuthenticator:
    return RequestAuthenticator(codec)


def get_auth_service(
    store: IdentityStore = Depends(get_identity_store),
    hasher: PasswordHasher = Depends(get_password_hasher),
    codec: SessionTokenCodec = Depends(get_session_codec),
) -> AuthService:
    return AuthService(store=store, hasher=hasher, codec=codec)


def read_session(
    request: Request,
    authenticator: RequestAuthenticator = Depends(get_request_authenticator),
) -> SessionCheck:
    """Check the session cookie without rejecting the request."""
    return authenticator.authenticate(request.cookies)


def require_session_baid(
    check: SessionCheck = Depends(read_session),
) -> int:
    """Return the Baid of the logged-in account.

    This is the single place a failed session check becomes a response.

    Raises:
        AuthFailureError: Cookie missing, invalid or expired (401)
    """
    if not check.authenticated:
        raise AuthFailureError(UNAUTHORIZED_MESSAGE)
    return check.baid
