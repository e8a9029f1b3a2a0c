"""Services package exports."""

from taiko_webui.services.auth_service import AuthService, LoginResult
from taiko_webui.services.identity_store import (
    DuplicateAuthUserError,
    IdentityStore,
    IdentityStoreError,
)
from taiko_webui.services.logging_service import configure_logging, get_logger
from taiko_webui.services.password_hasher import PasswordHasher
from taiko_webui.services.request_authenticator import (
    RequestAuthenticator,
    SessionCheck,
    SessionFailure,
)
from taiko_webui.services.session_tokens import SessionTokenCodec
from taiko_webui.services.uniqueness_guard import ConflictKind, UniquenessGuard

__all__ = [
    "AuthService",
    "ConflictKind",
    "DuplicateAuthUserError",
    "IdentityStore",
    "IdentityStoreError",
    "LoginResult",
    "PasswordHasher",
    "RequestAuthenticator",
    "SessionCheck",
    "SessionFailure",
    "SessionTokenCodec",
    "UniquenessGuard",
    "configure_logging",
    "get_logger",
]
