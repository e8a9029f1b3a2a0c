"""Domain errors raised by the auth service.

Every error carries the HTTP status it maps to and a message that is safe to
show to the client. ``taiko_webui.main`` renders them in one exception
handler, so routes and services never build error responses themselves.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from taiko_webui.services.uniqueness_guard import ConflictKind


class AuthError(Exception):
    """Base exception for account authentication failures."""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class InputInvalidError(AuthError):
    """Missing, malformed or out-of-range request fields."""

    status_code = 400


class NotFoundError(AuthError):
    """A referenced external record (e.g. an access code) does not exist."""

    status_code = 400


class ConflictError(AuthError):
    """Username or Baid is already bound to another account."""

    status_code = 409

    def __init__(self, message: str, kind: "ConflictKind", status_code: Optional[int] = None):
        self.kind = kind
        super().__init__(message, status_code=status_code)


class AuthFailureError(AuthError):
    """Wrong credentials or a missing, invalid or expired session."""

    status_code = 401


class InternalError(AuthError):
    """Store or hashing failure. Details are logged, never returned."""

    status_code = 500
