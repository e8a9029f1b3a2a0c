"""Session cookie authentication for incoming requests."""

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

import structlog

from taiko_webui.services.session_tokens import (
    SessionTokenCodec,
    SessionTokenExpiredError,
    SessionTokenInvalidError,
)

logger = structlog.get_logger(__name__)

SESSION_COOKIE_NAME = "Authorization"


class SessionFailure(str, Enum):
    """Why a request could not be attributed to a Baid."""

    MISSING = "missing"
    INVALID = "invalid"
    EXPIRED = "expired"


@dataclass(frozen=True)
class SessionCheck:
    """Outcome of authenticating one request: a Baid or a failure reason."""

    baid: Optional[int] = None
    failure: Optional[SessionFailure] = None

    @property
    def authenticated(self) -> bool:
        return self.failure is None and self.baid is not None


class RequestAuthenticator:
    """Verifies the ``Authorization`` session cookie.

    Never writes a response. Callers decide what a failed check means:
    mutating routes answer 401, login only cares whether a live session
    already exists.
    """

    def __init__(self, codec: SessionTokenCodec):
        self.codec = codec

    def authenticate(self, cookies: Mapping[str, str]) -> SessionCheck:
        """Authenticate a request from its cookies."""
        return self.authenticate_token(cookies.get(SESSION_COOKIE_NAME))

    def authenticate_token(self, token: Optional[str]) -> SessionCheck:
        """Authenticate a raw session cookie value.

        Args:
            token: Cookie value, or None when the cookie was not sent

        Returns:
            SessionCheck with the Baid on success, otherwise the failure
        """
        if not token:
            return SessionCheck(failure=SessionFailure.MISSING)

        try:
            baid = self.codec.verify(token)
        except SessionTokenExpiredError:
            logger.info("session_rejected", reason=SessionFailure.EXPIRED.value)
            return SessionCheck(failure=SessionFailure.EXPIRED)
        except SessionTokenInvalidError as e:
            logger.warning(
                "session_rejected",
                reason=SessionFailure.INVALID.value,
                error=str(e),
            )
            return SessionCheck(failure=SessionFailure.INVALID)

        return SessionCheck(baid=baid)
