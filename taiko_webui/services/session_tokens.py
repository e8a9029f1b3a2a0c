"""Signed session tokens carrying an arcade Baid."""

import math
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
import structlog

logger = structlog.get_logger(__name__)

# Constants
JWT_ALGORITHM = "HS256"
ALLOWED_ALGORITHMS = ["HS256", "HS384", "HS512"]
SESSION_TOKEN_EXPIRE_DAYS = 30


class SessionTokenError(Exception):
    """A session token could not be accepted."""


class SessionTokenInvalidError(SessionTokenError):
    """Malformed token, bad signature, disallowed algorithm or bad claims."""


class SessionTokenExpiredError(SessionTokenError):
    """Well-formed and correctly signed, but past its ``exp``."""


class SessionTokenCodec:
    """Mints and verifies HMAC-signed JWTs of the form ``{sub: baid, exp}``.

    The signing secret is bound at construction and never changes for the
    lifetime of the codec.
    """

    def __init__(
        self,
        secret: str,
        ttl: timedelta = timedelta(days=SESSION_TOKEN_EXPIRE_DAYS),
        algorithm: str = JWT_ALGORITHM,
    ):
        if not secret:
            raise ValueError("Session secret must not be empty")
        if algorithm not in ALLOWED_ALGORITHMS:
            raise ValueError(f"Unsupported session token algorithm: {algorithm}")
        self._secret = secret
        self.ttl = ttl
        self.algorithm = algorithm

    def mint(
        self,
        baid: int,
        ttl: Optional[timedelta] = None,
        now: Optional[datetime] = None,
    ) -> str:
        """Create a signed session token for ``baid``.

        Args:
            baid: Arcade identity placed in the ``sub`` claim as a JSON number
            ttl: Lifetime override; defaults to the codec's ttl
            now: Issue time override (UTC)

        Returns:
            Encoded JWT string
        """
        now = now or datetime.now(timezone.utc)
        expires_at = now + (ttl if ttl is not None else self.ttl)
        payload = {
            "sub": baid,
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(payload, self._secret, algorithm=self.algorithm)
        logger.debug("session_token_minted", baid=baid, expires_at=expires_at.isoformat())
        return token

    def verify(self, token: str) -> int:
        """Decode a session token and return its Baid.

        Only HMAC algorithms are accepted in the header, so ``none`` and
        asymmetric algorithms cannot be used to bypass the signature.

        Args:
            token: Encoded JWT string

        Returns:
            The Baid carried in ``sub``

        Raises:
            SessionTokenExpiredError: If ``exp`` is not in the future
            SessionTokenInvalidError: For every other failure
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=ALLOWED_ALGORITHMS,
                options={"require": ["exp", "sub"], "verify_sub": False},
            )
        except jwt.ExpiredSignatureError:
            raise SessionTokenExpiredError("Session token has expired")
        except jwt.InvalidTokenError as e:
            raise SessionTokenInvalidError(f"Invalid session token: {e}")

        return _baid_from_subject(payload["sub"])


def _baid_from_subject(sub) -> int:
    # JSON numbers may arrive as float; Baids up to 2**53 survive exactly.
    if isinstance(sub, bool) or not isinstance(sub, (int, float)):
        raise SessionTokenInvalidError("Invalid session token: sub is not a number")
    if isinstance(sub, float) and not math.isfinite(sub):
        raise SessionTokenInvalidError("Invalid session token: sub is not finite")
    baid = int(round(sub))
    if baid < 0:
        raise SessionTokenInvalidError("Invalid session token: sub is negative")
    return baid
