"""Account models."""

from pydantic import BaseModel, Field


class AuthUser(BaseModel):
    """A web UI account bound to an arcade Baid.

    Attributes:
        username: Unique login name (1-20 chars)
        baid: Unique arcade identity the account is linked to
        password_hash: Self-describing bcrypt hash
    """

    username: str = Field(..., min_length=1, max_length=20)
    baid: int = Field(..., ge=0)
    password_hash: str = Field(..., min_length=1)

    def to_simple(self) -> "SimpleAuthUser":
        """Project to the client-facing representation (drops the hash)."""
        return SimpleAuthUser(username=self.username, baid=self.baid)


class SimpleAuthUser(BaseModel):
    """Account as returned to clients; never carries the password hash."""

    username: str
    baid: int
