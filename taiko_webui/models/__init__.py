"""Models package exports."""

from taiko_webui.models.auth import UpdatePasswordRequest, UpdateUsernameRequest
from taiko_webui.models.user import AuthUser, SimpleAuthUser

__all__ = [
    "AuthUser",
    "SimpleAuthUser",
    "UpdatePasswordRequest",
    "UpdateUsernameRequest",
]
