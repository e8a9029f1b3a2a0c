"""Request bodies for authenticated account updates.

Length rules are applied by the auth service, not here, so that clients get
the same messages whichever path rejects the value.
"""

from pydantic import BaseModel, ConfigDict, Field


class UpdateUsernameRequest(BaseModel):
    """New username for the logged-in account."""

    username: str = ""


class UpdatePasswordRequest(BaseModel):
    """Password change for the logged-in account.

    Attributes:
        current_password: Must verify against the stored hash (JSON ``currentPassword``)
        new_password: Replacement password, 8-100 chars (JSON ``newPassword``)
    """

    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(default="", alias="currentPassword")
    new_password: str = Field(default="", alias="newPassword")
