"""EmailUser domain entity."""

from typing import Any

from pydantic import BaseModel, Field

DIRECTORY_USER_ID = 0


class EmailUser(BaseModel):
    """A user identity, sourced from the local store or the directory.

    Directory-sourced users carry ``id == 0``, ``ctime == 0`` and no digest;
    they are rebuilt on every lookup.
    """

    id: int = Field(default=DIRECTORY_USER_ID, description="Local surrogate key")
    email: str = Field(description="User's email address, unique per store")
    passwd: str | None = Field(
        default=None,
        exclude=True,
        repr=False,
        description="Hex digest of the user's password (local users only)",
    )
    is_staff: bool = Field(default=False, description="Administrative user")
    is_active: bool = Field(default=True, description="Whether the account is enabled")
    ctime: int = Field(default=0, description="Creation time, seconds since epoch")

    @property
    def is_local(self) -> bool:
        return self.id != DIRECTORY_USER_ID

    def __eq__(self, other: Any) -> bool:
        """Compare users by identity attributes, ignoring the digest."""
        if not isinstance(other, EmailUser):
            return False

        return (
            self.id == other.id
            and self.email == other.email
            and self.is_staff == other.is_staff
            and self.is_active == other.is_active
            and self.ctime == other.ctime
        )

    def __hash__(self) -> int:
        return hash((self.id, self.email, self.is_staff, self.is_active, self.ctime))
