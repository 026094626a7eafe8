"""Error kinds raised by the user management layer.

Not-found lookups return ``None`` and failed credential checks return
``False``; only conditions the caller cannot treat as a normal outcome are
raised.
"""


class UserManagerError(Exception):
    """Base class for all user management errors."""


class ConfigurationError(UserManagerError):
    """Startup configuration is missing, invalid or cannot be applied."""


class UserAlreadyExistsError(UserManagerError):
    """A user with the same email already exists in the local store."""

    def __init__(self, email: str):
        super().__init__(f"User '{email}' already exists")
        self.email = email


class BackendUnavailableError(UserManagerError):
    """The user database could not complete the operation."""
