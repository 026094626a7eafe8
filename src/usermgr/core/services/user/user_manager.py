"""Single entry point for resolving and authenticating users."""

from loguru import logger
from sqlalchemy.engine import Engine

from src.usermgr.core.services.database.db_manage import ensure_schema
from src.usermgr.core.services.database.db_session import DbSessionService
from src.usermgr.core.services.user.ldap_directory import WILDCARD, LdapDirectory
from src.usermgr.core.services.user.local_store import LIST_ALL, LocalUserStore, page_bounds
from src.usermgr.entities.email_user import EmailUser
from src.usermgr.runtime.config.config_data import ConfigData


class UserManager:
    """Routes user operations to the local store or the LDAP directory.

    The mode is fixed at construction: without a directory every call goes
    to the local store. With a directory, existence and passwords come from
    LDAP and the local table only holds staff overrides:

    - add/remove are accepted and ignored
    - update is written locally only when it grants staff
    - validate and get_user_by_email consult the local staff row first
    - get_user_by_id finds nothing, since directory users have no local id
    - list/count enumerate the directory
    """

    def __init__(self, local_store: LocalUserStore, directory: LdapDirectory | None = None):
        self._local = local_store
        self._directory = directory

    @classmethod
    def from_config(cls, config: ConfigData, engine: Engine | None = None) -> "UserManager":
        """Build a manager from configuration and ensure the user tables exist.

        Args:
            config: Resolved application configuration
            engine: Engine shared by the host process; SQLite deployments
                normally leave this unset and get a private database file

        Raises:
            ConfigurationError: If the database cannot be opened or initialized
        """
        db = DbSessionService(engine) if engine is not None else DbSessionService.from_config(config)
        ensure_schema(db.engine)

        directory = None
        if config.ldap.enabled:
            logger.info(
                "Resolving users from LDAP {} (base {}, login attribute {})",
                config.ldap.host,
                config.ldap.base,
                config.ldap.login_attr,
            )
            directory = LdapDirectory(config.ldap)

        return cls(LocalUserStore(db), directory)

    @property
    def use_directory(self) -> bool:
        return self._directory is not None

    @property
    def local_store(self) -> LocalUserStore:
        return self._local

    def add_user(self, email: str, password: str, is_staff: bool = False, is_active: bool = True) -> None:
        """Create a local user.

        Raises:
            UserAlreadyExistsError: If the email is already stored locally
        """
        if self._directory is not None:
            return
        self._local.add(email, password, is_staff=is_staff, is_active=is_active)

    def remove_user(self, email: str) -> None:
        if self._directory is not None:
            return
        self._local.remove(email)

    def validate_user(self, email: str, password: str) -> bool:
        """Return True when the password is correct for ``email``.

        The result never tells apart an unknown user, a wrong password or an
        unreachable directory.
        """
        if self._directory is None:
            return self._local.validate(email, password)

        override = self._local.get_by_email_and_password(email, password)
        if override is not None and override.is_staff:
            return True
        return self._directory.validate(email, password)

    def get_user_by_email(self, email: str) -> EmailUser | None:
        if self._directory is None:
            return self._local.get_by_email(email)

        override = self._local.get_by_email(email)
        if override is not None and override.is_staff:
            return override

        return self._directory.find_user(email)

    def get_user_by_id(self, user_id: int) -> EmailUser | None:
        if self._directory is not None:
            return None
        return self._local.get_by_id(user_id)

    def list_users(self, start: int = LIST_ALL, limit: int = LIST_ALL) -> list[EmailUser]:
        """Return a page of users; ``(-1, -1)`` returns all of them."""
        if self._directory is None:
            return self._local.list(start, limit)

        users = self._directory.list_users(WILDCARD)
        offset, row_limit = page_bounds(start, limit)
        if row_limit is None:
            return users[offset:]
        return users[offset : offset + row_limit]

    def count_users(self) -> int:
        """Total number of users; -1 when the directory could not be queried."""
        if self._directory is None:
            return self._local.count()
        return self._directory.count_users(WILDCARD)

    def update_user(self, user_id: int, password: str, is_staff: bool, is_active: bool) -> None:
        """Rewrite password and flags of a local user; unknown ids are ignored."""
        if self._directory is not None and not is_staff:
            return
        self._local.update(user_id, password, is_staff=is_staff, is_active=is_active)
