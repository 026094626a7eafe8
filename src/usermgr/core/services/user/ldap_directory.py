"""Read-only user lookups against an LDAP directory."""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from ldap3 import NONE, SUBTREE, Connection, Server
from ldap3.core.exceptions import LDAPException
from ldap3.utils.conv import escape_filter_chars
from loguru import logger

from src.usermgr.core.errors import ConfigurationError
from src.usermgr.entities.email_user import DIRECTORY_USER_ID, EmailUser
from src.usermgr.runtime.config.config_data import LdapConfig

WILDCARD = "*"

ConnectionFactory = Callable[[str | None, str | None], Any]


class DirectoryError(Exception):
    """A bind or search against the directory failed."""


def entry_to_user(email: str) -> EmailUser:
    """Build the identity record for a directory entry.

    The directory exposes neither a numeric id, a creation time nor staff
    status through this lookup, so those are fixed here.
    """
    return EmailUser(
        id=DIRECTORY_USER_ID,
        email=email,
        is_staff=False,
        is_active=True,
        ctime=0,
    )


class LdapDirectory:
    """Resolves users from an LDAP directory.

    Every call opens its own connection, binds with the configured service
    account (anonymously when no ``user_dn`` is set), searches and unbinds.
    Nothing is cached between calls.
    """

    def __init__(self, config: LdapConfig, connection_factory: ConnectionFactory | None = None):
        if not config.enabled:
            raise ConfigurationError("LDAP host is not configured")
        self._config = config
        self._connection_factory = connection_factory or self._open_connection

    @property
    def login_attr(self) -> str:
        return self._config.login_attr

    def _open_connection(self, user_dn: str | None, password: str | None) -> Connection:
        server = Server(self._config.host, get_info=NONE)
        return Connection(
            server,
            user=user_dn,
            password=password,
            version=3,
            read_only=True,
            raise_exceptions=False,
        )

    @contextmanager
    def _bound(self, user_dn: str | None, password: str | None) -> Iterator[Any]:
        """Open and bind a connection, unbinding it on exit."""
        try:
            conn = self._connection_factory(user_dn, password)
        except LDAPException as e:
            raise DirectoryError(f"ldap initialize failed: {e}") from e

        try:
            bound = conn.bind()
        except LDAPException as e:
            _unbind(conn)
            raise DirectoryError(f"ldap bind failed: {e}") from e
        if not bound:
            _unbind(conn)
            raise DirectoryError(f"ldap bind failed: {_describe(conn)}")

        try:
            yield conn
        finally:
            _unbind(conn)

    def _service_bind(self):
        return self._bound(self._config.user_dn or None, self._config.password or None)

    def _build_filter(self, value: str, wildcard: bool = False) -> str:
        """Equality filter on the login attribute.

        Only enumeration passes ``wildcard=True``; logins and single-user
        lookups are always escaped so a literal ``*`` matches nobody.
        """
        if not (wildcard and value == WILDCARD):
            value = escape_filter_chars(value)
        return f"({self._config.login_attr}={value})"

    def _search(self, conn: Any, value: str, wildcard: bool = False) -> list[dict[str, Any]]:
        """Search the configured base for entries whose login attribute matches."""
        try:
            conn.search(
                search_base=self._config.base,
                search_filter=self._build_filter(value, wildcard),
                search_scope=SUBTREE,
                attributes=[self._config.login_attr],
            )
        except LDAPException as e:
            raise DirectoryError(f"ldap search failed: {e}") from e

        result = conn.result or {}
        if result.get("result", 0) != 0:
            raise DirectoryError(f"ldap search failed: {_describe(conn)}")

        return [
            entry
            for entry in (conn.response or [])
            if entry.get("type", "searchResEntry") == "searchResEntry"
        ]

    def _login_value(self, entry: dict[str, Any]) -> str | None:
        values = entry.get("attributes", {}).get(self._config.login_attr)
        if isinstance(values, (list, tuple)):
            return str(values[0]) if values else None
        return str(values) if values is not None else None

    def validate(self, login: str, password: str) -> bool:
        """Check a password by binding as the entry found for ``login``.

        Every failure (unknown login, rejected bind, unreachable directory)
        returns False; the cause only goes to the log.
        """
        if not password:
            logger.warning("Password check for {} failed: empty password", login)
            return False

        try:
            with self._service_bind() as conn:
                entries = self._search(conn, login)
            if not entries:
                logger.warning("user with uid {} not found in LDAP", login)
                return False

            dn = entries[0]["dn"]
            with self._bound(dn, password):
                pass
        except DirectoryError as e:
            logger.warning("Password check for {} failed: {}", login, e)
            return False

        return True

    def _lookup(self, value: str, wildcard: bool) -> list[EmailUser]:
        try:
            with self._service_bind() as conn:
                entries = self._search(conn, value, wildcard)
        except DirectoryError as e:
            logger.warning("{}", e)
            return []

        users = []
        for entry in entries:
            email = self._login_value(entry)
            if email is None:
                logger.debug("Skipping entry {} without {}", entry.get("dn"), self.login_attr)
                continue
            users.append(entry_to_user(email))
        return users

    def list_users(self, pattern: str = WILDCARD) -> list[EmailUser]:
        """Return users whose login attribute matches ``pattern``; ``*`` lists all.

        A directory failure yields an empty list.
        """
        return self._lookup(pattern, wildcard=True)

    def find_user(self, login: str) -> EmailUser | None:
        """First entry whose login attribute equals ``login``, matched literally."""
        users = self._lookup(login, wildcard=False)
        return users[0] if users else None

    def count_users(self, pattern: str = WILDCARD) -> int:
        """Number of entries matching ``pattern``, or -1 if the directory failed."""
        try:
            with self._service_bind() as conn:
                return len(self._search(conn, pattern, wildcard=True))
        except DirectoryError as e:
            logger.warning("{}", e)
            return -1


def _describe(conn: Any) -> str:
    result = getattr(conn, "result", None) or {}
    return str(result.get("description") or result.get("message") or "unknown error")


def _unbind(conn: Any) -> None:
    try:
        conn.unbind()
    except LDAPException as e:
        logger.debug("ldap unbind failed: {}", e)
