"""SQL dialect resolution shared by configuration and schema management."""

from enum import Enum

from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import ArgumentError

from src.usermgr.core.errors import ConfigurationError


class DbDialect(str, Enum):
    """Relational engines the user store can run on."""

    SQLITE = "sqlite"
    MYSQL = "mysql"
    POSTGRESQL = "postgresql"


# SQLAlchemy backend names accepted for each supported engine
_BACKEND_ALIASES = {
    "sqlite": DbDialect.SQLITE,
    "mysql": DbDialect.MYSQL,
    "mariadb": DbDialect.MYSQL,
    "postgresql": DbDialect.POSTGRESQL,
}


def _from_backend_name(name: str) -> DbDialect:
    try:
        return _BACKEND_ALIASES[name]
    except KeyError:
        raise ConfigurationError(f"Unsupported database type '{name}'") from None


def dialect_from_url(url: str) -> DbDialect:
    """Return the dialect selected by a database URL."""
    try:
        backend = make_url(url).get_backend_name()
    except ArgumentError as e:
        raise ConfigurationError(f"Invalid database URL: {e}") from e
    return _from_backend_name(backend)


def get_dialect(engine: Engine) -> DbDialect:
    """Return the dialect of an existing engine."""
    return _from_backend_name(engine.dialect.name)
