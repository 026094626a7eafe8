"""Database engine and session factory used by the user store."""

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from loguru import logger
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, create_engine

from src.usermgr.core.errors import ConfigurationError
from src.usermgr.core.services.database.db_utils import DbDialect, get_dialect
from src.usermgr.runtime.config.config_data import ConfigData

SQLITE_DIR_NAME = "PeerMgr"
SQLITE_FILE_NAME = "usermgr.db"


def sqlite_db_path(config: ConfigData) -> Path:
    """Location of the private SQLite user database."""
    return config.app.config_path / SQLITE_DIR_NAME / SQLITE_FILE_NAME


def _get_connect_args(dialect: DbDialect, config: ConfigData) -> dict[str, Any]:
    """Get database-specific connection arguments."""
    if dialect is DbDialect.POSTGRESQL:
        return {
            "application_name": f"{config.app.environment}_usermgr",
            "connect_timeout": 30,
        }
    if dialect is DbDialect.SQLITE:
        return {"timeout": 20}
    return {}


def create_user_db_engine(config: ConfigData) -> Engine:
    """Create the engine backing the user store.

    SQLite gets a private file under ``<config_dir>/PeerMgr``; MySQL and
    PostgreSQL connect with the configured URL and pool settings.
    """
    db_config = config.database
    dialect = db_config.dialect
    connect_args = _get_connect_args(dialect, config)

    if dialect is DbDialect.SQLITE:
        db_path = sqlite_db_path(config)
        try:
            db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("Cannot open db dir {}: {}", db_path.parent, e)
            raise ConfigurationError(f"Cannot open db dir {db_path.parent}: {e}") from e

        logger.info("Opening SQLite user database at {}", db_path)
        return create_engine(
            f"sqlite:///{db_path}", connect_args=connect_args, hide_parameters=True
        )

    logger.info("Configuring {} engine for the user database", dialect.value)
    try:
        connection_string = db_config.connection_string
    except ValueError as e:
        raise ConfigurationError(str(e)) from e
    return create_engine(
        connection_string,
        pool_size=db_config.pool_size,
        max_overflow=db_config.max_overflow,
        pool_timeout=db_config.pool_timeout,
        pool_recycle=db_config.pool_recycle,
        pool_pre_ping=True,
        hide_parameters=True,
        connect_args=connect_args,
    )


class DbSessionService:
    """Owns the engine handle and hands out transactional sessions.

    For SQLite the engine is private to the user store; for client/server
    databases it may be an engine shared with the rest of the process.
    """

    def __init__(self, engine: Engine):
        self._engine = engine
        self._dialect = get_dialect(engine)

    @classmethod
    def from_config(cls, config: ConfigData) -> "DbSessionService":
        return cls(create_user_db_engine(config))

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def dialect(self) -> DbDialect:
        return self._dialect

    def get_session(self) -> Session:
        """Return a new SQLModel session bound to the engine."""
        return Session(self._engine, expire_on_commit=False)

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Context manager style helper for repositories and tests."""
        db = self.get_session()
        try:
            yield db
            db.commit()
        except Exception as e:
            db.rollback()
            if isinstance(e, SQLAlchemyError) and not isinstance(e, IntegrityError):
                logger.error(
                    "Database transaction failed: {}: {}", type(e).__name__, e
                )
            raise
        finally:
            db.close()

    def health_check(self) -> bool:
        """Perform a health check on the database connection."""
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
                return True
        except SQLAlchemyError as e:
            logger.error("Database health check failed: {}", e)
            return False

    def dispose(self) -> None:
        self._engine.dispose()
