"""Schema management for the user store."""

from loguru import logger
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel

from src.usermgr.core.errors import ConfigurationError
from src.usermgr.core.services.database.db_utils import DbDialect, get_dialect
from src.usermgr.entities.binding import binding_table
from src.usermgr.entities.email_user import EmailUserTable

USER_TABLES = (EmailUserTable.__table__, binding_table)


def ensure_schema(engine: Engine) -> DbDialect:
    """Create the ``EmailUser`` and ``Binding`` tables and their indexes if absent.

    Safe to call on every startup. The engine's dialect picks column types
    and auto-increment syntax; the logical schema is identical everywhere.

    Args:
        engine: Engine of the user database

    Returns:
        The dialect the schema was created for

    Raises:
        ConfigurationError: If the dialect is unsupported or any statement fails
    """
    dialect = get_dialect(engine)

    try:
        SQLModel.metadata.create_all(engine, tables=list(USER_TABLES), checkfirst=True)
    except SQLAlchemyError as e:
        logger.error("Failed to create user tables on {}: {}", dialect.value, e)
        raise ConfigurationError(f"Cannot initialize user database: {e}") from e

    logger.info("User tables ready on {}", dialect.value)
    return dialect

