from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest
from sqlalchemy import StaticPool
from sqlalchemy.engine import Engine
from sqlmodel import Session, create_engine

from src.usermgr.core.services.database.db_manage import ensure_schema
from src.usermgr.core.services.database.db_session import DbSessionService
from src.usermgr.core.services.user.local_store import LocalUserStore
from src.usermgr.runtime.config.config_data import AppConfig, ConfigData, LoggingConfig


@pytest.fixture
def engine() -> Generator[Engine]:
    """Create a fresh in-memory database with the user tables for each test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    ensure_schema(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session(engine: Engine) -> Generator[Session]:
    """Create a database session for repository-level tests."""
    with Session(engine) as session:
        try:
            yield session
        finally:
            session.rollback()


@pytest.fixture
def db_service(engine: Engine) -> DbSessionService:
    return DbSessionService(engine)


@pytest.fixture
def local_store(db_service: DbSessionService) -> LocalUserStore:
    return LocalUserStore(db_service)


@pytest.fixture
def file_config(tmp_path: Path) -> ConfigData:
    """Configuration whose SQLite user database lives under ``tmp_path``."""
    return ConfigData(
        app=AppConfig(environment="test", config_dir=str(tmp_path)),
        logging=LoggingConfig(level="WARNING"),
    )
