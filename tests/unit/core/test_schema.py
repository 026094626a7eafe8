"""Tests for schema creation across SQL dialects."""

from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine, inspect
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.schema import CreateTable

from src.usermgr.core.errors import ConfigurationError
from src.usermgr.core.services.database.db_manage import ensure_schema
from src.usermgr.core.services.database.db_utils import (
    DbDialect,
    dialect_from_url,
    get_dialect,
)
from src.usermgr.entities.binding import binding_table
from src.usermgr.entities.email_user import EmailUserTable


class TestEnsureSchema:
    def test_creates_tables(self, engine):
        tables = set(inspect(engine).get_table_names())
        assert {"EmailUser", "Binding"} <= tables

    def test_idempotent(self, engine):
        assert ensure_schema(engine) is DbDialect.SQLITE
        assert ensure_schema(engine) is DbDialect.SQLITE
        assert {"EmailUser", "Binding"} <= set(inspect(engine).get_table_names())

    def test_email_user_columns(self, engine):
        columns = {c["name"]: c for c in inspect(engine).get_columns("EmailUser")}
        assert set(columns) == {"id", "email", "passwd", "is_staff", "is_active", "ctime"}
        assert columns["is_staff"]["nullable"] is False
        assert columns["is_active"]["nullable"] is False

    def test_email_is_unique(self, engine):
        indexes = inspect(engine).get_indexes("EmailUser")
        assert any(ix["column_names"] == ["email"] and ix["unique"] for ix in indexes)

    def test_binding_columns_independently_unique(self, engine):
        indexes = inspect(engine).get_indexes("Binding")
        unique_columns = {tuple(ix["column_names"]) for ix in indexes if ix["unique"]}
        assert unique_columns == {("email",), ("peer_id",)}

    def test_binding_rejects_duplicate_peer(self, engine):
        with engine.begin() as conn:
            conn.execute(binding_table.insert().values(email="a@x.com", peer_id="p1"))

        with pytest.raises(IntegrityError):
            with engine.begin() as conn:
                conn.execute(binding_table.insert().values(email="b@x.com", peer_id="p1"))

    def test_unsupported_dialect(self):
        fake_engine = SimpleNamespace(dialect=SimpleNamespace(name="oracle"))
        with pytest.raises(ConfigurationError, match="oracle"):
            ensure_schema(fake_engine)

    def test_failing_statement_is_configuration_error(self, tmp_path):
        """A read-only database file cannot be initialized."""
        db_file = tmp_path / "users.db"
        db_file.touch()
        engine = create_engine(f"sqlite:///file:{db_file}?mode=ro&uri=true")
        try:
            with pytest.raises(ConfigurationError):
                ensure_schema(engine)
        finally:
            engine.dispose()


class TestDialectDdl:
    """The logical schema is the same; types and auto-increment vary."""

    @staticmethod
    def _ddl(table, dialect) -> str:
        return str(CreateTable(table).compile(dialect=dialect)).upper()

    def test_sqlite(self):
        ddl = self._ddl(EmailUserTable.__table__, sqlite.dialect())
        assert "AUTOINCREMENT" in ddl
        assert "EMAIL TEXT" in ddl
        assert "PASSWD TEXT" in ddl

    def test_mysql(self):
        ddl = self._ddl(EmailUserTable.__table__, mysql.dialect())
        assert "AUTO_INCREMENT" in ddl
        assert "VARCHAR(255)" in ddl
        assert "CHAR(41)" in ddl
        assert "ENGINE=INNODB" in ddl

    def test_postgresql(self):
        ddl = self._ddl(EmailUserTable.__table__, postgresql.dialect())
        assert "SERIAL" in ddl
        assert "VARCHAR(255)" in ddl
        assert "CHAR(41)" in ddl

    def test_binding_on_mysql(self):
        ddl = self._ddl(binding_table, mysql.dialect())
        assert "CHAR(41)" in ddl
        assert "ENGINE=INNODB" in ddl


class TestDialectResolution:
    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("sqlite://", DbDialect.SQLITE),
            ("sqlite:////var/lib/ccnet/user.db", DbDialect.SQLITE),
            ("mysql+pymysql://ccnet@db/ccnet", DbDialect.MYSQL),
            ("mariadb+pymysql://ccnet@db/ccnet", DbDialect.MYSQL),
            ("postgresql://ccnet@db/ccnet", DbDialect.POSTGRESQL),
            ("postgresql+psycopg2://ccnet@db/ccnet", DbDialect.POSTGRESQL),
        ],
    )
    def test_supported(self, url, expected):
        assert dialect_from_url(url) is expected

    def test_unsupported(self):
        with pytest.raises(ConfigurationError, match="Unsupported database type"):
            dialect_from_url("oracle://scott@db/orcl")

    def test_invalid_url(self):
        with pytest.raises(ConfigurationError):
            dialect_from_url("not a url")

    def test_engine_dialect(self, engine):
        assert get_dialect(engine) is DbDialect.SQLITE
