"""Pydantic models for parsing the config.yaml configuration file.

This module contains Pydantic models that correspond to the structure of config.yaml.
These models handle validation and type conversion of the YAML configuration data.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from loguru import logger
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)
from sqlalchemy.engine import make_url

from src.usermgr.core.errors import ConfigurationError
from src.usermgr.core.services.database.db_utils import DbDialect, dialect_from_url


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    model_config = ConfigDict(frozen=True)

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="plain", description="Log format")
    file: str | None = Field(default=None, description="Log file path")


class DatabaseConfig(BaseModel):
    """Database configuration model.

    For SQLite only the scheme of ``url`` is used: the user database always
    lives in its own file under the application config directory.
    """

    model_config = ConfigDict(frozen=True)

    url: str = Field(default="sqlite://", description="Database connection URL")
    pool_size: int = Field(default=5, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")
    password_env_var: str | None = Field(
        default=None,
        description="Environment variable name containing database password",
    )
    password_file: str | None = Field(
        default=None,
        description="Path to file containing database password",
    )

    @field_validator("url")
    @classmethod
    def _check_dialect(cls, value: str) -> str:
        try:
            dialect_from_url(value)
        except ConfigurationError as e:
            raise ValueError(str(e)) from e
        return value

    @computed_field
    @property
    def dialect(self) -> DbDialect:
        """SQL dialect selected by the URL scheme."""
        return dialect_from_url(self.url)

    @property
    def password(self) -> str | None:
        """
        Get the database password from the appropriate source.
        1. A password embedded in the URL
        2. The file named by `password_file`
        3. The environment variable named by `password_env_var`
        """
        url_obj = make_url(self.url)
        if url_obj.password:
            return url_obj.password
        if self.password_file:
            try:
                with open(self.password_file) as f:
                    return f.read().strip()
            except OSError as e:
                raise ValueError("Failed to read database password from file.") from e
        if self.password_env_var:
            password = os.getenv(self.password_env_var)
            if password is None:
                raise ValueError(f"Environment variable {self.password_env_var} not set")
            return password
        return None

    @property
    def connection_string(self) -> str:
        """Construct the database connection string with password if provided."""
        base_url = make_url(self.url)
        if base_url.password or self.dialect is DbDialect.SQLITE:
            return self.url

        resolved_password = self.password
        if resolved_password:
            # Render manually to avoid SQLAlchemy's password masking
            return base_url.set(password=resolved_password).render_as_string(
                hide_password=False
            )
        return self.url


class LdapConfig(BaseModel):
    """LDAP directory configuration; a host enables directory mode."""

    model_config = ConfigDict(frozen=True)

    host: str | None = Field(default=None, description="LDAP server URL, e.g. ldap://dc1")
    base: str | None = Field(default=None, description="Search base DN")
    user_dn: str | None = Field(
        default=None, description="Service account DN; anonymous bind when absent"
    )
    password: str | None = Field(default=None, description="Service account password")
    login_attr: str = Field(
        default="mail", description="Attribute matched against the login identifier"
    )

    @model_validator(mode="after")
    def _check_required(self) -> LdapConfig:
        if not self.host:
            return self
        if not self.base:
            raise ValueError("LDAP: BASE not found in config file")
        if self.user_dn and self.password is None:
            raise ValueError("LDAP: PASSWORD not found in config file")
        if not self.user_dn:
            logger.debug("LDAP: no USER_DN configured, using anonymous bind")
        return self

    @computed_field
    @property
    def enabled(self) -> bool:
        """Whether users are resolved from the directory."""
        return bool(self.host)


class AppConfig(BaseModel):
    """Application configuration model."""

    model_config = ConfigDict(frozen=True)

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    config_dir: str = Field(
        default="~/.ccnet", description="Directory holding daemon state files"
    )

    @property
    def config_path(self) -> Path:
        return Path(self.config_dir).expanduser()


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    model_config = ConfigDict(frozen=True)

    app: AppConfig = Field(default_factory=AppConfig, description="Application configuration")
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    ldap: LdapConfig = Field(default_factory=LdapConfig, description="LDAP configuration")
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
