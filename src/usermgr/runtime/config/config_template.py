"""Configuration template substitution utilities."""

import os
import re
from pathlib import Path

import yaml
from loguru import logger
from pydantic import ValidationError

from src.usermgr.core.errors import ConfigurationError
from src.usermgr.runtime.config.config_data import ConfigData

ENVIRONMENT_VARIABLE = "USERMGR_ENVIRONMENT"


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variable placeholders in text.

    Supports formats:
    - ${VAR_NAME} - required variable (raises error if missing)
    - ${VAR_NAME:-default} - optional with default value
    - ${VAR_NAME:?error_message} - required with custom error message
    """
    def replacer(match):
        var_expr = match.group(1)

        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name, default)

        elif ":?" in var_expr:
            var_name, error_msg = var_expr.split(":?", 1)
            value = os.getenv(var_name)
            if value is None:
                raise ConfigurationError(f"Required environment variable {var_name}: {error_msg}")
            return value

        else:
            value = os.getenv(var_expr)
            if value is None:
                raise ConfigurationError(f"Required environment variable {var_expr} not set")
            return value

    return re.sub(r"\$\{([^}]+)\}", replacer, text)


def _environment_overrides(env_mode: str) -> dict[str, str]:
    """Map ``<ENV>_NAME`` variables to ``NAME`` for the active environment."""
    prefix = f"{env_mode.upper()}_"
    return {
        var[len(prefix):]: value
        for var, value in os.environ.items()
        if var.startswith(prefix) and len(var) > len(prefix)
    }


def load_templated_yaml(file_path: Path) -> ConfigData:
    """
    Load a YAML file with environment variable substitution.

    Args:
        file_path: Path to the YAML file

    Returns:
        Validated configuration

    Raises:
        ConfigurationError: If the file cannot be read, a required environment
            variable is missing, or the content does not validate
    """
    try:
        content = file_path.read_text()
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file {file_path}: {e}") from e

    env_mode = os.getenv(ENVIRONMENT_VARIABLE, "development")
    logger.info("Loading configuration for environment: {}", env_mode)

    overrides = _environment_overrides(env_mode)
    if overrides:
        logger.debug("Applying environment-specific overrides: {}", sorted(overrides))
    for var_name, var_value in overrides.items():
        os.environ[var_name] = var_value

    substituted_content = substitute_env_vars(content)

    try:
        loaded = yaml.safe_load(substituted_content) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error parsing YAML: {e}") from e

    if not isinstance(loaded, dict):
        raise ConfigurationError(f"Configuration file {file_path} must contain a mapping")

    try:
        return ConfigData(**(loaded.get("config") or {}))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def load_config(file_path: Path | str | None = None) -> ConfigData:
    """Load configuration from ``file_path``, falling back to defaults when absent."""
    if file_path is None:
        return ConfigData()

    path = Path(file_path)
    if not path.exists():
        logger.warning("Configuration file {} not found, using defaults", path)
        return ConfigData()
    return load_templated_yaml(path)
