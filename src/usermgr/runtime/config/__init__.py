from .config_data import AppConfig, ConfigData, DatabaseConfig, LdapConfig, LoggingConfig
from .config_template import load_config

__all__ = [
    "AppConfig",
    "ConfigData",
    "DatabaseConfig",
    "LdapConfig",
    "LoggingConfig",
    "load_config",
]
