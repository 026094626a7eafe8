"""Shared utilities for CLI commands."""

import typer
from rich.console import Console

from src.usermgr.core.errors import UserManagerError
from src.usermgr.core.services.user import UserManager
from src.usermgr.runtime.config.config_data import ConfigData

# Initialize Rich console for colored output
console = Console()


def get_config(ctx: typer.Context) -> ConfigData:
    """Configuration loaded by the root command callback."""
    config = ctx.find_root().obj
    if not isinstance(config, ConfigData):
        return ConfigData()
    return config


def get_user_manager(ctx: typer.Context) -> UserManager:
    """Build a user manager for the loaded configuration, exiting on failure."""
    try:
        return UserManager.from_config(get_config(ctx))
    except UserManagerError as e:
        console.print(f"[red]❌ Failed to open user database: {e}[/red]")
        raise typer.Exit(code=1) from e
