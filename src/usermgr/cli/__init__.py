"""Main CLI application module."""

from pathlib import Path

import typer

from src.usermgr.core.errors import ConfigurationError, UserManagerError
from src.usermgr.core.services.database.db_manage import ensure_schema
from src.usermgr.core.services.database.db_session import DbSessionService
from src.usermgr.runtime.config.config_template import load_config
from src.usermgr.runtime.logging import configure_logging

from .user_commands import users_app
from .utils import console, get_config

# Create the main CLI application
app = typer.Typer(
    help="User store administration",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Register command groups
app.add_typer(users_app, name="users")


@app.callback()
def load_settings(
    ctx: typer.Context,
    config_path: Path = typer.Option(
        Path("config.yaml"), "--config", "-c", help="Path to config.yaml"
    ),
) -> None:
    """Load configuration and set up logging for every command."""
    try:
        config = load_config(config_path)
    except ConfigurationError as e:
        console.print(f"[red]❌ Configuration error: {e}[/red]")
        raise typer.Exit(code=1) from e

    configure_logging(config)
    ctx.obj = config


@app.command("init-db")
def init_db(ctx: typer.Context) -> None:
    """Create the user tables if they do not exist."""
    try:
        db = DbSessionService.from_config(get_config(ctx))
        dialect = ensure_schema(db.engine)
    except UserManagerError as e:
        console.print(f"[red]❌ Failed to initialize user database: {e}[/red]")
        raise typer.Exit(code=1) from e

    db.dispose()
    console.print(f"[green]✅ User tables ready ({dialect.value})[/green]")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
