"""User management CLI commands."""

import datetime

import typer
from rich.prompt import Confirm
from rich.table import Table

from src.usermgr.core.errors import UserAlreadyExistsError, UserManagerError
from src.usermgr.entities.email_user import EmailUser

from .utils import console, get_user_manager

# Create the users subcommand app
users_app = typer.Typer(help="Manage users of the local store or directory", no_args_is_help=True)


def _format_ctime(ctime: int) -> str:
    if not ctime:
        return "-"
    return datetime.datetime.fromtimestamp(ctime, tz=datetime.UTC).strftime("%Y-%m-%d %H:%M:%S")


def _users_table(users: list[EmailUser], title: str) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="cyan")
    table.add_column("Email", style="blue")
    table.add_column("Staff", style="magenta")
    table.add_column("Active", style="yellow")
    table.add_column("Created", style="green")

    for user in users:
        table.add_row(
            str(user.id),
            user.email,
            "✅" if user.is_staff else "❌",
            "✅" if user.is_active else "❌",
            _format_ctime(user.ctime),
        )
    return table


@users_app.command("add")
def add_user(
    ctx: typer.Context,
    email: str = typer.Argument(..., help="Email address of the new user"),
    password: str = typer.Option(..., "--password", "-p", prompt=True, hide_input=True, help="Password"),
    staff: bool = typer.Option(False, "--staff", help="Grant administrative rights"),
    active: bool = typer.Option(True, "--active/--inactive", help="Enable the user"),
) -> None:
    """Add a user to the local store."""
    manager = get_user_manager(ctx)
    if manager.use_directory:
        console.print("[yellow]Users come from LDAP; nothing was added locally[/yellow]")
        return

    try:
        manager.add_user(email, password, is_staff=staff, is_active=active)
    except UserAlreadyExistsError as e:
        console.print(f"[red]❌ User '{email}' already exists[/red]")
        raise typer.Exit(code=1) from e
    except UserManagerError as e:
        console.print(f"[red]❌ Failed to create user: {e}[/red]")
        raise typer.Exit(code=1) from e

    console.print(f"[green]✅ Successfully created user '{email}'[/green]")


@users_app.command("remove")
def remove_user(
    ctx: typer.Context,
    email: str = typer.Argument(..., help="Email address of the user to remove"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation prompt"),
) -> None:
    """Remove a user from the local store."""
    if not force and not Confirm.ask(f"Are you sure you want to delete user '{email}'?"):
        console.print("[yellow]Deletion cancelled[/yellow]")
        return

    manager = get_user_manager(ctx)
    if manager.use_directory:
        console.print("[yellow]Users come from LDAP; nothing was removed locally[/yellow]")
        return

    try:
        manager.remove_user(email)
    except UserManagerError as e:
        console.print(f"[red]❌ Failed to delete user: {e}[/red]")
        raise typer.Exit(code=1) from e

    console.print(f"[green]✅ Removed user '{email}'[/green]")


@users_app.command("list")
def list_users(
    ctx: typer.Context,
    start: int = typer.Option(-1, "--start", "-s", help="Offset of the first user (-1 with --limit -1 lists all)"),
    limit: int = typer.Option(-1, "--limit", "-l", help="Maximum number of users to show"),
) -> None:
    """List users."""
    manager = get_user_manager(ctx)
    try:
        users = manager.list_users(start, limit)
    except UserManagerError as e:
        console.print(f"[red]❌ Failed to list users: {e}[/red]")
        raise typer.Exit(code=1) from e

    if not users:
        console.print("[yellow]No users found[/yellow]")
        return

    console.print(_users_table(users, "Users"))
    console.print(f"\n[green]Found {len(users)} users[/green]")


@users_app.command("count")
def count_users(ctx: typer.Context) -> None:
    """Print the number of users."""
    manager = get_user_manager(ctx)
    try:
        count = manager.count_users()
    except UserManagerError as e:
        console.print(f"[red]❌ Failed to count users: {e}[/red]")
        raise typer.Exit(code=1) from e

    if count < 0:
        console.print("[red]❌ Directory could not be queried[/red]")
        raise typer.Exit(code=1)
    console.print(count)


@users_app.command("show")
def show_user(
    ctx: typer.Context,
    email: str = typer.Argument(..., help="Email address to look up"),
) -> None:
    """Show a single user."""
    manager = get_user_manager(ctx)
    try:
        user = manager.get_user_by_email(email)
    except UserManagerError as e:
        console.print(f"[red]❌ Failed to look up user: {e}[/red]")
        raise typer.Exit(code=1) from e

    if user is None:
        console.print(f"[red]❌ User '{email}' not found[/red]")
        raise typer.Exit(code=1)
    console.print(_users_table([user], f"User '{email}'"))


@users_app.command("validate")
def validate_user(
    ctx: typer.Context,
    email: str = typer.Argument(..., help="Email address to check"),
    password: str = typer.Option(..., "--password", "-p", prompt=True, hide_input=True, help="Password"),
) -> None:
    """Check a user's password."""
    manager = get_user_manager(ctx)
    try:
        valid = manager.validate_user(email, password)
    except UserManagerError as e:
        console.print(f"[red]❌ Failed to validate user: {e}[/red]")
        raise typer.Exit(code=1) from e

    if not valid:
        console.print("[red]❌ Not authorized[/red]")
        raise typer.Exit(code=1)
    console.print("[green]✅ Password accepted[/green]")


@users_app.command("update")
def update_user(
    ctx: typer.Context,
    user_id: int = typer.Argument(..., help="Local id of the user"),
    password: str = typer.Option(..., "--password", "-p", prompt=True, hide_input=True, help="New password"),
    staff: bool = typer.Option(False, "--staff/--no-staff", help="Administrative rights"),
    active: bool = typer.Option(True, "--active/--inactive", help="Enable the user"),
) -> None:
    """Rewrite a user's password and flags."""
    manager = get_user_manager(ctx)
    if manager.use_directory and not staff:
        console.print("[yellow]Users come from LDAP; only staff overrides are stored locally[/yellow]")
        return

    try:
        manager.update_user(user_id, password, is_staff=staff, is_active=active)
    except UserManagerError as e:
        console.print(f"[red]❌ Failed to update user: {e}[/red]")
        raise typer.Exit(code=1) from e

    console.print(f"[green]✅ Updated user {user_id}[/green]")
