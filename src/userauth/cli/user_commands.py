"""User administration CLI commands."""

import typer
from rich.console import Console
from rich.prompt import Confirm
from rich.table import Table

from src.userauth.core.exceptions import StoreError
from src.userauth.core.result import Err
from src.userauth.core.services import CredentialService, DbSessionService
from src.userauth.core.storage.user_store import UserStore, create_user_store
from src.userauth.entities.user import User, normalize_email
from src.userauth.runtime.context import get_config

console = Console()

# Create the users subcommand app
users_app = typer.Typer(help="Inspect and manage registered users")


def get_user_store() -> UserStore:
    """Open the configured user store."""
    backend = get_config().database.backend
    return create_user_store(backend, DbSessionService() if backend == "sql" else None)


def _find_user(store: UserStore, email: str) -> User:
    try:
        user = store.find_one(email=normalize_email(email))
    except StoreError as e:
        console.print(f"[red]❌ Failed to look up user: {e}[/red]")
        raise typer.Exit(code=1) from e
    if user is None:
        console.print(f"[red]❌ User '{email}' not found[/red]")
        raise typer.Exit(code=1)
    return user


def _flag(value: bool) -> str:
    return "✅" if value else "❌"


@users_app.command("list")
def list_users(
    limit: int = typer.Option(100, "--limit", "-l", help="Maximum number of users to show"),
) -> None:
    """List registered users, oldest first."""
    try:
        users = get_user_store().list_users(limit=limit)
    except StoreError as e:
        console.print(f"[red]❌ Failed to list users: {e}[/red]")
        raise typer.Exit(code=1) from e

    if not users:
        console.print("[yellow]No users found[/yellow]")
        return

    table = Table(title="Users")
    table.add_column("ID", style="cyan")
    table.add_column("Email", style="blue")
    table.add_column("Phone", style="green")
    table.add_column("First Name", style="magenta")
    table.add_column("Last Name", style="magenta")
    table.add_column("Email Verified", style="yellow")
    table.add_column("Phone Verified", style="yellow")

    for user in users:
        table.add_row(
            user.id,
            user.email,
            user.phone,
            user.first_name,
            user.last_name or "",
            _flag(user.email_verified),
            _flag(user.phone_verified),
        )

    console.print(table)
    console.print(f"\n[green]Found {len(users)} users[/green]")


@users_app.command("show")
def show_user(
    email: str = typer.Argument(..., help="Email of the user"),
) -> None:
    """Show detailed information about a user."""
    user = _find_user(get_user_store(), email)

    table = Table(title=f"User Information: {user.email}")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("ID", user.id)
    table.add_row("Email", user.email)
    table.add_row("Phone", user.phone)
    table.add_row("First Name", user.first_name)
    table.add_row("Last Name", user.last_name or "")
    table.add_row("Email Verified", _flag(user.email_verified))
    table.add_row("Phone Verified", _flag(user.phone_verified))
    table.add_row("Active Session", _flag(user.refresh_token is not None))
    table.add_row("Created", user.created_at.isoformat())
    table.add_row("Updated", user.updated_at.isoformat())

    console.print(table)


@users_app.command("delete")
def delete_user(
    email: str = typer.Argument(..., help="Email of the user to delete"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
) -> None:
    """Permanently delete a user."""
    store = get_user_store()
    user = _find_user(store, email)

    if not yes and not Confirm.ask(f"Are you sure you want to delete user '{user.email}'?"):
        console.print("[yellow]Deletion cancelled[/yellow]")
        return

    result = CredentialService(store).delete(user.id)
    if isinstance(result, Err):
        console.print(f"[red]❌ Failed to delete user '{user.email}': {result.error.message}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]✅ Successfully deleted user '{user.email}'[/green]")


@users_app.command("reset-password")
def reset_password(
    email: str = typer.Argument(..., help="Email of the user"),
    password: str = typer.Option(
        ..., "--password", "-p", prompt=True, hide_input=True, help="New password"
    ),
) -> None:
    """Set a new password without checking the old one."""
    store = get_user_store()
    user = _find_user(store, email)

    result = CredentialService(store).set_password(user.id, password)
    if isinstance(result, Err):
        console.print(f"[red]❌ Failed to reset password: {result.error.message}[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]✅ Password reset for '{user.email}'[/green]")
