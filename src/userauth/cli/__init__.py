"""Main CLI application module."""

import typer
from rich.console import Console

from src.userauth.runtime.context import get_config

from .user_commands import users_app

console = Console()

# Create the main CLI application
app = typer.Typer(
    help="userauth administration tool",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Register command groups
app.add_typer(users_app, name="users")


@app.command("init-db")
def init_db_command() -> None:
    """Create the database tables."""
    from src.userauth.runtime.init_db import init_db

    config = get_config()
    if config.database.backend != "sql":
        console.print("[yellow]In-memory backend configured; nothing to create[/yellow]")
        return

    init_db()
    console.print(f"[green]✅ Database initialized at {config.database.url}[/green]")


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address (defaults to config)"),
    port: int | None = typer.Option(None, "--port", help="Bind port (defaults to config)"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the API server with uvicorn."""
    import uvicorn

    config = get_config()
    uvicorn.run(
        "src.userauth.api.http.app:app",
        host=host or config.app.host,
        port=port or config.app.port,
        reload=reload,
        access_log=False,  # request logging middleware covers this
    )


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
