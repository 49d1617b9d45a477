"""
ThreadKeep CLI - command-line interface for running and administering the API.
"""

import typer
from rich.console import Console

from threadkeep.logging_config import setup_logging

app = typer.Typer(
    name="threadkeep",
    help="ThreadKeep - sync backend for captured AI chat conversations",
    no_args_is_help=True,
)

console = Console()


@app.command()
def serve(
    host: str = typer.Option(None, help="Host to bind to (default: API_HOST)"),
    port: int = typer.Option(None, help="Port to bind to (default: API_PORT)"),
    reload: bool = typer.Option(False, help="Enable auto-reload"),
) -> None:
    """
    Start the FastAPI server.
    """
    import uvicorn

    from threadkeep.config import settings

    host = host or settings.api_host
    port = port or settings.api_port
    reload = reload or settings.api_reload

    console.print("[bold green]Starting ThreadKeep API server...[/bold green]")
    console.print(f"  Host: {host}")
    console.print(f"  Port: {port}")
    console.print(f"  Reload: {reload}")
    console.print(f"\n  API docs: http://{host}:{port}/docs")

    uvicorn.run(
        "threadkeep.api.app:app",
        host=host,
        port=port,
        reload=reload,
    )


@app.command("init-db")
def init_db() -> None:
    """
    Create database tables directly from the models.

    Intended for local development; use `alembic upgrade head` elsewhere.
    """
    from threadkeep.db.connection import check_connection
    from threadkeep.db.connection import init_db as create_tables

    setup_logging(context="cli")

    if not check_connection():
        console.print("[red]Cannot connect to the database[/red]")
        raise typer.Exit(1)

    create_tables()
    console.print("[green]✓ Tables created[/green]")


@app.command()
def token(
    owner_id: str = typer.Argument(..., help="User id to embed in the token"),
    email: str = typer.Option(None, help="Email claim"),
    days: int = typer.Option(None, help="Lifetime in days (default: JWT_EXPIRE_DAYS)"),
) -> None:
    """
    Issue a bearer token for a registered owner (development helper).
    """
    from datetime import timedelta

    from threadkeep.api.auth import create_access_token

    expires_in = timedelta(days=days) if days else None
    # Plain echo so the token can be piped without Rich wrapping it
    typer.echo(create_access_token(owner_id, email=email, expires_in=expires_in))


if __name__ == "__main__":
    app()
