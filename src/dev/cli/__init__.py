"""Command-line interface for the Salsila backend.

Provides database setup, user administration and a development server.
"""

import typer

from src.salsila.runtime.context import get_config

from .db_commands import db_app
from .user_commands import users_app
from .utils import console

# Initialize the main CLI app
app = typer.Typer(
    name="salsila",
    help="Salsila CLI - Manage the database and user accounts",
    rich_markup_mode="rich",
)

app.add_typer(db_app, name="db")
app.add_typer(users_app, name="users")


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, help="Bind address (defaults to config)"),
    port: int | None = typer.Option(None, help="Port (defaults to config)"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
) -> None:
    """🚀 Run the HTTP API with uvicorn."""
    import uvicorn

    config = get_config()
    bind_host = host or config.app.host
    bind_port = port or config.app.port
    console.print(f"[blue]Serving on http://{bind_host}:{bind_port}[/blue]")
    uvicorn.run(
        "src.salsila.api.http.app:app",
        host=bind_host,
        port=bind_port,
        reload=reload,
        access_log=False,
    )


__all__ = ["app"]
