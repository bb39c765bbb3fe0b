"""Database management CLI commands."""

import typer
from rich.table import Table

from src.salsila.runtime.init_db import init_db

from .utils import console, get_db_service

db_app = typer.Typer(help="🗄️ Database management commands")


@db_app.command("init")
def init() -> None:
    """🧱 Create all tables in the configured database."""
    tables = init_db(get_db_service().engine)
    console.print(f"[green]✅ Database initialized ({', '.join(tables)})[/green]")


@db_app.command("status")
def status() -> None:
    """🩺 Check database connectivity and pool usage."""
    service = get_db_service()
    if not service.health_check():
        console.print("[red]❌ Database is not reachable[/red]")
        raise typer.Exit(1)

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Pool metric", style="cyan")
    table.add_column("Value", style="green")
    for name, value in service.get_pool_status().items():
        table.add_row(name, str(value))

    console.print("[green]✅ Database is healthy[/green]")
    console.print(table)
