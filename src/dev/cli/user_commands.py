"""User management CLI commands."""

from typing import NoReturn

import typer
from rich.panel import Panel
from rich.table import Table

from src.salsila.core.errors import AppError
from src.salsila.entities.core.user import User

from .utils import console, user_service_scope

# Create the users command group
users_app = typer.Typer(help="👥 User management commands")


def _fail(action: str, error: AppError) -> NoReturn:
    console.print(f"[red]❌ Failed to {action}: {error.message}[/red]")
    raise typer.Exit(1) from None


@users_app.command("list")
def list_users() -> None:
    """
    📋 List active users.

    Shows a table of users in registration order.
    """
    try:
        with user_service_scope() as service:
            users = service.get_all_users()
    except AppError as e:
        _fail("list users", e)

    if not users:
        console.print("[yellow]No users found[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("UID", style="dim")
    table.add_column("Email", style="green", no_wrap=True)
    table.add_column("Role", style="yellow")
    table.add_column("Person", style="blue")

    for user in users:
        table.add_row(user.uid, user.email, str(user.role_id), user.person_uid or "-")

    console.print(table)
    console.print(f"\n[dim]Showing {len(users)} users[/dim]")


@users_app.command("add")
def add_user(
    email: str = typer.Argument(..., help="Email address for the new user"),
    role_id: int = typer.Option(..., "--role-id", "-r", help="Role for the new user"),
    password: str = typer.Option(
        ...,
        "--password",
        "-p",
        prompt=True,
        hide_input=True,
        confirmation_prompt=True,
        help="Password for the new user",
    ),
    person_uid: str | None = typer.Option(
        None, "--person-uid", help="Person to attach right away"
    ),
) -> None:
    """
    ➕ Register a new user.

    The registration policy is applied before anything is stored.
    """
    console.print(
        Panel.fit(
            f"[bold green]Adding User: {email}[/bold green]",
            border_style="green",
        )
    )

    candidate = User(
        email=email, role_id=role_id, password=password, person_uid=person_uid
    )
    try:
        with user_service_scope() as service:
            service.validate_user(candidate)
            stored = service.create_user(candidate)
    except AppError as e:
        _fail("add user", e)

    console.print(f"[green]✅ User '{email}' created successfully![/green]")
    console.print(f"[blue]UID:[/blue] {stored.uid}")


@users_app.command("attach-person")
def attach_person(
    user_uid: str = typer.Argument(..., help="User to update"),
    person_uid: str = typer.Argument(..., help="Person to attach"),
) -> None:
    """🔗 Attach a person record to a user."""
    try:
        with user_service_scope() as service:
            service.attach_person(person_uid, user_uid)
    except AppError as e:
        _fail("attach person", e)

    console.print(
        f"[green]✅ Person '{person_uid}' attached to user '{user_uid}'[/green]"
    )


@users_app.command("delete")
def delete_user(
    user_uid: str = typer.Argument(..., help="User to delete"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
) -> None:
    """
    🗑️  Delete a user.

    The record is kept as deleted and its email becomes free to register again.
    """
    if not force:
        confirm = typer.confirm(f"Are you sure you want to delete user '{user_uid}'?")
        if not confirm:
            console.print("[yellow]Operation cancelled[/yellow]")
            raise typer.Exit(0)

    try:
        with user_service_scope() as service:
            service.delete_user_by_uid(user_uid)
    except AppError as e:
        _fail("delete user", e)

    console.print(f"[green]✅ User '{user_uid}' deleted[/green]")
