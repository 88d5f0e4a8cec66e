"""Database maintenance commands."""

import typer

from src.auth_core.runtime.init_db import create_all

from .utils import console, get_db_service

db_app = typer.Typer(help="Manage the identity database")


@db_app.command("init")
def init() -> None:
    """Create every table that does not exist yet."""
    create_all(get_db_service().engine)
    console.print("[green]✅ Database tables created[/green]")


@db_app.command("check")
def check() -> None:
    """Verify that the database is reachable."""
    if get_db_service().health_check():
        console.print("[green]✅ Database reachable[/green]")
        return
    console.print("[red]❌ Database unreachable[/red]")
    raise typer.Exit(code=1)
