"""Operator CLI for the identity core."""

import typer

from src.auth_core.runtime.logging import configure_logging

from .db_commands import db_app
from .user_commands import users_app

app = typer.Typer(
    help="Identity core operator tool",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(db_app, name="db")
app.add_typer(users_app, name="users")


def main() -> None:
    """Main entry point for the CLI."""
    configure_logging()
    app()


if __name__ == "__main__":
    main()
