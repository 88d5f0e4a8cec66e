"""User administration commands."""

import typer
from rich.prompt import Confirm
from rich.table import Table
from sqlmodel import Session

from src.auth_core.core.errors import AuthCoreError
from src.auth_core.core.services.auth.credential_auth import CredentialAuthService
from src.auth_core.core.services.auth.oauth_auth import OAuthAuthService
from src.auth_core.core.services.jwt.jwt_gen import JwtTokenIssuer
from src.auth_core.core.services.security.password import BcryptPasswordHasher
from src.auth_core.entities.core.profile.repository import ProfileRepository
from src.auth_core.entities.core.user.entity import User
from src.auth_core.entities.core.user.repository import UserRepository

from .utils import console, get_db_service

users_app = typer.Typer(help="Inspect and administer user accounts")


def _require_user(session: Session, email: str) -> User:
    user = UserRepository(session).get_by_email(email)
    if user is None:
        console.print(f"[red]❌ No user with email '{email}'[/red]")
        raise typer.Exit(code=1)
    return user


def _flag(value: bool) -> str:
    return "✅" if value else "❌"


@users_app.command("show")
def show_user(email: str = typer.Argument(..., help="Email address of the user")) -> None:
    """Show a user's account, profile and linked providers."""
    with get_db_service().session_scope() as session:
        user = _require_user(session, email)
        profile = ProfileRepository(session).get_for_user(user)
        providers = OAuthAuthService(session, JwtTokenIssuer()).get_linked_providers(
            user.id
        )

        table = Table(title=f"User {user.email}", show_header=False)
        table.add_column("Field", style="cyan")
        table.add_column("Value")
        table.add_row("ID", user.id)
        table.add_row("Type", user.user_type.value)
        table.add_row("Password", _flag(user.has_password))
        table.add_row("Email verified", _flag(user.email_verified))
        table.add_row("Active", _flag(user.is_active))
        table.add_row("Profile", type(profile).__name__ if profile else "[red]missing[/red]")
        table.add_row("Providers", ", ".join(providers) or "-")
        console.print(table)


@users_app.command("providers")
def list_providers(email: str = typer.Argument(..., help="Email address of the user")) -> None:
    """List the OAuth providers linked to a user."""
    with get_db_service().session_scope() as session:
        user = _require_user(session, email)
        providers = OAuthAuthService(session, JwtTokenIssuer()).get_linked_providers(
            user.id
        )

    if not providers:
        console.print(f"[yellow]No providers linked to '{email}'[/yellow]")
        return
    for provider in providers:
        console.print(f"• {provider}")


@users_app.command("unlink")
def unlink_provider(
    email: str = typer.Argument(..., help="Email address of the user"),
    provider: str = typer.Argument(..., help="Provider to unlink, e.g. google"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation prompt"),
) -> None:
    """Unlink a provider, refusing to remove a user's last sign-in method."""
    if not force and not Confirm.ask(f"Unlink {provider} from '{email}'?"):
        console.print("[yellow]Unlink cancelled[/yellow]")
        return

    with get_db_service().session_scope() as session:
        user = _require_user(session, email)
        try:
            deleted = OAuthAuthService(session, JwtTokenIssuer()).unlink_provider(
                user.id, provider
            )
        except AuthCoreError as e:
            console.print(f"[red]❌ {e.message} ({e.code.value})[/red]")
            raise typer.Exit(code=1) from e

    if deleted:
        console.print(f"[green]✅ Unlinked {provider} from '{email}'[/green]")
    else:
        console.print(f"[yellow]'{email}' has no {provider} identity[/yellow]")


@users_app.command("deactivate")
def deactivate_user(
    email: str = typer.Argument(..., help="Email address of the user"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation prompt"),
) -> None:
    """Deactivate a user so password sign-in is refused."""
    if not force and not Confirm.ask(f"Deactivate '{email}'?"):
        console.print("[yellow]Deactivation cancelled[/yellow]")
        return

    with get_db_service().session_scope() as session:
        user = _require_user(session, email)
        CredentialAuthService(
            session, BcryptPasswordHasher(), JwtTokenIssuer()
        ).deactivate(user.id)

    console.print(f"[green]✅ Deactivated '{email}'[/green]")
