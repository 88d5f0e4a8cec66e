"""OAuth identity domain entity."""

from enum import Enum

from pydantic import Field

from src.auth_core.entities.core._base import Entity


class OAuthProvider(str, Enum):
    """Supported social sign-in providers."""

    GOOGLE = "google"
    APPLE = "apple"


class OAuthIdentity(Entity):
    """Link between a user and one external provider account.

    A user links each provider at most once, and a provider account belongs
    to at most one user.
    """

    provider: str = Field(description="Provider name, e.g. 'google'")
    provider_account_id: str = Field(description="Account ID issued by the provider")
    provider_email: str | None = Field(
        default=None, description="Email reported by the provider"
    )
    user_id: str = Field(description="Internal user ID this identity maps to")
