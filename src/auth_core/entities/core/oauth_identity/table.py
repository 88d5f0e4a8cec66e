"""OAuth identity database table model."""

from sqlalchemy import Column, String, UniqueConstraint
from sqlmodel import Field

from src.auth_core.entities.core._base import EntityTable, user_fk_column


class OAuthIdentityTable(EntityTable, table=True):
    """Database persistence model for linked provider accounts."""

    __table_args__ = (
        UniqueConstraint("user_id", "provider", name="uq_oauth_identity_user_provider"),
        UniqueConstraint(
            "provider", "provider_account_id", name="uq_oauth_identity_provider_account"
        ),
    )

    provider: str = Field(sa_column=Column(String(64), nullable=False, index=True))
    provider_account_id: str = Field(
        sa_column=Column(String(512), nullable=False, index=True)
    )
    provider_email: str | None = Field(
        default=None, sa_column=Column(String(320), nullable=True)
    )
    user_id: str = Field(sa_column=user_fk_column(unique=False))
