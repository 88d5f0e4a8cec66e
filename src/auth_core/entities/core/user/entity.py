"""User domain entity."""

from enum import Enum

from pydantic import Field

from src.auth_core.entities.core._base import Entity


class UserType(str, Enum):
    """Kind of account; selects the profile variant a user owns."""

    INDIVIDUAL = "individual"
    COMPANY = "company"
    RIDER = "rider"


class User(Entity):
    """Identity root reachable through a password and/or linked OAuth identities.

    ``password`` holds a hash; ``None`` marks an OAuth-only account.
    """

    email: str = Field(description="Lower-cased, globally unique email address")
    password: str | None = Field(default=None, description="Password hash")
    user_type: UserType = Field(default=UserType.INDIVIDUAL)
    email_verified: bool = Field(default=False)
    phone_verified: bool = Field(default=False)
    is_active: bool = Field(default=True)
    terms_accepted: bool = Field(default=False)

    @property
    def has_password(self) -> bool:
        return self.password is not None
