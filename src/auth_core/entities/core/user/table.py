"""User database table model."""

from sqlmodel import Field

from src.auth_core.entities.core._base import EntityTable
from src.auth_core.entities.core.user.entity import UserType


class UserTable(EntityTable, table=True):
    """Database persistence model for users.

    Emails are stored lower-cased, which makes the unique index
    case-insensitive in practice.
    """

    email: str = Field(unique=True, index=True, max_length=320)
    password: str | None = None
    user_type: UserType = Field(default=UserType.INDIVIDUAL)
    email_verified: bool = False
    phone_verified: bool = False
    is_active: bool = True
    terms_accepted: bool = False
