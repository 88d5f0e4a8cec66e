"""One-time password domain entity."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import Field

from src.auth_core.entities.core._base import Entity


class OtpType(str, Enum):
    EMAIL = "email"
    PHONE = "phone"


class Otp(Entity):
    """Short-lived verification code for one channel of one user."""

    user_id: str
    type: OtpType
    code: str
    expires_at: datetime = Field(description="Moment after which the code is void")

    def is_expired(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(UTC)
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        return now >= expires_at
