"""OTP database table model."""

from datetime import datetime

from sqlalchemy import Column, DateTime
from sqlmodel import Field

from src.auth_core.entities.core._base import EntityTable, user_fk_column
from src.auth_core.entities.core.otp.entity import OtpType


class OtpTable(EntityTable, table=True):
    """Database persistence model for one-time passwords."""

    user_id: str = Field(sa_column=user_fk_column(unique=False))
    type: OtpType
    code: str
    expires_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )
