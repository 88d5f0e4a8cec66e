"""Profile database table models."""

from sqlmodel import Field

from src.auth_core.entities.core._base import EntityTable, user_fk_column


class IndividualProfileTable(EntityTable, table=True):
    """Database persistence model for individual profiles."""

    user_id: str = Field(sa_column=user_fk_column(unique=True))
    first_name: str
    last_name: str
    phone: str | None = None
    address: str | None = None
    id_number: str | None = Field(default=None, unique=True, index=True)
    id_verified: bool = False


class RiderProfileTable(EntityTable, table=True):
    """Database persistence model for rider profiles."""

    user_id: str = Field(sa_column=user_fk_column(unique=True))
    first_name: str
    last_name: str
    phone: str | None = None
    address: str | None = None
    id_number: str | None = Field(default=None, unique=True, index=True)
    id_verified: bool = False


class CompanyProfileTable(EntityTable, table=True):
    """Database persistence model for company profiles."""

    user_id: str = Field(sa_column=user_fk_column(unique=True))
    company_name: str
    company_email: str
    company_phone: str | None = None
    address: str
    logo_url: str | None = None
    rc_number: str = Field(unique=True, index=True)
    rc_verified: bool = False
