"""Profile domain entities, one variant per user type."""

from pydantic import Field

from src.auth_core.entities.core._base import Entity


class IndividualProfile(Entity):
    """Personal details owned 1:1 by an individual user."""

    user_id: str = Field(description="Owning user")
    first_name: str
    last_name: str
    phone: str | None = None
    address: str | None = None
    id_number: str | None = Field(
        default=None, description="Verified national ID number"
    )
    id_verified: bool = False

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class RiderProfile(IndividualProfile):
    """Personal details owned 1:1 by a rider."""


class CompanyProfile(Entity):
    """Company details owned 1:1 by a company user."""

    user_id: str = Field(description="Owning user")
    company_name: str
    company_email: str
    company_phone: str | None = None
    address: str
    logo_url: str | None = Field(default=None, description="Logo reference URL")
    rc_number: str = Field(description="Globally unique registration number")
    rc_verified: bool = False


Profile = IndividualProfile | RiderProfile | CompanyProfile
