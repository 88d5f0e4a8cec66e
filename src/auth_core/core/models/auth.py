"""Input and output models of the authentication engines."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from src.auth_core.entities.core.oauth_identity.entity import OAuthProvider
from src.auth_core.entities.core.profile.entity import (
    CompanyProfile,
    IndividualProfile,
    RiderProfile,
)
from src.auth_core.entities.core.user.entity import UserType


class IdType(str, Enum):
    """Kind of identity document a user can have verified."""

    RC_NUMBER = "rc_number"
    NATIONAL_ID = "national_id"


class AuthTokenPayload(BaseModel):
    """Claims every issued token carries."""

    model_config = ConfigDict(populate_by_name=True)

    email: str
    user_id: str = Field(alias="userId")
    user_type: UserType = Field(alias="userType")

    def to_claims(self) -> dict[str, str]:
        return {
            "email": self.email,
            "userId": self.user_id,
            "userType": self.user_type.value,
        }


class AuthTokens(BaseModel):
    access_token: str
    refresh_token: str


class AuthResponse(BaseModel):
    """Successful sign-in or registration."""

    profile: IndividualProfile | RiderProfile | CompanyProfile
    tokens: AuthTokens
    user_id: str


class RegisterIndividualInput(BaseModel):
    email: str
    password: str
    first_name: str
    last_name: str
    phone: str | None = None
    terms_accepted: bool = False


class RegisterCompanyInput(BaseModel):
    company_email: str
    password: str
    company_name: str
    address: str
    rc_number: str
    company_phone: str | None = None
    logo_url: str | None = None
    terms_accepted: bool = False


class LoginInput(BaseModel):
    email: str
    password: str


class OAuthAuthInput(BaseModel):
    """Identity assertion produced by a completed provider callback."""

    email: str
    email_verified: bool = False
    first_name: str = ""
    last_name: str = ""
    provider: OAuthProvider
    provider_account_id: str
