"""Entities organized by business concept.

Each entity package contains:
- entity.py: Domain model
- table.py: Database persistence model
- repository.py: Data access layer

Importing this package registers every table with the SQLModel metadata.
"""

from .core.oauth_identity import (
    OAuthIdentity,
    OAuthIdentityRepository,
    OAuthIdentityTable,
    OAuthProvider,
)
from .core.otp import Otp, OtpRepository, OtpTable, OtpType
from .core.profile import (
    CompanyProfile,
    CompanyProfileRepository,
    CompanyProfileTable,
    IndividualProfile,
    IndividualProfileRepository,
    IndividualProfileTable,
    Profile,
    ProfileRepository,
    RiderProfile,
    RiderProfileRepository,
    RiderProfileTable,
)
from .core.user import User, UserRepository, UserTable, UserType

__all__ = [
    "User",
    "UserType",
    "UserTable",
    "UserRepository",
    "IndividualProfile",
    "RiderProfile",
    "CompanyProfile",
    "Profile",
    "IndividualProfileTable",
    "RiderProfileTable",
    "CompanyProfileTable",
    "IndividualProfileRepository",
    "RiderProfileRepository",
    "CompanyProfileRepository",
    "ProfileRepository",
    "OAuthIdentity",
    "OAuthProvider",
    "OAuthIdentityTable",
    "OAuthIdentityRepository",
    "Otp",
    "OtpType",
    "OtpTable",
    "OtpRepository",
]
