"""Profile entity package."""

from .entity import CompanyProfile, IndividualProfile, Profile, RiderProfile
from .repository import (
    CompanyProfileRepository,
    IndividualProfileRepository,
    ProfileRepository,
    RiderProfileRepository,
    normalize_rc_number,
)
from .table import CompanyProfileTable, IndividualProfileTable, RiderProfileTable

__all__ = [
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
    "normalize_rc_number",
]
