"""OTP entity package."""

from .entity import Otp, OtpType
from .repository import OtpRepository
from .table import OtpTable

__all__ = ["Otp", "OtpType", "OtpTable", "OtpRepository"]
