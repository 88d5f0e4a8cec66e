from .credential_auth import CredentialAuthService
from .id_verification import VALID_ID_TYPES, IdVerificationService
from .oauth_auth import OAuthAuthService
from .otp_service import LoggingOtpSender, OtpSender, OtpService

__all__ = [
    "VALID_ID_TYPES",
    "CredentialAuthService",
    "IdVerificationService",
    "LoggingOtpSender",
    "OAuthAuthService",
    "OtpSender",
    "OtpService",
]
