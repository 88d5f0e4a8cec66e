"""Core services exports."""

# Auth Services
from .auth.credential_auth import CredentialAuthService
from .auth.id_verification import IdVerificationService
from .auth.oauth_auth import OAuthAuthService
from .auth.otp_service import LoggingOtpSender, OtpSender, OtpService

# Database Service
from .database.db_session import DbSessionService

# Outbound HTTP
from .http.request_client import RequestClient, RequestError, calculate_backoff_delay

# JWT Services
from .jwt.jwt_gen import JwtGeneratorService, JwtTokenIssuer, TokenIssuer

# Password hashing
from .security.password import BcryptPasswordHasher, PasswordHasher

# Verification providers
from .verification import (
    PremblyVerificationProvider,
    StubVerificationProvider,
    VerificationProvider,
    VerificationResult,
    create_verification_provider,
)

__all__ = [
    # Auth Services
    "CredentialAuthService",
    "IdVerificationService",
    "OAuthAuthService",
    "OtpService",
    "OtpSender",
    "LoggingOtpSender",
    # Database Service
    "DbSessionService",
    # Outbound HTTP
    "RequestClient",
    "RequestError",
    "calculate_backoff_delay",
    # JWT Services
    "JwtGeneratorService",
    "JwtTokenIssuer",
    "TokenIssuer",
    # Password hashing
    "BcryptPasswordHasher",
    "PasswordHasher",
    # Verification providers
    "VerificationProvider",
    "VerificationResult",
    "StubVerificationProvider",
    "PremblyVerificationProvider",
    "create_verification_provider",
]
