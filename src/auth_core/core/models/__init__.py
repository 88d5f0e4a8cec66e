"""Core model exports."""

from .auth import (
    AuthResponse,
    AuthTokenPayload,
    AuthTokens,
    IdType,
    LoginInput,
    OAuthAuthInput,
    RegisterCompanyInput,
    RegisterIndividualInput,
)

__all__ = [
    "AuthResponse",
    "AuthTokenPayload",
    "AuthTokens",
    "IdType",
    "LoginInput",
    "OAuthAuthInput",
    "RegisterCompanyInput",
    "RegisterIndividualInput",
]
