"""Typed domain errors.

Every error carries a stable machine-readable ``code`` (a str enum member)
separate from its human message, and the HTTP status the boundary layer
answers with. Storage or programming faults are never wrapped here; they
propagate to the generic boundary handler.
"""

from enum import Enum
from typing import Any, ClassVar


class AuthErrorCode(str, Enum):
    EMAIL_EXISTS = "EMAIL_EXISTS"
    RC_NUMBER_EXISTS = "RC_NUMBER_EXISTS"
    TERMS_NOT_ACCEPTED = "TERMS_NOT_ACCEPTED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    NO_PASSWORD = "NO_PASSWORD"
    ACCOUNT_DEACTIVATED = "ACCOUNT_DEACTIVATED"
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"


class OAuthErrorCode(str, Enum):
    OAUTH_ACCOUNT_LINKED = "OAUTH_ACCOUNT_LINKED"
    CANNOT_UNLINK_ONLY_AUTH = "CANNOT_UNLINK_ONLY_AUTH"
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    EMAIL_EXISTS = "EMAIL_EXISTS"


class IdVerificationErrorCode(str, Enum):
    USER_NOT_FOUND = "USER_NOT_FOUND"
    INVALID_ID_TYPE = "INVALID_ID_TYPE"
    INVALID_RC_FORMAT = "INVALID_RC_FORMAT"
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"
    RC_NUMBER_EXISTS = "RC_NUMBER_EXISTS"
    NATIONAL_ID_EXISTS = "NATIONAL_ID_EXISTS"
    VERIFICATION_FAILED = "VERIFICATION_FAILED"
    UNSUPPORTED_ID_TYPE = "UNSUPPORTED_ID_TYPE"


class OtpErrorCode(str, Enum):
    USER_NOT_FOUND = "USER_NOT_FOUND"
    OTP_NOT_FOUND = "OTP_NOT_FOUND"
    OTP_EXPIRED = "OTP_EXPIRED"
    INVALID_OTP = "INVALID_OTP"


_STATUS_BY_CODE: dict[str, int] = {
    "EMAIL_EXISTS": 409,
    "RC_NUMBER_EXISTS": 409,
    "NATIONAL_ID_EXISTS": 409,
    "OAUTH_ACCOUNT_LINKED": 409,
    "USER_NOT_FOUND": 404,
    "PROFILE_NOT_FOUND": 404,
    "OTP_NOT_FOUND": 404,
    "INVALID_CREDENTIALS": 401,
    "NO_PASSWORD": 401,
    "ACCOUNT_DEACTIVATED": 401,
    "INVALID_ID_TYPE": 403,
}


class AuthCoreError(Exception):
    """Base class for all domain errors raised by the identity core."""

    code_type: ClassVar[type[Enum]] = Enum

    def __init__(self, message: str, code: Enum | str):
        super().__init__(message)
        self.message = message
        self.code = self.code_type(code) if isinstance(code, str) else code

    @property
    def http_status(self) -> int:
        return _STATUS_BY_CODE.get(self.code.value, 400)

    def to_response(self) -> dict[str, Any]:
        return {"success": False, "code": self.code.value, "message": self.message}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code.value!r}, message={self.message!r})"


class AuthError(AuthCoreError):
    """Password registration and login failures."""

    code_type = AuthErrorCode


class OAuthAuthError(AuthCoreError):
    """Identity linking failures."""

    code_type = OAuthErrorCode


class IdVerificationError(AuthCoreError):
    """External ID verification failures."""

    code_type = IdVerificationErrorCode


class OtpError(AuthCoreError):
    """One-time password failures."""

    code_type = OtpErrorCode
