"""One-time password issuance and verification."""

import secrets
from datetime import UTC, datetime, timedelta
from typing import Protocol

from loguru import logger
from sqlmodel import Session

from src.auth_core.core.errors import OtpError, OtpErrorCode
from src.auth_core.entities.core.otp.entity import Otp, OtpType
from src.auth_core.entities.core.otp.repository import OtpRepository
from src.auth_core.entities.core.user.entity import User
from src.auth_core.entities.core.user.repository import UserRepository
from src.auth_core.runtime.config.config_data import OtpConfig


class OtpSender(Protocol):
    async def send(self, user: User, otp: Otp) -> None: ...


class LoggingOtpSender:
    """Writes codes to the log instead of delivering them."""

    async def send(self, user: User, otp: Otp) -> None:
        logger.info(
            "OTP for {} via {}: {} (expires {})",
            user.email,
            otp.type.value,
            otp.code,
            otp.expires_at.isoformat(),
        )


class OtpService:
    def __init__(
        self,
        db_session: Session,
        config: OtpConfig | None = None,
        sender: OtpSender | None = None,
    ):
        self.db_session = db_session
        self.config = config or OtpConfig()
        self.sender = sender or LoggingOtpSender()
        self._users = UserRepository(db_session)
        self._otps = OtpRepository(db_session)

    def _generate_code(self) -> str:
        return "".join(secrets.choice("0123456789") for _ in range(self.config.length))

    async def send_email_verification(self, user_id: str) -> Otp:
        """Replace any pending email code for ``user_id`` and deliver a new one."""
        return await self.send(user_id, OtpType.EMAIL)

    async def send(self, user_id: str, otp_type: OtpType) -> Otp:
        user = self._users.get(user_id)
        if user is None:
            raise OtpError("User not found", OtpErrorCode.USER_NOT_FOUND)

        try:
            self._otps.delete_for_user(user_id, otp_type)
            otp = self._otps.create(
                Otp(
                    user_id=user_id,
                    type=otp_type,
                    code=self._generate_code(),
                    expires_at=datetime.now(UTC)
                    + timedelta(minutes=self.config.ttl_minutes),
                )
            )
            self.db_session.commit()
        except Exception:
            self.db_session.rollback()
            raise

        await self.sender.send(user, otp)
        return otp

    def verify(self, user_id: str, otp_type: OtpType, code: str) -> User:
        """Consume a matching code and mark the channel verified.

        Raises:
            OtpError: ``OTP_NOT_FOUND``, ``OTP_EXPIRED`` or ``INVALID_OTP``
        """
        user = self._users.get(user_id)
        if user is None:
            raise OtpError("User not found", OtpErrorCode.USER_NOT_FOUND)

        otp = self._otps.get_latest(user_id, otp_type)
        if otp is None:
            raise OtpError("No verification code was issued", OtpErrorCode.OTP_NOT_FOUND)
        if otp.is_expired():
            raise OtpError("Verification code has expired", OtpErrorCode.OTP_EXPIRED)
        if not secrets.compare_digest(otp.code, code.strip()):
            raise OtpError("Invalid verification code", OtpErrorCode.INVALID_OTP)

        if otp_type == OtpType.EMAIL:
            user.email_verified = True
        else:
            user.phone_verified = True

        try:
            user = self._users.update(user)
            self._otps.delete_for_user(user_id, otp_type)
            self.db_session.commit()
        except Exception:
            self.db_session.rollback()
            raise

        logger.info("Verified {} for user {}", otp_type.value, user_id)
        return user
