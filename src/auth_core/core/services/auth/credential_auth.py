"""Password-based registration and login."""

import asyncio

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from src.auth_core.core.errors import AuthError, AuthErrorCode
from src.auth_core.core.models.auth import (
    AuthResponse,
    AuthTokenPayload,
    LoginInput,
    RegisterCompanyInput,
    RegisterIndividualInput,
)
from src.auth_core.core.services.auth.otp_service import OtpService
from src.auth_core.core.services.jwt.jwt_gen import TokenIssuer
from src.auth_core.core.services.security.password import PasswordHasher
from src.auth_core.entities.core.profile.entity import (
    CompanyProfile,
    IndividualProfile,
    Profile,
)
from src.auth_core.entities.core.profile.repository import (
    ProfileRepository,
    normalize_rc_number,
)
from src.auth_core.entities.core.user.entity import User, UserType
from src.auth_core.entities.core.user.repository import (
    UserRepository,
    normalize_email,
)

_EMAIL_EXISTS_MESSAGE = "A user with this email already exists"
_RC_EXISTS_MESSAGE = "A company with this RC number already exists"
_TERMS_MESSAGE = "You must accept the terms and conditions"
_INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


def _optional(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


class CredentialAuthService:
    """Registers password accounts and signs them in.

    A user row and its profile are written in one transaction, so every
    registered user owns exactly one profile.
    """

    def __init__(
        self,
        db_session: Session,
        password_hasher: PasswordHasher,
        token_issuer: TokenIssuer,
        otp_service: OtpService | None = None,
    ):
        self._db_session = db_session
        self._password_hasher = password_hasher
        self._token_issuer = token_issuer
        self._otp_service = otp_service
        self._user_repo = UserRepository(db_session)
        self._profile_repo = ProfileRepository(db_session)
        self._background_tasks: set[asyncio.Task] = set()

    async def register_individual(self, data: RegisterIndividualInput) -> AuthResponse:
        email = normalize_email(data.email)
        if self._user_repo.exists_by_email(email):
            raise AuthError(_EMAIL_EXISTS_MESSAGE, AuthErrorCode.EMAIL_EXISTS)

        if not data.terms_accepted:
            raise AuthError(_TERMS_MESSAGE, AuthErrorCode.TERMS_NOT_ACCEPTED)

        user = User(
            email=email,
            password=self._password_hasher.hash(data.password),
            user_type=UserType.INDIVIDUAL,
            terms_accepted=True,
        )
        profile = IndividualProfile(
            user_id=user.id,
            first_name=data.first_name.strip(),
            last_name=data.last_name.strip(),
            phone=_optional(data.phone),
        )
        user, profile = self._create_account(user, profile)
        logger.info("Registered individual {} ({})", user.id, user.email)

        return self._complete_registration(user, profile)

    async def register_company(self, data: RegisterCompanyInput) -> AuthResponse:
        email = normalize_email(data.company_email)
        rc_number = normalize_rc_number(data.rc_number)

        if self._user_repo.exists_by_email(email):
            raise AuthError(_EMAIL_EXISTS_MESSAGE, AuthErrorCode.EMAIL_EXISTS)

        if self._profile_repo.companies.get_by_rc_number(rc_number) is not None:
            raise AuthError(_RC_EXISTS_MESSAGE, AuthErrorCode.RC_NUMBER_EXISTS)

        if not data.terms_accepted:
            raise AuthError(_TERMS_MESSAGE, AuthErrorCode.TERMS_NOT_ACCEPTED)

        user = User(
            email=email,
            password=self._password_hasher.hash(data.password),
            user_type=UserType.COMPANY,
            terms_accepted=True,
        )
        profile = CompanyProfile(
            user_id=user.id,
            company_name=data.company_name.strip(),
            company_email=email,
            company_phone=_optional(data.company_phone),
            address=data.address.strip(),
            logo_url=data.logo_url,
            rc_number=rc_number,
        )
        user, profile = self._create_account(user, profile)
        logger.info("Registered company {} ({}, RC {})", user.id, user.email, rc_number)

        return self._complete_registration(user, profile)

    async def login(self, data: LoginInput) -> AuthResponse:
        user = self._user_repo.get_by_email(data.email)
        if user is None:
            raise AuthError(
                _INVALID_CREDENTIALS_MESSAGE, AuthErrorCode.INVALID_CREDENTIALS
            )

        if not user.has_password:
            raise AuthError(
                "This account uses social login. Please sign in with your social provider.",
                AuthErrorCode.NO_PASSWORD,
            )

        if not self._password_hasher.verify(data.password, user.password):
            raise AuthError(
                _INVALID_CREDENTIALS_MESSAGE, AuthErrorCode.INVALID_CREDENTIALS
            )

        if not user.is_active:
            raise AuthError(
                "Your account has been deactivated. Please contact support.",
                AuthErrorCode.ACCOUNT_DEACTIVATED,
            )

        profile = self._profile_repo.get_for_user(user)
        if profile is None:
            raise AuthError("User profile not found", AuthErrorCode.PROFILE_NOT_FOUND)

        return self._auth_response(user, profile)

    def set_password(self, user_id: str, password: str) -> User:
        """Give ``user_id`` a password, an authentication method independent of OAuth."""
        user = self._user_repo.get(user_id)
        if user is None:
            raise AuthError("User not found", AuthErrorCode.USER_NOT_FOUND)

        user.password = self._password_hasher.hash(password)
        user = self._commit(lambda: self._user_repo.update(user))
        logger.info("Password set for user {}", user_id)
        return user

    def deactivate(self, user_id: str) -> User:
        user = self._user_repo.get(user_id)
        if user is None:
            raise AuthError("User not found", AuthErrorCode.USER_NOT_FOUND)

        user.is_active = False
        user = self._commit(lambda: self._user_repo.update(user))
        logger.info("Deactivated user {}", user_id)
        return user

    async def wait_for_background_tasks(self) -> None:
        """Wait for pending verification emails; used on shutdown and in tests."""
        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)

    def _commit(self, write):
        try:
            result = write()
            self._db_session.commit()
            return result
        except Exception:
            self._db_session.rollback()
            raise

    def _create_account(self, user: User, profile: Profile) -> tuple[User, Profile]:
        try:
            created_user = self._user_repo.create(user)
            created_profile = self._profile_repo.for_user_type(user.user_type).create(
                profile
            )
            self._db_session.commit()
        except IntegrityError as e:
            self._db_session.rollback()
            # A concurrent writer won the race; report it like the pre-check would
            if self._user_repo.exists_by_email(user.email):
                raise AuthError(
                    _EMAIL_EXISTS_MESSAGE, AuthErrorCode.EMAIL_EXISTS
                ) from e
            if isinstance(profile, CompanyProfile) and (
                self._profile_repo.companies.get_by_rc_number(profile.rc_number)
                is not None
            ):
                raise AuthError(
                    _RC_EXISTS_MESSAGE, AuthErrorCode.RC_NUMBER_EXISTS
                ) from e
            raise
        except Exception:
            self._db_session.rollback()
            raise
        return created_user, created_profile

    def _complete_registration(self, user: User, profile: Profile) -> AuthResponse:
        self._send_verification_email(user.id)
        return self._auth_response(user, profile)

    def _send_verification_email(self, user_id: str) -> None:
        if self._otp_service is None:
            return
        task = asyncio.create_task(self._deliver_verification_email(user_id))
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def _deliver_verification_email(self, user_id: str) -> None:
        try:
            await self._otp_service.send_email_verification(user_id)
        except Exception as e:
            logger.error("Failed to send verification email to {}: {}", user_id, e)

    def _auth_response(self, user: User, profile: Profile) -> AuthResponse:
        tokens = self._token_issuer.issue(
            AuthTokenPayload(email=user.email, user_id=user.id, user_type=user.user_type)
        )
        return AuthResponse(profile=profile, tokens=tokens, user_id=user.id)
