"""Verification of user identity claims against an external provider."""

import re
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import NoReturn

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from src.auth_core.core.errors import IdVerificationError, IdVerificationErrorCode
from src.auth_core.core.models.auth import IdType
from src.auth_core.core.services.verification.provider import (
    VerificationProvider,
    VerificationResult,
)
from src.auth_core.entities.core.profile.entity import (
    CompanyProfile,
    IndividualProfile,
)
from src.auth_core.entities.core.profile.repository import (
    ProfileRepository,
    normalize_rc_number,
)
from src.auth_core.entities.core.user.entity import User, UserType
from src.auth_core.entities.core.user.repository import UserRepository
from src.auth_core.runtime.config.config_data import VerificationConfig

VALID_ID_TYPES: dict[UserType, tuple[str, ...]] = {
    UserType.COMPANY: (IdType.RC_NUMBER.value,),
    UserType.INDIVIDUAL: (IdType.NATIONAL_ID.value,),
    UserType.RIDER: (IdType.NATIONAL_ID.value,),
}


def _same_text(left: object, right: object) -> bool:
    if not isinstance(left, str) or not isinstance(right, str):
        return False
    return left.strip().casefold() == right.strip().casefold()


class IdVerificationService:
    """Checks an ID against the provider and records it on the user's profile."""

    def __init__(
        self,
        db_session: Session,
        provider: VerificationProvider,
        config: VerificationConfig | None = None,
        valid_id_types: Mapping[UserType, Sequence[str]] | None = None,
    ):
        self._db_session = db_session
        self._provider = provider
        self._config = config or VerificationConfig()
        self._valid_id_types = valid_id_types or VALID_ID_TYPES
        self._rc_pattern = re.compile(self._config.rc_number_pattern)
        self._user_repo = UserRepository(db_session)
        self._profile_repo = ProfileRepository(db_session)
        self._handlers: dict[
            str, Callable[[User, str], Awaitable[VerificationResult]]
        ] = {
            IdType.RC_NUMBER.value: self._verify_rc_number,
            IdType.NATIONAL_ID.value: self._verify_national_id,
        }

    async def verify_id(
        self, user_id: str, id_number: str, id_type: IdType | str
    ) -> VerificationResult:
        """Verify ``id_number`` for ``user_id`` and persist it when valid.

        Raises:
            IdVerificationError: on any rule violation or failed verification
        """
        id_type = getattr(id_type, "value", id_type)

        user = self._user_repo.get(user_id)
        if user is None:
            raise IdVerificationError(
                "User not found", IdVerificationErrorCode.USER_NOT_FOUND
            )

        if id_type not in self._valid_id_types.get(user.user_type, ()):
            raise IdVerificationError(
                "This ID type is not supported for this user type",
                IdVerificationErrorCode.INVALID_ID_TYPE,
            )

        handler = self._handlers.get(id_type)
        if handler is None:
            raise IdVerificationError(
                "Unsupported ID type", IdVerificationErrorCode.UNSUPPORTED_ID_TYPE
            )

        return await handler(user, id_number.strip())

    async def _verify_rc_number(self, user: User, rc_number: str) -> VerificationResult:
        if not self._rc_pattern.match(rc_number):
            raise IdVerificationError(
                "RC Number must be 6 or 7 digits, optionally prefixed with RC- (e.g., RC-1234567)",
                IdVerificationErrorCode.INVALID_RC_FORMAT,
            )
        rc_number = normalize_rc_number(rc_number)

        companies = self._profile_repo.companies
        profile = companies.get_by_user_id(user.id)
        if profile is None:
            raise IdVerificationError(
                "Company profile not found", IdVerificationErrorCode.PROFILE_NOT_FOUND
            )

        claimed = companies.get_by_rc_number(rc_number)
        if claimed is not None and claimed.user_id != user.id:
            raise IdVerificationError(
                "A company with this RC number already exists",
                IdVerificationErrorCode.RC_NUMBER_EXISTS,
            )

        result = self._provider.normalize(
            await self._provider.verify_registration_number(rc_number)
        )
        if not result.is_valid:
            self._fail(user, IdType.RC_NUMBER, result.error)
        if self._config.cross_check_company and not self._company_matches(
            profile, result
        ):
            self._fail(user, IdType.RC_NUMBER, "Company details do not match the registry")

        profile.rc_number = rc_number
        profile.rc_verified = True
        try:
            companies.update(profile)
            self._db_session.commit()
        except IntegrityError as e:
            self._db_session.rollback()
            raise IdVerificationError(
                "A company with this RC number already exists",
                IdVerificationErrorCode.RC_NUMBER_EXISTS,
            ) from e

        logger.info("Verified RC number {} for user {}", rc_number, user.id)
        return result

    async def _verify_national_id(self, user: User, id_number: str) -> VerificationResult:
        claimed_by = self._user_repo.get_by_national_id(id_number)
        if claimed_by is not None and claimed_by.id != user.id:
            raise IdVerificationError(
                "A user with this national ID already exists",
                IdVerificationErrorCode.NATIONAL_ID_EXISTS,
            )

        profiles = self._profile_repo.for_user_type(user.user_type)
        profile = profiles.get_by_user_id(user.id)
        if profile is None:
            raise IdVerificationError(
                "User profile not found", IdVerificationErrorCode.PROFILE_NOT_FOUND
            )

        result = self._provider.normalize(
            await self._provider.verify_national_id(id_number)
        )
        if not result.is_valid:
            self._fail(user, IdType.NATIONAL_ID, result.error)
        if self._config.match_national_id_name and not self._name_matches(
            profile, result
        ):
            self._fail(user, IdType.NATIONAL_ID, "Name does not match the ID record")

        profile.id_number = id_number
        profile.id_verified = True
        try:
            profiles.update(profile)
            self._db_session.commit()
        except IntegrityError as e:
            self._db_session.rollback()
            raise IdVerificationError(
                "A user with this national ID already exists",
                IdVerificationErrorCode.NATIONAL_ID_EXISTS,
            ) from e

        logger.info("Verified national ID for user {}", user.id)
        return result

    @staticmethod
    def _company_matches(profile: CompanyProfile, result: VerificationResult) -> bool:
        if not _same_text(result.data.get("company_name"), profile.company_name):
            return False
        address = result.data.get("address")
        return address is None or _same_text(address, profile.address)

    @staticmethod
    def _name_matches(profile: IndividualProfile, result: VerificationResult) -> bool:
        parts = [
            str(result.data.get(key) or "").strip()
            for key in ("first_name", "middle_name", "last_name")
        ]
        first, middle, last = parts
        candidates = {
            " ".join(p for p in (first, last) if p).casefold(),
            " ".join(p for p in (first, middle, last) if p).casefold(),
        }
        return profile.full_name.strip().casefold() in candidates

    @staticmethod
    def _fail(user: User, id_type: IdType, message: str | None) -> NoReturn:
        logger.warning(
            "{} verification failed for user {}: {}", id_type.value, user.id, message
        )
        raise IdVerificationError(
            message or "ID verification failed",
            IdVerificationErrorCode.VERIFICATION_FAILED,
        )
