from unittest.mock import patch

import pytest
from sqlalchemy import func
from sqlmodel import Session, select

from src.auth_core.core.errors import AuthError, AuthErrorCode
from src.auth_core.core.models.auth import (
    LoginInput,
    OAuthAuthInput,
    RegisterCompanyInput,
    RegisterIndividualInput,
)
from src.auth_core.core.services.auth.credential_auth import CredentialAuthService
from src.auth_core.core.services.auth.oauth_auth import OAuthAuthService
from src.auth_core.core.services.jwt.jwt_gen import JwtGeneratorService
from src.auth_core.entities import (
    CompanyProfile,
    CompanyProfileRepository,
    CompanyProfileTable,
    IndividualProfileTable,
    OtpRepository,
    OtpType,
    ProfileRepository,
    RiderProfile,
    RiderProfileTable,
    User,
    UserRepository,
    UserTable,
    UserType,
)
from tests.fixtures.services import RecordingOtpSender


def count(session: Session, table) -> int:
    return session.exec(select(func.count()).select_from(table)).one()


def assert_every_user_has_one_profile(session: Session) -> None:
    users = session.exec(select(UserTable)).all()
    profiles = ProfileRepository(session)
    for row in users:
        user = User.model_validate(row, from_attributes=True)
        owned = [
            repo.get_by_user_id(user.id)
            for repo in (profiles.individuals, profiles.riders, profiles.companies)
        ]
        assert len([p for p in owned if p is not None]) == 1, user.email
        assert profiles.get_for_user(user) is not None


class TestRegisterIndividual:
    async def test_success(
        self,
        db_session: Session,
        credential_auth_service: CredentialAuthService,
        individual_input: RegisterIndividualInput,
        password_hasher,
        jwt_generator: JwtGeneratorService,
    ):
        response = await credential_auth_service.register_individual(individual_input)
        await credential_auth_service.wait_for_background_tasks()

        user = UserRepository(db_session).get(response.user_id)
        assert user.user_type == UserType.INDIVIDUAL
        assert user.terms_accepted is True
        assert user.password != individual_input.password
        assert password_hasher.verify(individual_input.password, user.password)
        assert response.profile.first_name == "Ada"
        assert response.profile.user_id == user.id

        claims = jwt_generator.decode(response.tokens.refresh_token)
        assert claims["token_type"] == "refresh"
        assert claims["userId"] == user.id
        assert_every_user_has_one_profile(db_session)

    async def test_email_is_stored_lowercase_and_duplicates_rejected(
        self,
        db_session: Session,
        credential_auth_service: CredentialAuthService,
        individual_input: RegisterIndividualInput,
    ):
        first = individual_input.model_copy(update={"email": "A@Test.com"})
        response = await credential_auth_service.register_individual(first)

        assert UserRepository(db_session).get(response.user_id).email == "a@test.com"

        second = individual_input.model_copy(update={"email": "a@TEST.com"})
        with pytest.raises(AuthError) as exc_info:
            await credential_auth_service.register_individual(second)

        assert exc_info.value.code == AuthErrorCode.EMAIL_EXISTS
        assert exc_info.value.http_status == 409
        assert count(db_session, UserTable) == 1
        await credential_auth_service.wait_for_background_tasks()

    @pytest.mark.parametrize(
        "variant", ["ada@example.com", "ADA@EXAMPLE.COM", "  Ada@Example.Com  "]
    )
    async def test_case_variants_are_one_account(
        self,
        credential_auth_service: CredentialAuthService,
        individual_input: RegisterIndividualInput,
        variant: str,
    ):
        await credential_auth_service.register_individual(individual_input)

        with pytest.raises(AuthError) as exc_info:
            await credential_auth_service.register_individual(
                individual_input.model_copy(update={"email": variant})
            )

        assert exc_info.value.code == AuthErrorCode.EMAIL_EXISTS
        await credential_auth_service.wait_for_background_tasks()

    async def test_terms_must_be_accepted(
        self,
        db_session: Session,
        credential_auth_service: CredentialAuthService,
        individual_input: RegisterIndividualInput,
    ):
        with pytest.raises(AuthError) as exc_info:
            await credential_auth_service.register_individual(
                individual_input.model_copy(update={"terms_accepted": False})
            )

        assert exc_info.value.code == AuthErrorCode.TERMS_NOT_ACCEPTED
        assert count(db_session, UserTable) == 0

    async def test_verification_email_is_sent(
        self,
        db_session: Session,
        credential_auth_service: CredentialAuthService,
        individual_input: RegisterIndividualInput,
        otp_sender: RecordingOtpSender,
    ):
        response = await credential_auth_service.register_individual(individual_input)
        await credential_auth_service.wait_for_background_tasks()

        assert len(otp_sender.sent) == 1
        user, otp = otp_sender.sent[0]
        assert user.id == response.user_id
        assert otp.type == OtpType.EMAIL
        assert OtpRepository(db_session).get_latest(user.id, OtpType.EMAIL).code == otp.code

    async def test_failed_verification_email_does_not_fail_registration(
        self,
        db_session: Session,
        credential_auth_service: CredentialAuthService,
        individual_input: RegisterIndividualInput,
        otp_sender: RecordingOtpSender,
    ):
        otp_sender.fail = True

        response = await credential_auth_service.register_individual(individual_input)
        await credential_auth_service.wait_for_background_tasks()

        assert response.user_id
        assert otp_sender.sent == []
        assert UserRepository(db_session).get(response.user_id) is not None

    async def test_without_otp_service(
        self,
        db_session: Session,
        password_hasher,
        token_issuer,
        individual_input: RegisterIndividualInput,
    ):
        service = CredentialAuthService(db_session, password_hasher, token_issuer)

        response = await service.register_individual(individual_input)

        assert response.user_id

    async def test_lost_race_maps_to_email_exists(
        self,
        db_session: Session,
        other_session: Session,
        password_hasher,
        token_issuer,
        individual_input: RegisterIndividualInput,
    ):
        winner = CredentialAuthService(other_session, password_hasher, token_issuer)
        loser = CredentialAuthService(db_session, password_hasher, token_issuer)
        await winner.register_individual(individual_input)

        # The pre-check ran before the winner committed
        with patch.object(UserRepository, "exists_by_email", side_effect=[False, True]):
            with pytest.raises(AuthError) as exc_info:
                await loser.register_individual(individual_input)

        assert exc_info.value.code == AuthErrorCode.EMAIL_EXISTS
        assert count(db_session, UserTable) == 1
        assert count(db_session, IndividualProfileTable) == 1


class TestRegisterCompany:
    async def test_success(
        self,
        db_session: Session,
        credential_auth_service: CredentialAuthService,
        company_input: RegisterCompanyInput,
    ):
        response = await credential_auth_service.register_company(
            company_input.model_copy(update={"logo_url": "https://cdn.test/logo.png"})
        )
        await credential_auth_service.wait_for_background_tasks()

        assert isinstance(response.profile, CompanyProfile)
        assert response.profile.rc_number == "1234567"
        assert response.profile.logo_url == "https://cdn.test/logo.png"
        assert response.profile.company_email == "ops@swiftlogistics.ng"
        user = UserRepository(db_session).get(response.user_id)
        assert user.user_type == UserType.COMPANY
        assert_every_user_has_one_profile(db_session)

    async def test_registration_number_is_unique_across_emails(
        self,
        db_session: Session,
        credential_auth_service: CredentialAuthService,
        company_input: RegisterCompanyInput,
    ):
        await credential_auth_service.register_company(company_input)

        with pytest.raises(AuthError) as exc_info:
            await credential_auth_service.register_company(
                company_input.model_copy(update={"company_email": "other@fleet.ng"})
            )

        assert exc_info.value.code == AuthErrorCode.RC_NUMBER_EXISTS
        assert count(db_session, UserTable) == 1
        assert count(db_session, CompanyProfileTable) == 1
        await credential_auth_service.wait_for_background_tasks()

    @pytest.mark.parametrize(
        ("first", "second"),
        [("RC-1234567", "1234567"), ("1234567", " RC-1234567 ")],
    )
    async def test_prefixed_and_bare_numbers_are_one_registration(
        self,
        db_session: Session,
        credential_auth_service: CredentialAuthService,
        company_input: RegisterCompanyInput,
        first: str,
        second: str,
    ):
        await credential_auth_service.register_company(
            company_input.model_copy(update={"rc_number": first})
        )

        with pytest.raises(AuthError) as exc_info:
            await credential_auth_service.register_company(
                company_input.model_copy(
                    update={"company_email": "other@fleet.ng", "rc_number": second}
                )
            )

        assert exc_info.value.code == AuthErrorCode.RC_NUMBER_EXISTS
        assert count(db_session, CompanyProfileTable) == 1
        await credential_auth_service.wait_for_background_tasks()

    async def test_duplicate_email_is_checked_first(
        self,
        credential_auth_service: CredentialAuthService,
        company_input: RegisterCompanyInput,
    ):
        await credential_auth_service.register_company(company_input)

        with pytest.raises(AuthError) as exc_info:
            await credential_auth_service.register_company(company_input)

        assert exc_info.value.code == AuthErrorCode.EMAIL_EXISTS
        await credential_auth_service.wait_for_background_tasks()

    async def test_terms_must_be_accepted(
        self,
        credential_auth_service: CredentialAuthService,
        company_input: RegisterCompanyInput,
    ):
        with pytest.raises(AuthError) as exc_info:
            await credential_auth_service.register_company(
                company_input.model_copy(update={"terms_accepted": False})
            )

        assert exc_info.value.code == AuthErrorCode.TERMS_NOT_ACCEPTED

    async def test_failed_profile_write_leaves_no_user(
        self,
        db_session: Session,
        credential_auth_service: CredentialAuthService,
        company_input: RegisterCompanyInput,
        monkeypatch: pytest.MonkeyPatch,
    ):
        def broken_create(self, profile):
            raise RuntimeError("disk full")

        monkeypatch.setattr(
            CompanyProfileRepository, "create", broken_create
        )

        with pytest.raises(RuntimeError):
            await credential_auth_service.register_company(company_input)

        assert count(db_session, UserTable) == 0


class TestLogin:
    @pytest.fixture
    async def registered(
        self,
        credential_auth_service: CredentialAuthService,
        individual_input: RegisterIndividualInput,
    ) -> str:
        response = await credential_auth_service.register_individual(individual_input)
        await credential_auth_service.wait_for_background_tasks()
        return response.user_id

    async def test_success(
        self,
        credential_auth_service: CredentialAuthService,
        individual_input: RegisterIndividualInput,
        registered: str,
        jwt_generator: JwtGeneratorService,
    ):
        response = await credential_auth_service.login(
            LoginInput(email="  ADA@example.com ", password=individual_input.password)
        )

        assert response.user_id == registered
        assert response.profile.last_name == "Obi"
        claims = jwt_generator.decode(response.tokens.access_token)
        assert claims == {
            **claims,
            "email": "ada@example.com",
            "userId": registered,
            "userType": "individual",
        }

    async def test_unknown_email_and_wrong_password_look_the_same(
        self,
        credential_auth_service: CredentialAuthService,
        registered: str,
    ):
        with pytest.raises(AuthError) as unknown:
            await credential_auth_service.login(
                LoginInput(email="nobody@example.com", password="whatever")
            )
        with pytest.raises(AuthError) as wrong:
            await credential_auth_service.login(
                LoginInput(email="ada@example.com", password="wrong password")
            )

        assert unknown.value.code == wrong.value.code == AuthErrorCode.INVALID_CREDENTIALS
        assert unknown.value.message == wrong.value.message
        assert unknown.value.http_status == 401

    async def test_oauth_only_account_has_no_password(
        self,
        credential_auth_service: CredentialAuthService,
        oauth_auth_service: OAuthAuthService,
        oauth_payload,
    ):
        await oauth_auth_service.authenticate_with_oauth(OAuthAuthInput(**oauth_payload))

        with pytest.raises(AuthError) as exc_info:
            await credential_auth_service.login(
                LoginInput(email=oauth_payload["email"], password="anything")
            )

        assert exc_info.value.code == AuthErrorCode.NO_PASSWORD

    async def test_deactivated_account(
        self,
        credential_auth_service: CredentialAuthService,
        individual_input: RegisterIndividualInput,
        registered: str,
    ):
        user = credential_auth_service.deactivate(registered)
        assert user.is_active is False

        with pytest.raises(AuthError) as exc_info:
            await credential_auth_service.login(
                LoginInput(email=individual_input.email, password=individual_input.password)
            )

        assert exc_info.value.code == AuthErrorCode.ACCOUNT_DEACTIVATED

    async def test_wrong_password_on_deactivated_account_is_invalid_credentials(
        self,
        credential_auth_service: CredentialAuthService,
        registered: str,
    ):
        credential_auth_service.deactivate(registered)

        with pytest.raises(AuthError) as exc_info:
            await credential_auth_service.login(
                LoginInput(email="ada@example.com", password="wrong password")
            )

        assert exc_info.value.code == AuthErrorCode.INVALID_CREDENTIALS

    async def test_missing_profile(
        self,
        db_session: Session,
        credential_auth_service: CredentialAuthService,
        password_hasher,
    ):
        UserRepository(db_session).create(
            User(email="orphan@example.com", password=password_hasher.hash("pw"))
        )
        db_session.commit()

        with pytest.raises(AuthError) as exc_info:
            await credential_auth_service.login(
                LoginInput(email="orphan@example.com", password="pw")
            )

        assert exc_info.value.code == AuthErrorCode.PROFILE_NOT_FOUND

    async def test_rider_gets_rider_profile(
        self,
        db_session: Session,
        credential_auth_service: CredentialAuthService,
        password_hasher,
    ):
        rider = UserRepository(db_session).create(
            User(
                email="rider@example.com",
                password=password_hasher.hash("pw"),
                user_type=UserType.RIDER,
            )
        )
        ProfileRepository(db_session).riders.create(
            RiderProfile(user_id=rider.id, first_name="Tunde", last_name="Bello")
        )
        db_session.commit()

        response = await credential_auth_service.login(
            LoginInput(email="rider@example.com", password="pw")
        )

        assert isinstance(response.profile, RiderProfile)
        assert count(db_session, RiderProfileTable) == 1


class TestAccountManagement:
    async def test_set_password_enables_login_and_unlink(
        self,
        credential_auth_service: CredentialAuthService,
        oauth_auth_service: OAuthAuthService,
        oauth_payload,
    ):
        response = await oauth_auth_service.authenticate_with_oauth(
            OAuthAuthInput(**oauth_payload)
        )

        user = credential_auth_service.set_password(response.user_id, "new password")

        assert user.has_password is True
        login = await credential_auth_service.login(
            LoginInput(email=oauth_payload["email"], password="new password")
        )
        assert login.user_id == response.user_id
        assert oauth_auth_service.unlink_provider(response.user_id, "google") is True

    @pytest.mark.parametrize("operation", ["set_password", "deactivate"])
    def test_unknown_user(self, credential_auth_service: CredentialAuthService, operation: str):
        method = getattr(credential_auth_service, operation)
        args = ("missing", "pw") if operation == "set_password" else ("missing",)

        with pytest.raises(AuthError) as exc_info:
            method(*args)

        assert exc_info.value.code == AuthErrorCode.USER_NOT_FOUND
