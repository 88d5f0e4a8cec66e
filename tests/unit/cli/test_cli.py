from collections.abc import Generator

import pytest
from sqlmodel import Session
from typer.testing import CliRunner

from src.auth_core.cli import app
from src.auth_core.cli.utils import set_db_service
from src.auth_core.core.services.database.db_session import DbSessionService
from src.auth_core.entities import (
    IndividualProfile,
    OAuthIdentity,
    OAuthIdentityRepository,
    ProfileRepository,
    User,
    UserRepository,
)

runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_db(db_service: DbSessionService) -> Generator[DbSessionService]:
    set_db_service(db_service)
    yield db_service
    set_db_service(None)


def seed_user(session: Session, *, password: str | None = "hash", providers=()) -> User:
    user = UserRepository(session).create(User(email="ada@example.com", password=password))
    ProfileRepository(session).individuals.create(
        IndividualProfile(user_id=user.id, first_name="Ada", last_name="Obi")
    )
    for provider in providers:
        OAuthIdentityRepository(session).create(
            OAuthIdentity(
                user_id=user.id, provider=provider, provider_account_id=f"{provider}-1"
            )
        )
    session.commit()
    return user


class TestDbCommands:
    def test_init(self):
        result = runner.invoke(app, ["db", "init"])

        assert result.exit_code == 0
        assert "Database tables created" in result.output

    def test_check(self):
        result = runner.invoke(app, ["db", "check"])

        assert result.exit_code == 0
        assert "Database reachable" in result.output


class TestUserCommands:
    def test_show(self, db_session: Session):
        seed_user(db_session, providers=["google"])

        result = runner.invoke(app, ["users", "show", "ADA@example.com"])

        assert result.exit_code == 0
        assert "ada@example.com" in result.output
        assert "IndividualProfile" in result.output
        assert "google" in result.output

    def test_show_unknown_user(self):
        result = runner.invoke(app, ["users", "show", "nobody@example.com"])

        assert result.exit_code == 1
        assert "No user with email" in result.output

    def test_providers(self, db_session: Session):
        seed_user(db_session, providers=["google", "apple"])

        result = runner.invoke(app, ["users", "providers", "ada@example.com"])

        assert result.exit_code == 0
        assert "google" in result.output
        assert "apple" in result.output

    def test_unlink(self, db_session: Session):
        user = seed_user(db_session, providers=["google"])

        result = runner.invoke(app, ["users", "unlink", "ada@example.com", "google", "--force"])

        assert result.exit_code == 0
        assert "Unlinked google" in result.output
        assert OAuthIdentityRepository(db_session).list_by_user(user.id) == []

    def test_unlink_last_method_is_refused(self, db_session: Session):
        user = seed_user(db_session, password=None, providers=["google"])

        result = runner.invoke(app, ["users", "unlink", "ada@example.com", "google", "-f"])

        assert result.exit_code == 1
        assert "CANNOT_UNLINK_ONLY_AUTH" in result.output
        assert len(OAuthIdentityRepository(db_session).list_by_user(user.id)) == 1

    def test_unlink_asks_for_confirmation(self, db_session: Session):
        user = seed_user(db_session, providers=["google"])

        result = runner.invoke(
            app, ["users", "unlink", "ada@example.com", "google"], input="n\n"
        )

        assert result.exit_code == 0
        assert "cancelled" in result.output
        assert len(OAuthIdentityRepository(db_session).list_by_user(user.id)) == 1

    def test_deactivate(self, db_session: Session):
        user = seed_user(db_session)

        result = runner.invoke(app, ["users", "deactivate", "ada@example.com", "--force"])

        assert result.exit_code == 0
        db_session.expire_all()
        assert UserRepository(db_session).get(user.id).is_active is False
