"""Profile repositories for data access operations."""

import re
from typing import Generic, TypeVar

from sqlmodel import Session, SQLModel, select

from src.auth_core.entities.core._base import Entity, utc_now
from src.auth_core.entities.core.profile.entity import (
    CompanyProfile,
    IndividualProfile,
    Profile,
    RiderProfile,
)
from src.auth_core.entities.core.profile.table import (
    CompanyProfileTable,
    IndividualProfileTable,
    RiderProfileTable,
)
from src.auth_core.entities.core.user.entity import User, UserType

EntityT = TypeVar("EntityT", bound=Entity)

_RC_PREFIX = re.compile(r"^RC-", re.IGNORECASE)


def normalize_rc_number(rc_number: str) -> str:
    """Canonical registry form: trimmed, without the optional ``RC-`` prefix."""
    return _RC_PREFIX.sub("", rc_number.strip())


def _canonical(profile: CompanyProfile) -> CompanyProfile:
    return profile.model_copy(
        update={"rc_number": normalize_rc_number(profile.rc_number)}
    )


class _ProfileRepository(Generic[EntityT]):
    """Shared data access for the 1:1 user-owned profile tables."""

    entity_cls: type[EntityT]
    table_cls: type[SQLModel]

    def __init__(self, session: Session) -> None:
        self._session = session

    def _to_entity(self, row: SQLModel | None) -> EntityT | None:
        if row is None:
            return None
        return self.entity_cls.model_validate(row, from_attributes=True)

    def get(self, profile_id: str) -> EntityT | None:
        return self._to_entity(self._session.get(self.table_cls, profile_id))

    def get_by_user_id(self, user_id: str) -> EntityT | None:
        statement = select(self.table_cls).where(self.table_cls.user_id == user_id)
        return self._to_entity(self._session.exec(statement).first())

    def create(self, profile: EntityT) -> EntityT:
        row = self.table_cls.model_validate(profile, from_attributes=True)
        self._session.add(row)
        self._session.flush()
        return self._to_entity(row)

    def update(self, profile: EntityT) -> EntityT:
        row = self._session.get(self.table_cls, profile.id)
        if row is None:
            raise ValueError(f"Profile {profile.id} does not exist")

        for field, value in profile.model_dump(
            exclude={"id", "user_id", "created_at", "updated_at"}
        ).items():
            setattr(row, field, value)
        row.updated_at = utc_now()

        self._session.add(row)
        self._session.flush()
        return self._to_entity(row)


class IndividualProfileRepository(_ProfileRepository[IndividualProfile]):
    entity_cls = IndividualProfile
    table_cls = IndividualProfileTable

    def get_by_id_number(self, id_number: str) -> IndividualProfile | None:
        statement = select(IndividualProfileTable).where(
            IndividualProfileTable.id_number == id_number
        )
        return self._to_entity(self._session.exec(statement).first())


class RiderProfileRepository(_ProfileRepository[RiderProfile]):
    entity_cls = RiderProfile
    table_cls = RiderProfileTable

    def get_by_id_number(self, id_number: str) -> RiderProfile | None:
        statement = select(RiderProfileTable).where(
            RiderProfileTable.id_number == id_number
        )
        return self._to_entity(self._session.exec(statement).first())


class CompanyProfileRepository(_ProfileRepository[CompanyProfile]):
    entity_cls = CompanyProfile
    table_cls = CompanyProfileTable

    def get_by_rc_number(self, rc_number: str) -> CompanyProfile | None:
        statement = select(CompanyProfileTable).where(
            CompanyProfileTable.rc_number == normalize_rc_number(rc_number)
        )
        return self._to_entity(self._session.exec(statement).first())

    def create(self, profile: CompanyProfile) -> CompanyProfile:
        return super().create(_canonical(profile))

    def update(self, profile: CompanyProfile) -> CompanyProfile:
        return super().update(_canonical(profile))


class ProfileRepository:
    """Resolves the profile variant that matches a user's type."""

    def __init__(self, session: Session) -> None:
        self.individuals = IndividualProfileRepository(session)
        self.riders = RiderProfileRepository(session)
        self.companies = CompanyProfileRepository(session)

    def for_user_type(self, user_type: UserType) -> _ProfileRepository:
        return {
            UserType.INDIVIDUAL: self.individuals,
            UserType.RIDER: self.riders,
            UserType.COMPANY: self.companies,
        }[user_type]

    def get_for_user(self, user: User) -> Profile | None:
        return self.for_user_type(user.user_type).get_by_user_id(user.id)
