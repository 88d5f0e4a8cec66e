"""User repository for data access operations."""

from sqlmodel import Session, select

from src.auth_core.entities.core._base import utc_now
from src.auth_core.entities.core.profile.table import (
    IndividualProfileTable,
    RiderProfileTable,
)
from src.auth_core.entities.core.user.entity import User
from src.auth_core.entities.core.user.table import UserTable


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserRepository:
    """Data-access layer for users."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, user_id: str) -> User | None:
        row = self._session.get(UserTable, user_id)
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    def get_by_email(self, email: str) -> User | None:
        statement = select(UserTable).where(UserTable.email == normalize_email(email))
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    def exists_by_email(self, email: str) -> bool:
        return self.get_by_email(email) is not None

    def get_by_national_id(self, id_number: str) -> User | None:
        """Return the user whose individual or rider profile claims ``id_number``."""
        for profile_table in (IndividualProfileTable, RiderProfileTable):
            statement = (
                select(UserTable)
                .join(profile_table, profile_table.user_id == UserTable.id)
                .where(profile_table.id_number == id_number)
            )
            row = self._session.exec(statement).first()
            if row is not None:
                return User.model_validate(row, from_attributes=True)
        return None

    def create(self, user: User) -> User:
        """Insert ``user``; constraint violations surface here as IntegrityError."""
        row = UserTable.model_validate(user, from_attributes=True)
        row.email = normalize_email(row.email)
        self._session.add(row)
        self._session.flush()
        return User.model_validate(row, from_attributes=True)

    def update(self, user: User) -> User:
        row = self._session.get(UserTable, user.id)
        if row is None:
            raise ValueError(f"User {user.id} does not exist")

        data = user.model_dump(exclude={"id", "created_at", "updated_at"})
        data["email"] = normalize_email(data["email"])
        for field, value in data.items():
            setattr(row, field, value)
        row.updated_at = utc_now()

        self._session.add(row)
        self._session.flush()
        return User.model_validate(row, from_attributes=True)

    def delete(self, user_id: str) -> bool:
        row = self._session.get(UserTable, user_id)
        if row is None:
            return False
        self._session.delete(row)
        self._session.flush()
        return True
