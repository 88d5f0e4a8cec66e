"""OAuth identity repository for data access operations."""

from sqlmodel import Session, select

from src.auth_core.entities.core.oauth_identity.entity import OAuthIdentity
from src.auth_core.entities.core.oauth_identity.table import OAuthIdentityTable
from src.auth_core.entities.core.user.entity import User
from src.auth_core.entities.core.user.table import UserTable


class OAuthIdentityRepository:
    """Data-access layer for linked provider identities."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, identity: OAuthIdentity) -> OAuthIdentity:
        """Insert ``identity``; a duplicate link surfaces here as IntegrityError."""
        row = OAuthIdentityTable.model_validate(identity, from_attributes=True)
        self._session.add(row)
        self._session.flush()
        return OAuthIdentity.model_validate(row, from_attributes=True)

    def get_by_provider_account(
        self, provider: str, provider_account_id: str
    ) -> OAuthIdentity | None:
        statement = select(OAuthIdentityTable).where(
            (OAuthIdentityTable.provider == provider)
            & (OAuthIdentityTable.provider_account_id == provider_account_id)
        )
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return OAuthIdentity.model_validate(row, from_attributes=True)

    def get_by_user_and_provider(
        self, user_id: str, provider: str
    ) -> OAuthIdentity | None:
        statement = select(OAuthIdentityTable).where(
            (OAuthIdentityTable.user_id == user_id)
            & (OAuthIdentityTable.provider == provider)
        )
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return OAuthIdentity.model_validate(row, from_attributes=True)

    def list_by_user(self, user_id: str) -> list[OAuthIdentity]:
        statement = (
            select(OAuthIdentityTable)
            .where(OAuthIdentityTable.user_id == user_id)
            .order_by(OAuthIdentityTable.created_at)
        )
        return [
            OAuthIdentity.model_validate(row, from_attributes=True)
            for row in self._session.exec(statement).all()
        ]

    def get_user_by_provider_account(
        self, provider: str, provider_account_id: str
    ) -> User | None:
        statement = (
            select(UserTable)
            .join(OAuthIdentityTable, OAuthIdentityTable.user_id == UserTable.id)
            .where(
                (OAuthIdentityTable.provider == provider)
                & (OAuthIdentityTable.provider_account_id == provider_account_id)
            )
        )
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    def delete_by_user_and_provider(self, user_id: str, provider: str) -> bool:
        statement = select(OAuthIdentityTable).where(
            (OAuthIdentityTable.user_id == user_id)
            & (OAuthIdentityTable.provider == provider)
        )
        row = self._session.exec(statement).first()
        if row is None:
            return False
        self._session.delete(row)
        self._session.flush()
        return True
