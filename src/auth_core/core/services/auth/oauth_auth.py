"""Resolution of OAuth assertions to user identities, and identity linking."""

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from src.auth_core.core.errors import OAuthAuthError, OAuthErrorCode
from src.auth_core.core.models.auth import (
    AuthResponse,
    AuthTokenPayload,
    OAuthAuthInput,
)
from src.auth_core.core.services.jwt.jwt_gen import TokenIssuer
from src.auth_core.entities.core.oauth_identity.entity import OAuthIdentity
from src.auth_core.entities.core.oauth_identity.repository import (
    OAuthIdentityRepository,
)
from src.auth_core.entities.core.profile.entity import IndividualProfile
from src.auth_core.entities.core.profile.repository import ProfileRepository
from src.auth_core.entities.core.user.entity import User, UserType
from src.auth_core.entities.core.user.repository import (
    UserRepository,
    normalize_email,
)

_ALREADY_LINKED_MESSAGE = "This OAuth account is already linked to another user"


def _provider_value(provider) -> str:
    return getattr(provider, "value", provider)


class OAuthAuthService:
    """Maps provider identities onto users without duplicating or orphaning them.

    Invariants kept here and backed by unique constraints:
    - a user links each provider at most once
    - a provider account belongs to at most one user
    - a passwordless user never loses its last linked identity
    """

    def __init__(self, db_session: Session, token_issuer: TokenIssuer):
        self._db_session = db_session
        self._token_issuer = token_issuer
        self._user_repo = UserRepository(db_session)
        self._profile_repo = ProfileRepository(db_session)
        self._identity_repo = OAuthIdentityRepository(db_session)

    async def authenticate_with_oauth(self, data: OAuthAuthInput) -> AuthResponse:
        """Sign in with a completed provider callback.

        Resolution order, first match wins:
        1. a user already linked to (provider, provider_account_id)
        2. a user with the asserted email, which gets the identity linked
        3. a new passwordless individual user with profile and identity
        """
        provider = _provider_value(data.provider)

        user = self._identity_repo.get_user_by_provider_account(
            provider, data.provider_account_id
        )
        if user is not None:
            logger.debug("Returning {} user {}", provider, user.id)
            return self._auth_response(user)

        user = self._user_repo.get_by_email(data.email)
        if user is not None:
            self.link_provider(
                user.id, provider, data.provider_account_id, data.email
            )
            if data.email_verified and not user.email_verified:
                user.email_verified = True
                try:
                    user = self._user_repo.update(user)
                    self._db_session.commit()
                except Exception:
                    self._db_session.rollback()
                    raise
            return self._auth_response(user)

        return self._create_user_with_oauth(data)

    def link_provider(
        self,
        user_id: str,
        provider: str,
        provider_account_id: str,
        provider_email: str | None = None,
    ) -> OAuthIdentity:
        """Link a provider account to ``user_id``.

        Linking a provider the user already has is a no-op and returns the
        existing identity.

        Raises:
            OAuthAuthError: ``OAUTH_ACCOUNT_LINKED`` if the provider account
                belongs to a different user
        """
        provider = _provider_value(provider)

        existing = self._identity_repo.get_by_provider_account(
            provider, provider_account_id
        )
        if existing is not None and existing.user_id != user_id:
            raise OAuthAuthError(
                _ALREADY_LINKED_MESSAGE, OAuthErrorCode.OAUTH_ACCOUNT_LINKED
            )

        current = self._identity_repo.get_by_user_and_provider(user_id, provider)
        if current is not None:
            return current

        identity = OAuthIdentity(
            provider=provider,
            provider_account_id=provider_account_id,
            provider_email=normalize_email(provider_email) if provider_email else None,
            user_id=user_id,
        )
        try:
            identity = self._identity_repo.create(identity)
            self._db_session.commit()
        except IntegrityError as e:
            self._db_session.rollback()
            # Lost a race: accept our own concurrent link, reject anyone else's
            winner = self._identity_repo.get_by_provider_account(
                provider, provider_account_id
            )
            if winner is not None and winner.user_id == user_id:
                return winner
            current = self._identity_repo.get_by_user_and_provider(user_id, provider)
            if current is not None and winner is None:
                return current
            raise OAuthAuthError(
                _ALREADY_LINKED_MESSAGE, OAuthErrorCode.OAUTH_ACCOUNT_LINKED
            ) from e

        logger.info("Linked {} account to user {}", provider, user_id)
        return identity

    def unlink_provider(self, user_id: str, provider: str) -> bool:
        """Remove the ``provider`` identity of ``user_id``.

        A password counts as an authentication method of its own, so only a
        passwordless user with a single linked identity is refused.

        Returns:
            Whether an identity row was deleted
        """
        provider = _provider_value(provider)

        user = self._user_repo.get(user_id)
        if user is None:
            raise OAuthAuthError("User not found", OAuthErrorCode.USER_NOT_FOUND)

        identities = self._identity_repo.list_by_user(user_id)
        if not user.has_password and len(identities) <= 1:
            raise OAuthAuthError(
                "Cannot unlink the only authentication method. Please set a password first.",
                OAuthErrorCode.CANNOT_UNLINK_ONLY_AUTH,
            )

        try:
            deleted = self._identity_repo.delete_by_user_and_provider(user_id, provider)
            self._db_session.commit()
        except Exception:
            self._db_session.rollback()
            raise

        if deleted:
            logger.info("Unlinked {} from user {}", provider, user_id)
        return deleted

    def get_linked_providers(self, user_id: str) -> list[str]:
        return [identity.provider for identity in self._identity_repo.list_by_user(user_id)]

    def _create_user_with_oauth(self, data: OAuthAuthInput) -> AuthResponse:
        provider = _provider_value(data.provider)
        email = normalize_email(data.email)

        user = User(
            email=email,
            password=None,
            user_type=UserType.INDIVIDUAL,
            email_verified=data.email_verified,
            terms_accepted=True,
        )
        profile = IndividualProfile(
            user_id=user.id,
            first_name=data.first_name.strip(),
            last_name=data.last_name.strip(),
        )
        identity = OAuthIdentity(
            provider=provider,
            provider_account_id=data.provider_account_id,
            provider_email=email,
            user_id=user.id,
        )

        try:
            user = self._user_repo.create(user)
            profile = self._profile_repo.individuals.create(profile)
            self._identity_repo.create(identity)
            self._db_session.commit()
        except IntegrityError as e:
            self._db_session.rollback()
            if (
                self._identity_repo.get_by_provider_account(
                    provider, data.provider_account_id
                )
                is not None
            ):
                raise OAuthAuthError(
                    _ALREADY_LINKED_MESSAGE, OAuthErrorCode.OAUTH_ACCOUNT_LINKED
                ) from e
            if self._user_repo.exists_by_email(email):
                raise OAuthAuthError(
                    "A user with this email already exists",
                    OAuthErrorCode.EMAIL_EXISTS,
                ) from e
            raise
        except Exception:
            self._db_session.rollback()
            raise

        logger.info("Created user {} from {} sign-in", user.id, provider)
        return self._issue(user, profile)

    def _auth_response(self, user: User) -> AuthResponse:
        profile = self._profile_repo.get_for_user(user)
        if profile is None:
            raise OAuthAuthError(
                "User profile not found", OAuthErrorCode.PROFILE_NOT_FOUND
            )
        return self._issue(user, profile)

    def _issue(self, user: User, profile) -> AuthResponse:
        tokens = self._token_issuer.issue(
            AuthTokenPayload(email=user.email, user_id=user.id, user_type=user.user_type)
        )
        return AuthResponse(profile=profile, tokens=tokens, user_id=user.id)
