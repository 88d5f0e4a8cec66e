import time
from typing import Any, Protocol

from authlib.common.security import generate_token
from authlib.jose import JoseError, jwt
from loguru import logger

from src.auth_core.core.models.auth import AuthTokenPayload, AuthTokens
from src.auth_core.runtime.config.config_data import JWTConfig
from src.auth_core.runtime.context import get_config

_RESERVED_CLAIMS = {"iss", "sub", "aud", "exp", "iat", "nbf", "jti"}


class TokenSigningError(RuntimeError):
    """Tokens could not be produced; a configuration fault, not a user error."""


class JwtGeneratorService:
    """Service for generating signed JWTs using authlib."""

    def __init__(self, config: JWTConfig | None = None):
        self._config = config

    @property
    def config(self) -> JWTConfig:
        return self._config or get_config().jwt

    def generate_jwt(
        self,
        subject: str,
        claims: dict[str, Any] | None = None,
        expires_in_seconds: int = 3600,
        audience: str | list[str] | None = None,
        include_jti: bool = True,
    ) -> str:
        """Generate a signed JWT.

        Args:
            subject: Subject (sub) claim, the user ID
            claims: Additional claims to include in the token
            expires_in_seconds: Token lifetime in seconds
            audience: Audience (aud) claim (defaults to config audiences)
            include_jti: Whether to include a unique JWT ID claim

        Returns:
            Signed JWT token string

        Raises:
            TokenSigningError: If the secret or algorithm is not usable
        """
        config = self.config

        if not config.secret:
            raise TokenSigningError("JWT signing secret not configured")

        if config.algorithm not in config.allowed_algorithms:
            logger.debug(
                "Attempted to use disallowed algorithm: {}, only {} are allowed",
                config.algorithm,
                config.allowed_algorithms,
            )
            raise TokenSigningError(f"Algorithm {config.algorithm} not allowed")

        now = int(time.time())
        payload: dict[str, Any] = {
            "iss": config.issuer,
            "sub": subject,
            "aud": audience or config.audiences,
            "exp": now + expires_in_seconds,
            "iat": now,
            "nbf": now,
        }
        if include_jti:
            payload["jti"] = generate_token(16)

        if claims:
            payload.update(
                {k: v for k, v in claims.items() if k not in _RESERVED_CLAIMS}
            )

        try:
            token = jwt.encode({"alg": config.algorithm, "typ": "JWT"}, payload, config.secret)
        except JoseError as e:
            raise TokenSigningError(f"JWT encoding failed: {e}") from e

        # authlib returns bytes
        return token.decode() if isinstance(token, bytes) else token

    def generate_access_token(self, user_id: str, **extra_claims) -> str:
        return self.generate_jwt(
            subject=user_id,
            claims=extra_claims,
            expires_in_seconds=self.config.access_token_ttl_seconds,
        )

    def generate_refresh_token(self, user_id: str, **extra_claims) -> str:
        claims = {"token_type": "refresh", **extra_claims}
        return self.generate_jwt(
            subject=user_id,
            claims=claims,
            expires_in_seconds=self.config.refresh_token_ttl_seconds,
        )

    def decode(self, token: str) -> dict[str, Any]:
        """Verify ``token``'s signature and time claims and return its claims."""
        config = self.config
        if not config.secret:
            raise TokenSigningError("JWT signing secret not configured")
        claims = jwt.decode(token, config.secret)
        claims.validate()
        return dict(claims)


class TokenIssuer(Protocol):
    def issue(self, payload: AuthTokenPayload) -> AuthTokens: ...


class JwtTokenIssuer:
    """Issues an access/refresh token pair carrying the identity claims."""

    def __init__(self, generator: JwtGeneratorService | None = None):
        self._generator = generator or JwtGeneratorService()

    def issue(self, payload: AuthTokenPayload) -> AuthTokens:
        claims = payload.to_claims()
        return AuthTokens(
            access_token=self._generator.generate_access_token(payload.user_id, **claims),
            refresh_token=self._generator.generate_refresh_token(
                payload.user_id, **claims
            ),
        )
