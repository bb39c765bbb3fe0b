import time
from typing import Any

from authlib.common.security import generate_token
from authlib.jose import JoseError, jwt
from loguru import logger

from src.salsila.core.errors import ConfigurationError
from src.salsila.runtime.config.config_data import JWTConfig
from src.salsila.runtime.context import get_config

_REGISTERED_CLAIMS = {"iss", "sub", "aud", "exp", "iat", "nbf", "jti"}


class JwtGeneratorService:
    """Service for generating JWT tokens for API authentication."""

    def __init__(self, jwt_config: JWTConfig | None = None):
        self._config = jwt_config

    @property
    def config(self) -> JWTConfig:
        return self._config or get_config().jwt

    def generate_jwt(
        self,
        subject: str,
        claims: dict[str, Any] | None = None,
        expires_in_seconds: int | None = None,
        valid_after_seconds: int = 0,
        include_jti: bool = True,
    ) -> str:
        """Generate a signed JWT using authlib.

        Args:
            subject: Subject (sub) claim, the user uid
            claims: Additional claims to include in the token
            expires_in_seconds: Token lifetime (defaults to the configured TTL)
            valid_after_seconds: Time in seconds before the token is valid
            include_jti: Whether to include a unique JWT ID claim

        Returns:
            Signed JWT token string

        Raises:
            ConfigurationError: If the signing secret or algorithm is unusable
        """
        cfg = self.config

        if not cfg.secret:
            raise ConfigurationError("JWT signing secret not configured")

        if cfg.algorithm not in cfg.allowed_algorithms:
            logger.debug(
                "Attempted to use disallowed algorithm: {}, only {} are allowed",
                cfg.algorithm,
                cfg.allowed_algorithms,
            )
            raise ConfigurationError(f"Algorithm {cfg.algorithm} not allowed")

        now = int(time.time())
        ttl = cfg.access_token_ttl_seconds if expires_in_seconds is None else expires_in_seconds

        payload: dict[str, Any] = {
            "iss": cfg.issuer,
            "sub": subject,
            "aud": cfg.audiences,
            "exp": now + ttl,
            "iat": now,
            "nbf": now + valid_after_seconds,
        }

        if include_jti:
            payload["jti"] = generate_token(16)

        if claims:
            payload.update(
                {k: v for k, v in claims.items() if k not in _REGISTERED_CLAIMS}
            )

        header = {"alg": cfg.algorithm, "typ": "JWT"}
        try:
            token = jwt.encode(header, payload, cfg.secret)
        except JoseError as e:
            raise ConfigurationError(f"JWT encoding failed: {e}") from e

        # authlib returns bytes
        return token.decode() if isinstance(token, bytes) else token

    def generate_access_token(
        self,
        user_uid: str,
        *,
        role_id: int | None = None,
        email: str | None = None,
        expires_in_seconds: int | None = None,
        **extra_claims: Any,
    ) -> str:
        """Generate an access token for a user."""
        claims: dict[str, Any] = {"token_type": "access"}
        if role_id is not None:
            claims["role_id"] = role_id
        if email:
            claims["email"] = email
        claims.update(extra_claims)

        return self.generate_jwt(
            subject=user_uid,
            claims=claims,
            expires_in_seconds=expires_in_seconds,
        )
