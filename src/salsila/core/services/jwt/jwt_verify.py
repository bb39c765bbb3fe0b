"""JWT verification service."""

from typing import Any

from authlib.jose import JoseError, JsonWebToken
from loguru import logger

from src.salsila.core.errors import ConfigurationError, InvalidTokenError
from src.salsila.runtime.config.config_data import JWTConfig
from src.salsila.runtime.context import get_config


class JwtVerificationService:
    """Verifies access tokens issued by ``JwtGeneratorService``."""

    def __init__(self, jwt_config: JWTConfig | None = None):
        self._config = jwt_config

    @property
    def config(self) -> JWTConfig:
        return self._config or get_config().jwt

    def verify_access_token(self, token: str) -> dict[str, Any]:
        """Validate signature and registered claims, returning the claims.

        Raises:
            InvalidTokenError: If the token is malformed, forged, expired, or
                issued for another issuer or audience
            ConfigurationError: If no verification secret is configured
        """
        cfg = self.config
        if not cfg.secret:
            raise ConfigurationError("JWT signing secret not configured")

        # alg allowlist enforced by the decoder
        decoder = JsonWebToken(cfg.allowed_algorithms)
        claims_options = {
            "iss": {"essential": True, "value": cfg.issuer},
            "aud": {"essential": True, "values": cfg.audiences},
            "sub": {"essential": True},
            "exp": {"essential": True},
        }

        try:
            claims = decoder.decode(token, cfg.secret, claims_options=claims_options)
            claims.validate(leeway=cfg.clock_skew)
        except (JoseError, ValueError) as exc:
            logger.debug("Access token rejected: {}", type(exc).__name__)
            raise InvalidTokenError() from exc

        return dict(claims)
