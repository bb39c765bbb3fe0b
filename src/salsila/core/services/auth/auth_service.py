from loguru import logger
from pydantic import BaseModel

from src.salsila.core.errors import InvalidCredentialsError, NotFoundError
from src.salsila.core.security import PasswordHasher
from src.salsila.core.services.jwt.jwt_gen import JwtGeneratorService
from src.salsila.core.services.user.user_service import UserService


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class AuthService:
    """Exchanges email and password for a signed access token."""

    def __init__(
        self,
        user_service: UserService,
        hasher: PasswordHasher,
        jwt_generator: JwtGeneratorService,
    ):
        self._user_service = user_service
        self._hasher = hasher
        self._jwt_generator = jwt_generator

    def login(self, email: str, password: str) -> TokenResponse:
        """Authenticate a user.

        Unknown email and wrong password both raise ``InvalidCredentialsError``
        so callers cannot probe which addresses are registered.
        """
        try:
            user = self._user_service.get_user_by_email(email)
        except NotFoundError:
            # Spend the same hashing effort as a real check
            self._hasher.verify(password, self._hasher.placeholder_hash)
            raise InvalidCredentialsError() from None

        if not self._hasher.verify(password, user.password):
            logger.info("Login rejected", user_uid=user.uid)
            raise InvalidCredentialsError()

        if self._hasher.needs_rehash(user.password):
            self._user_service.update_password_hash(
                user.uid, self._hasher.hash(password)
            )
            logger.info("Password hash upgraded", user_uid=user.uid)

        ttl = self._jwt_generator.config.access_token_ttl_seconds
        token = self._jwt_generator.generate_access_token(
            user.uid, role_id=user.role_id, email=user.email, expires_in_seconds=ttl
        )
        logger.info("Login succeeded", user_uid=user.uid)
        return TokenResponse(access_token=token, expires_in=ttl)

