"""FastAPI dependency implementations."""

from __future__ import annotations

from collections.abc import Iterator

from fastapi import Depends, Request
from sqlmodel import Session

from src.salsila.api.http.app_data import ApplicationDependencies
from src.salsila.core.errors import InvalidTokenError, NotFoundError
from src.salsila.core.security import PasswordHasher
from src.salsila.core.services import (
    AuthService,
    JwtGeneratorService,
    JwtVerificationService,
    UserService,
)
from src.salsila.entities.core.user import UserGateway, UserRead, UserRepository


def get_db_session(request: Request) -> Iterator[Session]:
    """Yield a request-scoped database session and close it afterwards."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    session = app_deps.database_service.get_session()
    try:
        yield session
    finally:
        session.close()


def get_password_hasher(request: Request) -> PasswordHasher:
    """Get the shared password hasher."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.password_hasher


def get_jwt_generation_service(request: Request) -> JwtGeneratorService:
    """Get the JWT generation service instance."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.jwt_generation_service


def get_jwt_verify_service(request: Request) -> JwtVerificationService:
    """Get the JWT verification service instance."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.jwt_verify_service


def get_user_repository(db: Session = Depends(get_db_session)) -> UserGateway:
    return UserRepository(db)


def get_user_service(
    gateway: UserGateway = Depends(get_user_repository),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> UserService:
    return UserService(gateway, hasher)


def get_auth_service(
    user_service: UserService = Depends(get_user_service),
    hasher: PasswordHasher = Depends(get_password_hasher),
    jwt_generator: JwtGeneratorService = Depends(get_jwt_generation_service),
) -> AuthService:
    return AuthService(user_service, hasher, jwt_generator)


def get_current_user(
    request: Request,
    jwt_verify: JwtVerificationService = Depends(get_jwt_verify_service),
    user_service: UserService = Depends(get_user_service),
) -> UserRead:
    """Authenticate the request using a Bearer access token."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise InvalidTokenError("Missing Bearer token")

    token = auth_header.split(" ", 1)[1]
    claims = jwt_verify.verify_access_token(token)

    try:
        user = user_service.get_user_by_uid(claims["sub"])
    except NotFoundError:
        raise InvalidTokenError("Token subject no longer exists") from None

    request.state.claims = claims
    return user
