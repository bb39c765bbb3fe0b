"""Authentication endpoints."""

from fastapi import APIRouter, Depends

from src.salsila.api.http.deps import get_auth_service, get_current_user
from src.salsila.core.services import AuthService, LoginRequest, TokenResponse
from src.salsila.entities.core.user import UserRead

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
def login(
    payload: LoginRequest, auth_service: AuthService = Depends(get_auth_service)
) -> TokenResponse:
    """Exchange email and password for a bearer access token."""
    return auth_service.login(payload.email, payload.password)


@router.get("/me", response_model=UserRead)
def me(user: UserRead = Depends(get_current_user)) -> UserRead:
    """Return the user the bearer token was issued to."""
    return user
