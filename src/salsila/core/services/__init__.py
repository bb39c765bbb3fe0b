"""Core services exports."""

# Auth Services
from .auth.auth_service import AuthService, LoginRequest, TokenResponse

# Database Services
from .database.db_manage import DbManageService
from .database.db_session import DbSessionService

# JWT Services
from .jwt.jwt_gen import JwtGeneratorService
from .jwt.jwt_verify import JwtVerificationService

# User Services
from .user.user_service import UserService

__all__ = [
    # Auth Services
    "AuthService",
    "LoginRequest",
    "TokenResponse",
    # Database Services
    "DbManageService",
    "DbSessionService",
    # JWT Services
    "JwtGeneratorService",
    "JwtVerificationService",
    # User Services
    "UserService",
]
