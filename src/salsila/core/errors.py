"""Application error taxonomy.

Every error raised by the domain services derives from ``AppError`` and
carries the HTTP status the API layer answers with. Messages are safe to show
to clients and never include credentials.
"""

from __future__ import annotations

from typing import Any


class ErrorCodes:
    ROLE_REQUIRED = "ROLE_REQUIRED"
    EMAIL_REQUIRED = "EMAIL_REQUIRED"
    EMAIL_NOT_UNIQUE = "EMAIL_NOT_UNIQUE"
    PASSWORD_REQUIRED = "PASSWORD_REQUIRED"
    PASSWORD_TOO_SHORT = "PASSWORD_TOO_SHORT"
    NOT_FOUND = "NOT_FOUND"
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"
    HASHING_ERROR = "HASHING_ERROR"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INVALID_TOKEN = "INVALID_TOKEN"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


class AppError(Exception):
    """Base class for errors surfaced to the API layer."""

    code: str = ErrorCodes.PERSISTENCE_ERROR
    message: str = "Internal error"
    status_code: int = 500

    def __init__(
        self, message: str | None = None, *, details: dict[str, Any] | None = None
    ) -> None:
        if message is not None:
            self.message = message
        self.details = details
        super().__init__(self.message)

    def to_response(self, request_id: str | None) -> dict[str, Any]:
        body: dict[str, Any] = {
            "detail": self.message,
            "code": self.code,
            "request_id": request_id,
        }
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(AppError):
    """A candidate record violates a policy rule."""

    status_code = 400


class RoleRequiredError(ValidationError):
    code = ErrorCodes.ROLE_REQUIRED
    message = "Role is required"


class EmailRequiredError(ValidationError):
    code = ErrorCodes.EMAIL_REQUIRED
    message = "Email is required"


class EmailNotUniqueError(ValidationError):
    code = ErrorCodes.EMAIL_NOT_UNIQUE
    message = "Email is already in use"
    status_code = 409


class PasswordRequiredError(ValidationError):
    code = ErrorCodes.PASSWORD_REQUIRED
    message = "Password is required"


class PasswordTooShortError(ValidationError):
    code = ErrorCodes.PASSWORD_TOO_SHORT
    message = "Password is too short"


class NotFoundError(AppError):
    code = ErrorCodes.NOT_FOUND
    message = "Resource not found"
    status_code = 404


class PersistenceError(AppError):
    """Storage or infrastructure failure."""

    code = ErrorCodes.PERSISTENCE_ERROR
    message = "A storage error occurred"
    status_code = 500


class HashingError(PersistenceError):
    """Computing a credential hash failed."""

    code = ErrorCodes.HASHING_ERROR
    message = "Failed to secure credentials"


class InvalidCredentialsError(AppError):
    code = ErrorCodes.INVALID_CREDENTIALS
    message = "Invalid email or password"
    status_code = 401


class InvalidTokenError(AppError):
    code = ErrorCodes.INVALID_TOKEN
    message = "Invalid or expired access token"
    status_code = 401


class ConfigurationError(AppError):
    code = ErrorCodes.CONFIGURATION_ERROR
    message = "Server is misconfigured"
    status_code = 500
