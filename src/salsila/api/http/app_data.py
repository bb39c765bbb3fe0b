from dataclasses import dataclass

from src.salsila.core.security import PasswordHasher
from src.salsila.core.services import (
    DbSessionService,
    JwtGeneratorService,
    JwtVerificationService,
)


@dataclass
class ApplicationDependencies:
    database_service: DbSessionService
    password_hasher: PasswordHasher
    jwt_generation_service: JwtGeneratorService
    jwt_verify_service: JwtVerificationService
