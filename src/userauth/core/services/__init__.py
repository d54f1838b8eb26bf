"""Core services exports."""

# Database Service
from .credential_service import CredentialService
from .database.db_session import DbSessionService

# JWT Services
from .jwt.jwt_gen import JwtGeneratorService
from .jwt.jwt_verify import JwtVerificationService
from .password_service import PasswordHasher
from .token_service import TokenService
from .verification_service import VerificationService

__all__ = [
    # JWT Services
    "JwtGeneratorService",
    "JwtVerificationService",
    # Account Services
    "CredentialService",
    "PasswordHasher",
    "TokenService",
    "VerificationService",
    # Database Service
    "DbSessionService",
]
