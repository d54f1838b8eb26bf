from dataclasses import dataclass

from src.userauth.core.services import (
    CredentialService,
    DbSessionService,
    JwtGeneratorService,
    JwtVerificationService,
    PasswordHasher,
    TokenService,
    VerificationService,
)
from src.userauth.core.storage.user_store import UserStore, create_user_store
from src.userauth.runtime.context import get_config


@dataclass
class ApplicationDependencies:
    user_store: UserStore
    credential_service: CredentialService
    token_service: TokenService
    verification_service: VerificationService
    database_service: DbSessionService | None = None


def build_dependencies(
    store: UserStore | None = None,
    database_service: DbSessionService | None = None,
) -> ApplicationDependencies:
    """Wire the services around one user store.

    Without an explicit store, the backend named in ``database.backend`` is
    built from configuration.
    """
    if store is None:
        backend = get_config().database.backend
        if backend == "sql" and database_service is None:
            database_service = DbSessionService()
            database_service.create_all()
        store = create_user_store(backend, database_service)

    credential_service = CredentialService(store, PasswordHasher())

    return ApplicationDependencies(
        user_store=store,
        credential_service=credential_service,
        token_service=TokenService(
            credential_service, JwtGeneratorService(), JwtVerificationService()
        ),
        verification_service=VerificationService(store),
        database_service=database_service,
    )
