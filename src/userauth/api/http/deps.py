"""FastAPI dependency implementations."""

from __future__ import annotations

from fastapi import Depends, Request

from src.userauth.api.http.app_data import ApplicationDependencies
from src.userauth.api.http.responses import ApiError
from src.userauth.core.result import Err
from src.userauth.core.services import (
    CredentialService,
    TokenService,
    VerificationService,
)
from src.userauth.core.storage.user_store import UserStore
from src.userauth.entities.user import User
from src.userauth.runtime.context import get_config


def get_user_store(request: Request) -> UserStore:
    """Get the user store instance."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.user_store


def get_credential_service(request: Request) -> CredentialService:
    """Get the credential service instance."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.credential_service


def get_token_service(request: Request) -> TokenService:
    """Get the token service instance."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.token_service


def get_verification_service(request: Request) -> VerificationService:
    """Get the verification service instance."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    return app_deps.verification_service


def extract_access_token(request: Request) -> str | None:
    """Access token from the auth cookie, else from an ``Authorization: Bearer`` header."""
    token = request.cookies.get(get_config().security.access_cookie_name)
    if token:
        return token

    auth_header = request.headers.get("Authorization", "")
    scheme, _, credentials = auth_header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


def get_current_user(
    request: Request,
    token_service: TokenService = Depends(get_token_service),
) -> User:
    """Authenticate the request and load the referenced user record."""
    result = token_service.authenticate(extract_access_token(request))
    if isinstance(result, Err):
        raise ApiError(result.error)
    return result.value
