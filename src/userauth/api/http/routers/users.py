"""User account endpoints: registration, sessions, profile and verification.

Handlers are plain ``def`` functions so FastAPI runs them on its thread pool;
bcrypt hashing and token signing in one request never block another.
"""

from typing import Any

from fastapi import APIRouter, Depends, Request, status
from starlette.responses import JSONResponse

from src.userauth.api.http.deps import (
    get_credential_service,
    get_current_user,
    get_token_service,
    get_verification_service,
)
from src.userauth.api.http.responses import respond
from src.userauth.core.models.accounts import (
    ChangePasswordRequest,
    EmailRequest,
    LoginRequest,
    PhoneRequest,
    ProfileUpdate,
    RefreshRequest,
    RegisterRequest,
    TokenRequest,
)
from src.userauth.core.models.token import TokenPair
from src.userauth.core.result import Ok
from src.userauth.core.services import CredentialService, TokenService, VerificationService
from src.userauth.entities.user import User
from src.userauth.runtime.context import get_config

router_users = APIRouter(tags=["users"])


def _cookie_settings() -> dict[str, Any]:
    security = get_config().security
    return {
        "httponly": True,
        "secure": security.secure_cookies,
        "samesite": security.cookie_samesite,
        "path": "/",
    }


def _set_token_cookies(response: JSONResponse, pair: TokenPair) -> None:
    config = get_config()
    settings = _cookie_settings()
    response.set_cookie(
        config.security.access_cookie_name,
        pair.access_token,
        max_age=config.jwt.access_token_expires_in,
        **settings,
    )
    response.set_cookie(
        config.security.refresh_cookie_name,
        pair.refresh_token,
        max_age=config.jwt.refresh_token_expires_in,
        **settings,
    )


def _clear_token_cookies(response: JSONResponse) -> None:
    security = get_config().security
    settings = _cookie_settings()
    response.delete_cookie(security.access_cookie_name, **settings)
    response.delete_cookie(security.refresh_cookie_name, **settings)


def _token_response(result, message: str) -> JSONResponse:
    response = respond(result, message)
    if isinstance(result, Ok):
        _set_token_cookies(response, result.value)
    return response


@router_users.post("/register", status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    credentials: CredentialService = Depends(get_credential_service),
) -> JSONResponse:
    """Create an account. Verification tokens are generated for later delivery."""
    return respond(
        credentials.register(payload),
        "User registered successfully",
        status.HTTP_201_CREATED,
    )


@router_users.post("/login")
def login(
    payload: LoginRequest,
    tokens: TokenService = Depends(get_token_service),
) -> JSONResponse:
    """Exchange email and password for an access/refresh token pair.

    Tokens are returned in the body and set as HTTP-only cookies.
    """
    return _token_response(tokens.login(payload.email, payload.password), "Login successful")


@router_users.post("/tokens/refresh")
def refresh_tokens(
    request: Request,
    payload: RefreshRequest | None = None,
    tokens: TokenService = Depends(get_token_service),
) -> JSONResponse:
    """Rotate the refresh token from the session cookie or the request body."""
    refresh_token = request.cookies.get(get_config().security.refresh_cookie_name)
    if not refresh_token and payload is not None:
        refresh_token = payload.refresh_token
    return _token_response(tokens.refresh(refresh_token), "Access token refreshed")


@router_users.post("/logout")
def logout(
    user: User = Depends(get_current_user),
    tokens: TokenService = Depends(get_token_service),
) -> JSONResponse:
    response = respond(tokens.logout(user.id), "Logged out")
    if response.status_code == status.HTTP_200_OK:
        _clear_token_cookies(response)
    return response


@router_users.get("/profile")
def get_profile(
    user: User = Depends(get_current_user),
    credentials: CredentialService = Depends(get_credential_service),
) -> JSONResponse:
    return respond(credentials.get_profile(user.id), "Profile fetched")


@router_users.patch("/profile")
def update_profile(
    payload: ProfileUpdate,
    user: User = Depends(get_current_user),
    credentials: CredentialService = Depends(get_credential_service),
) -> JSONResponse:
    """Update any of firstName, lastName, email and phone."""
    return respond(credentials.update_profile(user.id, payload), "Profile updated")


@router_users.delete("/profile")
def delete_account(
    user: User = Depends(get_current_user),
    credentials: CredentialService = Depends(get_credential_service),
) -> JSONResponse:
    response = respond(credentials.delete(user.id), "Account deleted")
    if response.status_code == status.HTTP_200_OK:
        _clear_token_cookies(response)
    return response


@router_users.post("/password")
def change_password(
    payload: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    credentials: CredentialService = Depends(get_credential_service),
) -> JSONResponse:
    return respond(credentials.change_password(user.id, payload), "Password changed")


# Verification tokens are not returned to the caller; delivery is external.


@router_users.post("/email-verification/send")
def send_email_verification(
    payload: EmailRequest,
    verification: VerificationService = Depends(get_verification_service),
) -> JSONResponse:
    result = verification.issue_email_verification(payload.email)
    if isinstance(result, Ok):
        result = Ok(None)
    return respond(result, "Verification email sent")


@router_users.post("/phone-verification/send")
def send_phone_verification(
    payload: PhoneRequest,
    verification: VerificationService = Depends(get_verification_service),
) -> JSONResponse:
    result = verification.issue_phone_verification(payload.phone)
    if isinstance(result, Ok):
        result = Ok(None)
    return respond(result, "Verification code sent")


@router_users.post("/email-verification/{token}")
def verify_email(
    token: str,
    verification: VerificationService = Depends(get_verification_service),
) -> JSONResponse:
    return respond(verification.consume_email_verification(token), "Email verified")


@router_users.post("/phone-verification")
def verify_phone(
    payload: TokenRequest,
    verification: VerificationService = Depends(get_verification_service),
) -> JSONResponse:
    return respond(verification.consume_phone_verification(payload.token), "Phone verified")
