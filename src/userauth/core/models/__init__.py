"""Account and token models."""

from .accounts import (
    ChangePasswordRequest,
    EmailRequest,
    LoginRequest,
    PhoneRequest,
    ProfileUpdate,
    RefreshRequest,
    RegisterRequest,
    TokenRequest,
    UserProfile,
)
from .token import TokenClaims, TokenPair

__all__ = [
    "ChangePasswordRequest",
    "EmailRequest",
    "LoginRequest",
    "PhoneRequest",
    "ProfileUpdate",
    "RefreshRequest",
    "RegisterRequest",
    "TokenRequest",
    "UserProfile",
    "TokenClaims",
    "TokenPair",
]
