"""Request and response models for account operations.

Field names are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.userauth.entities.user import User


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(CamelModel):
    """Registration payload.

    Every field is optional at parse time; the credential service reports
    missing or blank fields together as a single BadRequest.
    """

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None
    password: str | None = None
    confirm_password: str | None = None


class LoginRequest(CamelModel):
    email: str | None = None
    password: str | None = None


class ChangePasswordRequest(CamelModel):
    old_password: str | None = None
    new_password: str | None = None
    confirm_password: str | None = None


class ProfileUpdate(CamelModel):
    """Partial profile update; only fields that are sent are applied."""

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone: str | None = None


class RefreshRequest(CamelModel):
    refresh_token: str | None = None


class EmailRequest(CamelModel):
    email: str | None = None


class PhoneRequest(CamelModel):
    phone: str | None = None


class TokenRequest(CamelModel):
    token: str | None = None


class UserProfile(CamelModel):
    """Public view of a user: no password hash and no outstanding tokens."""

    id: str
    email: str
    phone: str
    first_name: str
    last_name: str | None = None
    email_verified: bool = False
    phone_verified: bool = False
    created_at: datetime = Field(description="Creation timestamp (UTC)")
    updated_at: datetime = Field(description="Last update timestamp (UTC)")

    @classmethod
    def from_user(cls, user: User) -> "UserProfile":
        return cls.model_validate(user.public_data())
