"""User domain entity."""

from pydantic import Field, field_validator

from src.userauth.entities._base import Entity

# Fields a caller may never read back through the public profile.
SECRET_FIELDS = frozenset(
    {
        "password_hash",
        "email_verification_token",
        "phone_verification_token",
        "refresh_token",
    }
)

# Fields that carry a uniqueness constraint.
UNIQUE_FIELDS = ("email", "phone")


def normalize_email(value: str) -> str:
    return value.strip().lower()


def normalize_phone(value: str) -> str:
    return value.strip()


def normalize_name(value: str) -> str:
    return value.strip().lower()


class User(Entity):
    """A registered identity with its credential and token state.

    This is the domain model stored by every ``UserStore`` implementation.
    It inherits from Entity to get auto-generated UUID identifiers.
    """

    email: str = Field(description="Login email, lowercased and unique")
    phone: str = Field(description="Phone number, unique")
    first_name: str = Field(description="User's first name")
    last_name: str | None = Field(default=None, description="User's last name")
    password_hash: str = Field(min_length=1, description="bcrypt hash of the password")

    email_verified: bool = Field(default=False)
    phone_verified: bool = Field(default=False)
    email_verification_token: str | None = Field(default=None)
    phone_verification_token: str | None = Field(default=None)
    refresh_token: str | None = Field(
        default=None, description="Most recently issued refresh token"
    )

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator("phone")
    @classmethod
    def _normalize_phone(cls, value: str) -> str:
        return normalize_phone(value)

    @field_validator("first_name")
    @classmethod
    def _normalize_first_name(cls, value: str) -> str:
        return normalize_name(value)

    @field_validator("last_name")
    @classmethod
    def _normalize_last_name(cls, value: str | None) -> str | None:
        return normalize_name(value) if value is not None else None

    def public_data(self) -> dict:
        """All fields except credentials and outstanding tokens."""
        return self.model_dump(exclude=set(SECRET_FIELDS))
