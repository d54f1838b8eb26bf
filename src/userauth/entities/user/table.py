"""User database table model."""

from sqlmodel import Field

from src.userauth.entities._base import EntityTable


class UserTable(EntityTable, table=True):
    """Database persistence model for users.

    This represents how the User entity is stored in the database.
    It's separate from the domain entity to maintain clean architecture
    while keeping related code together.
    """

    __tablename__ = "users"

    email: str = Field(unique=True, index=True)
    phone: str = Field(unique=True, index=True)
    first_name: str
    last_name: str | None = None
    password_hash: str

    email_verified: bool = False
    phone_verified: bool = False
    email_verification_token: str | None = Field(default=None, index=True)
    phone_verification_token: str | None = Field(default=None, index=True)
    refresh_token: str | None = None
