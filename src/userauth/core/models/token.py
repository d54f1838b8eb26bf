"""Token models shared by the JWT services and the token service."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

TokenType = Literal["access", "refresh"]


class TokenClaims(BaseModel):
    """Structured representation of verified JWT claims."""

    raw_token: str = Field(default="", description="Original JWT token")
    token_type: TokenType = Field(description="Token type")

    issuer: str = Field(description="Issuer")
    subject: str = Field(description="Subject (user ID)")
    expires_at: int = Field(description="Expiration time")
    issued_at: int = Field(description="Issued at")
    not_before: int | None = Field(default=None, description="Not before")
    jti: str | None = Field(default=None, description="JWT ID (unique token identifier)")

    email: str | None = Field(default=None, description="Email address")

    custom_claims: dict[str, Any] = Field(
        default_factory=dict, description="Custom or additional claims"
    )


class TokenPair(BaseModel):
    """The two bearer artifacts handed to a client after login or refresh."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    access_token: str
    refresh_token: str
