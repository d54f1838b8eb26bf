"""Infrastructure exceptions raised below the service layer.

Services catch these and translate them into a ``ServiceError``; they never
cross into the HTTP layer.
"""

from typing import Any


class StoreError(RuntimeError):
    """The user store could not complete an operation."""


class DuplicateKeyError(StoreError):
    """A write would violate the uniqueness of email or phone."""

    def __init__(self, fields: dict[str, Any]):
        self.fields = fields
        names = ", ".join(sorted(fields)) or "unique key"
        super().__init__(f"Duplicate value for {names}")


class TokenError(Exception):
    """Base class for token failures."""


class TokenSigningError(TokenError):
    """Token could not be signed (missing secret, bad algorithm, encoder failure)."""


class TokenVerificationError(TokenError):
    """Token is malformed, has a bad signature, is expired or of the wrong type."""
