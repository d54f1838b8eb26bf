"""User entity module.

This module contains all User-related classes organized by responsibility:
- User: Domain entity with normalization rules
- UserTable: Database persistence model

Storage access lives in ``src.userauth.core.storage.user_store``.
"""

from .entity import (
    SECRET_FIELDS,
    UNIQUE_FIELDS,
    User,
    normalize_email,
    normalize_name,
    normalize_phone,
)
from .table import UserTable

__all__ = [
    "SECRET_FIELDS",
    "UNIQUE_FIELDS",
    "User",
    "UserTable",
    "normalize_email",
    "normalize_name",
    "normalize_phone",
]
