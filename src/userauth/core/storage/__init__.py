"""User storage abstractions."""

from .user_store import (
    InMemoryUserStore,
    SqlUserStore,
    UserStore,
    create_user_store,
)

__all__ = ["UserStore", "InMemoryUserStore", "SqlUserStore", "create_user_store"]
