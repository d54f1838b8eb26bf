"""User storage interface and implementations.

A document-style store for ``User`` records: lookup by any field, lookup by
any of several field predicates (``$or``), creation, partial field updates and
deletion. Uniqueness of email and phone is enforced by every backend.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from loguru import logger
from sqlalchemy import and_, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import select

from src.userauth.core.exceptions import DuplicateKeyError, StoreError
from src.userauth.entities._base import utcnow
from src.userauth.entities.user import UNIQUE_FIELDS, User, UserTable

if TYPE_CHECKING:
    from src.userauth.core.services.database.db_session import DbSessionService

# Fields that are assigned at creation and never rewritten.
IMMUTABLE_FIELDS = frozenset({"id", "created_at"})


class UserStore(ABC):
    """Abstract interface for user storage backends."""

    @abstractmethod
    def get(self, user_id: str) -> User | None:
        """Return the user with this id, or None."""

    @abstractmethod
    def find_one(self, **fields: Any) -> User | None:
        """Return the first user whose fields all equal the given values."""

    @abstractmethod
    def find_any(self, predicates: Iterable[Mapping[str, Any]]) -> User | None:
        """Return the first user matching any of the field-equality predicates.

        Args:
            predicates: e.g. ``[{"email": e}, {"phone": p}]``
        """

    @abstractmethod
    def create(self, user: User) -> User:
        """Persist a new user.

        Raises:
            DuplicateKeyError: email or phone already in use
        """

    @abstractmethod
    def update_fields(self, user_id: str, fields: Mapping[str, Any]) -> User | None:
        """Atomically update only the named fields of one user.

        Returns:
            The updated user, or None when no such user exists

        Raises:
            DuplicateKeyError: the update would break email/phone uniqueness
        """

    @abstractmethod
    def delete(self, user_id: str) -> bool:
        """Remove a user permanently. Returns False when it did not exist."""

    @abstractmethod
    def list_users(self, limit: int = 100) -> list[User]:
        """List users ordered by creation time."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if storage backend is available."""


def _check_field_names(fields: Iterable[str]) -> None:
    unknown = set(fields) - set(User.model_fields)
    if unknown:
        raise ValueError(f"Unknown user fields: {sorted(unknown)}")


def _check_writable(fields: Iterable[str]) -> None:
    _check_field_names(fields)
    immutable = set(fields) & IMMUTABLE_FIELDS
    if immutable:
        raise ValueError(f"Immutable user fields: {sorted(immutable)}")


class InMemoryUserStore(UserStore):
    """In-memory user storage guarded by a single lock."""

    def __init__(self):
        self._data: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def _matches(self, record: dict[str, Any], predicate: Mapping[str, Any]) -> bool:
        return all(record.get(k) == v for k, v in predicate.items())

    def _find_conflicts(
        self, candidate: Mapping[str, Any], exclude_id: str | None = None
    ) -> dict[str, Any]:
        conflicts = {}
        for record in self._data.values():
            if record["id"] == exclude_id:
                continue
            for name in UNIQUE_FIELDS:
                if name in candidate and record.get(name) == candidate[name]:
                    conflicts[name] = candidate[name]
        return conflicts

    def get(self, user_id: str) -> User | None:
        with self._lock:
            record = self._data.get(user_id)
            return User.model_validate(record) if record else None

    def find_one(self, **fields: Any) -> User | None:
        return self.find_any([fields])

    def find_any(self, predicates: Iterable[Mapping[str, Any]]) -> User | None:
        predicates = [p for p in predicates if p]
        for predicate in predicates:
            _check_field_names(predicate)
        with self._lock:
            for record in self._data.values():
                if any(self._matches(record, p) for p in predicates):
                    return User.model_validate(record)
        return None

    def create(self, user: User) -> User:
        record = user.model_dump()
        with self._lock:
            if user.id in self._data:
                raise DuplicateKeyError({"id": user.id})
            conflicts = self._find_conflicts(record)
            if conflicts:
                raise DuplicateKeyError(conflicts)
            self._data[user.id] = record
        return User.model_validate(record)

    def update_fields(self, user_id: str, fields: Mapping[str, Any]) -> User | None:
        _check_writable(fields)
        with self._lock:
            current = self._data.get(user_id)
            if current is None:
                return None
            updated = {**current, **fields, "updated_at": utcnow()}
            # re-run the entity validators so normalization still applies
            validated = User.model_validate(updated)
            conflicts = self._find_conflicts(
                {k: getattr(validated, k) for k in UNIQUE_FIELDS if k in fields},
                exclude_id=user_id,
            )
            if conflicts:
                raise DuplicateKeyError(conflicts)
            self._data[user_id] = validated.model_dump()
            return validated

    def delete(self, user_id: str) -> bool:
        with self._lock:
            return self._data.pop(user_id, None) is not None

    def list_users(self, limit: int = 100) -> list[User]:
        with self._lock:
            records = sorted(self._data.values(), key=lambda r: r["created_at"])
            return [User.model_validate(r) for r in records[:limit]]

    def is_available(self) -> bool:
        """In-memory storage is always available."""
        return True


class SqlUserStore(UserStore):
    """SQL-backed user storage (SQLModel over SQLAlchemy).

    Each call runs in its own transaction; uniqueness comes from the unique
    indexes on ``users.email`` and ``users.phone``.
    """

    def __init__(self, database: DbSessionService):
        self._db = database

    @staticmethod
    def _to_entity(row: UserTable | None) -> User | None:
        if row is None:
            return None
        return User.model_validate(row, from_attributes=True)

    @staticmethod
    def _where(predicate: Mapping[str, Any]):
        return and_(*(getattr(UserTable, name) == value for name, value in predicate.items()))

    def get(self, user_id: str) -> User | None:
        try:
            with self._db.session_scope() as session:
                return self._to_entity(session.get(UserTable, user_id))
        except SQLAlchemyError as e:
            raise StoreError(f"User lookup failed: {e}") from e

    def find_one(self, **fields: Any) -> User | None:
        return self.find_any([fields])

    def find_any(self, predicates: Iterable[Mapping[str, Any]]) -> User | None:
        predicates = [p for p in predicates if p]
        if not predicates:
            return None
        for predicate in predicates:
            _check_field_names(predicate)

        statement = select(UserTable).where(or_(*(self._where(p) for p in predicates)))
        try:
            with self._db.session_scope() as session:
                return self._to_entity(session.exec(statement).first())
        except SQLAlchemyError as e:
            raise StoreError(f"User lookup failed: {e}") from e

    def create(self, user: User) -> User:
        try:
            with self._db.session_scope() as session:
                row = UserTable(**user.model_dump())
                session.add(row)
                session.flush()
                return self._to_entity(row)
        except IntegrityError as e:
            raise DuplicateKeyError({k: getattr(user, k) for k in UNIQUE_FIELDS}) from e
        except SQLAlchemyError as e:
            raise StoreError(f"User creation failed: {e}") from e

    def update_fields(self, user_id: str, fields: Mapping[str, Any]) -> User | None:
        _check_writable(fields)
        try:
            with self._db.session_scope() as session:
                row = session.get(UserTable, user_id)
                if row is None:
                    return None
                validated = User.model_validate(
                    {**User.model_validate(row, from_attributes=True).model_dump(), **fields}
                )
                for name in fields:
                    setattr(row, name, getattr(validated, name))
                row.updated_at = utcnow()
                session.add(row)
                session.flush()
                return self._to_entity(row)
        except IntegrityError as e:
            conflicts = {k: fields[k] for k in UNIQUE_FIELDS if k in fields}
            raise DuplicateKeyError(conflicts) from e
        except SQLAlchemyError as e:
            raise StoreError(f"User update failed: {e}") from e

    def delete(self, user_id: str) -> bool:
        try:
            with self._db.session_scope() as session:
                row = session.get(UserTable, user_id)
                if row is None:
                    return False
                session.delete(row)
                return True
        except SQLAlchemyError as e:
            raise StoreError(f"User deletion failed: {e}") from e

    def list_users(self, limit: int = 100) -> list[User]:
        statement = select(UserTable).order_by(UserTable.created_at).limit(limit)
        try:
            with self._db.session_scope() as session:
                return [self._to_entity(row) for row in session.exec(statement).all()]
        except SQLAlchemyError as e:
            raise StoreError(f"User listing failed: {e}") from e

    def is_available(self) -> bool:
        return self._db.health_check()


def create_user_store(backend: str, database: DbSessionService | None = None) -> UserStore:
    """Build the configured store backend."""
    if backend == "memory":
        logger.warning("Using in-memory user store; data is lost on restart")
        return InMemoryUserStore()
    if database is None:
        raise ValueError("SQL user store requires a database service")
    return SqlUserStore(database)
