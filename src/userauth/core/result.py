"""Explicit success/failure values returned by core operations.

Every service method returns ``Ok(value)`` or ``Err(ServiceError)``. The HTTP
layer inspects the variant and shapes the response; nothing in between relies
on exceptions for expected failures.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeAlias, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    BAD_REQUEST = "bad_request"
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    INTERNAL = "internal"


@dataclass(frozen=True)
class ServiceError:
    """A failed operation: kind, human-readable message, optional detail."""

    kind: ErrorKind
    message: str
    errors: list[dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    error: ServiceError

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind


Result: TypeAlias = Union[Ok[T], Err]


def bad_request(message: str, errors: list[dict[str, Any]] | None = None) -> Err:
    return Err(ServiceError(ErrorKind.BAD_REQUEST, message, errors or []))


def conflict(message: str, errors: list[dict[str, Any]] | None = None) -> Err:
    return Err(ServiceError(ErrorKind.CONFLICT, message, errors or []))


def unauthorized(message: str = "Unauthorized") -> Err:
    return Err(ServiceError(ErrorKind.UNAUTHORIZED, message))


def not_found(message: str = "Not Found") -> Err:
    return Err(ServiceError(ErrorKind.NOT_FOUND, message))


def internal(message: str = "Something went wrong") -> Err:
    return Err(ServiceError(ErrorKind.INTERNAL, message))
