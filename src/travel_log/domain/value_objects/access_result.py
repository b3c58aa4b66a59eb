"""Typed results returned by repositories."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class AccessErrorKind(Enum):
    """Machine-checkable failure categories."""
    UNAUTHENTICATED = "unauthenticated"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    MALFORMED_RECORD = "malformed_record"
    STORE_UNAVAILABLE = "store_unavailable"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class AccessError:
    """Failure reported by a repository operation."""

    kind: AccessErrorKind
    message: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


@dataclass(frozen=True)
class AccessResult(Generic[T]):
    """Discriminated success/failure result.

    Exactly one of ``value`` (on success) and ``error`` (on failure) is
    meaningful. Use :meth:`ok` and :meth:`fail` to build instances.
    """

    success: bool
    value: T | None = None
    error: AccessError | None = None

    @classmethod
    def ok(cls, value: T | None = None) -> "AccessResult[T]":
        """Create a successful result."""
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, kind: AccessErrorKind, message: str) -> "AccessResult[T]":
        """Create a failed result."""
        return cls(success=False, error=AccessError(kind=kind, message=message))

    @classmethod
    def from_error(cls, error: AccessError) -> "AccessResult[T]":
        """Re-wrap an existing error, e.g. to change the value type."""
        return cls(success=False, error=error)

    @property
    def is_failure(self) -> bool:
        return not self.success

    @property
    def error_kind(self) -> AccessErrorKind | None:
        return self.error.kind if self.error else None

    @property
    def message(self) -> str | None:
        return self.error.message if self.error else None

    def get_or_none(self) -> T | None:
        """Return the value on success, ``None`` on failure."""
        return self.value if self.success else None
