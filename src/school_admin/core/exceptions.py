from __future__ import annotations

from typing import Optional, Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is missing, malformed or violates domain rules."""

    def __init__(self, message: str, *, field: Optional[str] = None, subject_id: Optional[str] = None):
        super().__init__(message)
        self.field = field
        self.subject_id = subject_id

    def to_dict(self) -> dict:
        out: dict = {"error": str(self)}
        if self.field:
            out["field"] = self.field
        if self.subject_id:
            out["id"] = self.subject_id
        return out


class ConflictError(DomainError):
    """Raised when a write would violate a uniqueness invariant."""

    def __init__(self, message: str, *, conflicting: Sequence[str] = ()):
        super().__init__(message)
        self.conflicting = list(conflicting)


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class StorageError(Exception):
    """Raised when the persistence layer fails.

    Not a DomainError: the caller cannot fix it by changing input.
    """
