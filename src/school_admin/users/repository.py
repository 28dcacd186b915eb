from __future__ import annotations

from typing import Protocol, Sequence

from .model import Profile


class UserRepository(Protocol):
    def create_many(self, profiles: Sequence[tuple[str, Profile]]) -> int:
        """Insert (user_id, profile) pairs in one transaction; returns the row count."""

        raise NotImplementedError

    def existing_emails(self, emails: Sequence[str]) -> set[str]:
        raise NotImplementedError
