from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, BinaryIO, Mapping, Optional, Sequence

from ..common.ids import new_id
from ..common.logging import get_logger
from ..core.enums import UserType
from ..core.exceptions import ConflictError
from .importer import RowError, read_profiles
from .model import Profile
from .profiles import build_profile
from .repository import UserRepository

log = get_logger(__name__)


@dataclass(frozen=True)
class ImportResult:
    created_ids: list[str] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "created": len(self.created_ids),
            "ids": list(self.created_ids),
            "errors": [e.to_dict() for e in self.errors],
        }


class UserService:
    """Use cases: create student/teacher/parent records, one at a time or from a spreadsheet."""

    def __init__(self, users: UserRepository):
        self._users = users

    def create_user(self, user_type: UserType | str, payload: Mapping[str, Any]) -> str:
        profile = build_profile(user_type, payload)
        if profile.email and self._users.existing_emails([profile.email]):
            raise ConflictError(f"Email {profile.email} is already registered", conflicting=[profile.email])
        user_id = new_id()
        self._users.create_many([(user_id, profile)])
        return user_id

    def create_many(self, rows: Sequence[tuple[int, Profile]], *, errors: Optional[list[RowError]] = None) -> ImportResult:
        """Insert already-validated profiles; rows whose email is taken become errors."""

        errors = list(errors or [])
        emails = [p.email for _, p in rows if p.email]
        taken = self._users.existing_emails(emails) if emails else set()

        seen: set[str] = set()
        to_insert: list[tuple[str, Profile]] = []
        for row_no, profile in rows:
            if profile.email and (profile.email in taken or profile.email in seen):
                errors.append(RowError(row=row_no, error=f"Email {profile.email} is already registered"))
                continue
            if profile.email:
                seen.add(profile.email)
            to_insert.append((new_id(), profile))

        self._users.create_many(to_insert)
        errors.sort(key=lambda e: e.row)
        log.info("users_imported", created=len(to_insert), errors=len(errors))
        return ImportResult(created_ids=[uid for uid, _ in to_insert], errors=errors)

    def import_users(self, stream: BinaryIO, user_type: UserType | str) -> ImportResult:
        parsed = read_profiles(stream, user_type)
        return self.create_many(parsed.profiles, errors=parsed.errors)
