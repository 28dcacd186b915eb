from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Protocol

WILDCARD = "*"

CALENDAR_READ = "calendar:read"
CALENDAR_WRITE = "calendar:write"
SCHEDULES_READ = "schedules:read"
SCHEDULES_WRITE = "schedules:write"
ATTENDANCE_READ = "attendance:read"
ATTENDANCE_WRITE = "attendance:write"
TEACHER_ATTENDANCE_WRITE = "teacher-attendance:write"
REPORTS_READ = "reports:read"
USERS_IMPORT = "users:import"

DEFAULT_ROLE_PERMISSIONS: dict[str, frozenset[str]] = {
    "admin": frozenset({WILDCARD}),
    "teacher": frozenset({CALENDAR_READ, SCHEDULES_READ, ATTENDANCE_READ, ATTENDANCE_WRITE}),
    "student": frozenset({CALENDAR_READ, SCHEDULES_READ}),
    "parent": frozenset({CALENDAR_READ}),
}


class RoleRepository(Protocol):
    def get_permissions(self, role_name: str) -> Optional[frozenset[str]]:
        raise NotImplementedError


@dataclass(frozen=True)
class AccessPolicy:
    """Decides whether a set of permissions grants a resource.

    A permission matches exactly, through the '*' wildcard, or through a
    '<area>:*' prefix.
    """

    def allows(self, permissions: Iterable[str], resource: str) -> bool:
        granted = set(permissions)
        if WILDCARD in granted or resource in granted:
            return True
        area = resource.split(":", 1)[0]
        return f"{area}:*" in granted


class PermissionResolver:
    """Looks up role permissions, falling back to the built-in defaults."""

    def __init__(self, roles: Optional[RoleRepository] = None, *, policy: Optional[AccessPolicy] = None):
        self._roles = roles
        self._policy = policy or AccessPolicy()

    def permissions_for(self, role_name: Optional[str]) -> frozenset[str]:
        if not role_name:
            return frozenset()
        if self._roles is not None:
            stored = self._roles.get_permissions(role_name)
            if stored is not None:
                return stored
        return DEFAULT_ROLE_PERMISSIONS.get(role_name, frozenset())

    def is_allowed(self, role_name: Optional[str], resource: str) -> bool:
        return self._policy.allows(self.permissions_for(role_name), resource)
