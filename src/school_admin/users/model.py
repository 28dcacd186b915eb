from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date
from typing import Optional, Union

from ..core.enums import UserType


@dataclass(frozen=True)
class StudentProfile:
    name: str
    email: Optional[str] = None
    gender: Optional[str] = None
    birth_place: Optional[str] = None
    birth_date: Optional[date] = None
    address: Optional[str] = None
    nisn: Optional[str] = None
    nik: Optional[str] = None
    parent_phone: Optional[str] = None
    class_id: Optional[str] = None
    academic_year_id: Optional[str] = None
    enrollment_date: Optional[date] = None


@dataclass(frozen=True)
class TeacherProfile:
    name: str
    email: Optional[str] = None
    gender: Optional[str] = None
    birth_place: Optional[str] = None
    birth_date: Optional[date] = None
    address: Optional[str] = None
    nik: Optional[str] = None
    employee_id: Optional[str] = None
    position: Optional[str] = None
    start_date: Optional[date] = None
    phone: Optional[str] = None


@dataclass(frozen=True)
class ParentProfile:
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    relation: Optional[str] = None
    student_ids: tuple[str, ...] = ()


Profile = Union[StudentProfile, TeacherProfile, ParentProfile]

PROFILE_TYPES: dict[UserType, type] = {
    UserType.STUDENT: StudentProfile,
    UserType.TEACHER: TeacherProfile,
    UserType.PARENT: ParentProfile,
}

DATE_FIELDS = frozenset({"birth_date", "enrollment_date", "start_date"})


def profile_fields(user_type: UserType) -> tuple[str, ...]:
    return tuple(f.name for f in fields(PROFILE_TYPES[user_type]))


def user_type_of(profile: Profile) -> UserType:
    for user_type, cls in PROFILE_TYPES.items():
        if isinstance(profile, cls):
            return user_type
    raise TypeError(f"Unsupported profile type: {type(profile)!r}")
