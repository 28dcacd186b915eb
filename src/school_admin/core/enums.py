from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles known to the access policy."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"
    PARENT = "parent"


class StudentAttendanceStatus(str, Enum):
    PRESENT = "present"
    LATE = "late"
    EXCUSED = "excused"
    SICK = "sick"
    ABSENT = "absent"


class TeacherAttendanceStatus(str, Enum):
    """Teacher attendance states (hadir = present, sakit = sick, izin = leave, alfa = absent)."""

    HADIR = "hadir"
    SAKIT = "sakit"
    IZIN = "izin"
    ALFA = "alfa"


class EventType(str, Enum):
    HOLIDAY = "HOLIDAY"
    EXAM = "EXAM"
    EVENT = "EVENT"


class FeatureCategory(str, Enum):
    REGULAR_CLASS = "regular-class"
    HOLIDAY = "holiday"
    EXAM = "exam"
    EVENT = "event"


class FeatureSource(str, Enum):
    SCHEDULE = "schedule"
    SPECIAL = "special"


class UserType(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    PARENT = "parent"
