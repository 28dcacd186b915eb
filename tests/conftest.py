from __future__ import annotations

from datetime import datetime

import pytest

from fakes import (
    UTC,
    InMemoryEvents,
    InMemorySchedules,
    InMemoryStudentAttendance,
    InMemoryTeacherAttendance,
    InMemoryUsers,
    make_event,
    make_slot,
)
from school_admin.access.policy import PermissionResolver
from school_admin.container import assemble


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 3, 1, 7, 15, 0)


@pytest.fixture
def container(fixed_now):
    schedules = InMemorySchedules([make_slot()], student_classes={"s1": "c10a"})
    return assemble(
        tz=UTC,
        schedules_repo=schedules,
        events_repo=InMemoryEvents([make_event()]),
        teacher_attendance_repo=InMemoryTeacherAttendance(teachers=[{"id": "t1", "name": "Budi"}], schedules=schedules),
        student_attendance_repo=InMemoryStudentAttendance(),
        users_repo=InMemoryUsers(),
        permissions=PermissionResolver(),
        clock=lambda: fixed_now,
    )
