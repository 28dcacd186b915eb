from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo

from .access.mysql_role_repository import MySQLRoleRepository
from .access.policy import PermissionResolver
from .attendance.mysql_attendance_repository import (
    MySQLStudentAttendanceRepository,
    MySQLTeacherAttendanceRepository,
)
from .attendance.repository import StudentAttendanceRepository, TeacherAttendanceRepository
from .attendance.service import AttendanceService
from .calendar.mysql_calendar_repository import MySQLCalendarEventRepository
from .calendar.repository import CalendarEventRepository
from .calendar.service import CalendarService
from .database.connection import DatabaseConnection, DBConfig
from .reports.service import AttendanceReportService
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.repository import ScheduleRepository
from .schedules.service import ScheduleService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import UserService


@dataclass(frozen=True)
class Container:
    tz: tzinfo

    schedules_repo: ScheduleRepository
    events_repo: CalendarEventRepository
    teacher_attendance_repo: TeacherAttendanceRepository
    student_attendance_repo: StudentAttendanceRepository
    users_repo: UserRepository

    permissions: PermissionResolver
    schedule_service: ScheduleService
    calendar_service: CalendarService
    attendance_service: AttendanceService
    report_service: AttendanceReportService
    user_service: UserService


def assemble(
    *,
    tz: tzinfo,
    schedules_repo: ScheduleRepository,
    events_repo: CalendarEventRepository,
    teacher_attendance_repo: TeacherAttendanceRepository,
    student_attendance_repo: StudentAttendanceRepository,
    users_repo: UserRepository,
    permissions: PermissionResolver,
    clock=None,
) -> Container:
    """Wire services over the given repositories (MySQL in the app, fakes in tests)."""

    return Container(
        tz=tz,
        schedules_repo=schedules_repo,
        events_repo=events_repo,
        teacher_attendance_repo=teacher_attendance_repo,
        student_attendance_repo=student_attendance_repo,
        users_repo=users_repo,
        permissions=permissions,
        schedule_service=ScheduleService(schedules_repo),
        calendar_service=CalendarService(events_repo, schedules_repo, tz=tz),
        attendance_service=AttendanceService(
            teacher_attendance_repo,
            student_attendance_repo,
            schedules_repo,
            tz=tz,
            clock=clock,
        ),
        report_service=AttendanceReportService(teacher_attendance_repo),
        user_service=UserService(users_repo),
    )


def build_container(*, db_config: dict, tz: tzinfo) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return assemble(
        tz=tz,
        schedules_repo=MySQLScheduleRepository(conn),
        events_repo=MySQLCalendarEventRepository(conn),
        teacher_attendance_repo=MySQLTeacherAttendanceRepository(conn),
        student_attendance_repo=MySQLStudentAttendanceRepository(conn),
        users_repo=MySQLUserRepository(conn),
        permissions=PermissionResolver(MySQLRoleRepository(conn)),
    )
