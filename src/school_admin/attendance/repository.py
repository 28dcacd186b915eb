from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, TeacherAttendanceReportRow


class AttendanceLedger(Protocol):
    """Storage seen by the bulk recorder: one record per (subject, date) in its scope.

    ``schedule_id`` scopes student attendance to one schedule (None for teachers);
    ``tracks_checkin`` tells the recorder to stamp a check-in time.
    """

    schedule_id: Optional[str]
    tracks_checkin: bool

    def existing_subject_ids(self, subject_ids: Sequence[str], day: date) -> set[str]:
        raise NotImplementedError

    def insert_ignore_many(self, records: Sequence[AttendanceRecord]) -> int:
        """Insert all rows in one batch, silently skipping unique-key conflicts.

        Returns the number of rows actually inserted.
        """

        raise NotImplementedError

    def list_by_ids(self, attendance_ids: Sequence[str]) -> Sequence[AttendanceRecord]:
        raise NotImplementedError


class TeacherAttendanceRepository(AttendanceLedger, Protocol):
    def get_by_id(self, attendance_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_teacher_and_date(self, teacher_id: str, day: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(self, record: AttendanceRecord) -> str:
        raise NotImplementedError

    def update(
        self,
        *,
        attendance_id: str,
        status: Optional[str],
        notes: Optional[str],
        checkout_time: Optional[datetime],
    ) -> bool:
        raise NotImplementedError

    def delete(self, attendance_id: str) -> bool:
        raise NotImplementedError

    def list_records(self, *, day: Optional[date] = None, teacher_id: Optional[str] = None) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def get_report_rows(
        self, *, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> Sequence[TeacherAttendanceReportRow]:
        """Teachers that have at least one schedule, with their attendances in range."""

        raise NotImplementedError


class StudentAttendanceRepository(Protocol):
    def for_schedule(self, schedule_id: str) -> AttendanceLedger:
        raise NotImplementedError

    def list_for_schedule(self, schedule_id: str, *, day: Optional[date] = None) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_student(self, student_id: str) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
