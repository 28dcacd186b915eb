from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Callable, Optional, Sequence, Union

from ..common.datetime_utils import DateLike, now_local, to_local_date
from ..common.ids import new_id
from ..common.logging import get_logger
from ..common.validators import require_enum, require_non_empty, require_present
from ..core.enums import StudentAttendanceStatus, TeacherAttendanceStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..schedules.repository import ScheduleRepository
from .model import AttendanceRecord, BulkResult
from .recorder import BulkAttendanceRecorder, to_local_naive
from .repository import StudentAttendanceRepository, TeacherAttendanceRepository

log = get_logger(__name__)


class AttendanceService:
    """Use cases for teacher attendance (single + bulk) and per-schedule student attendance."""

    def __init__(
        self,
        teacher_attendance: TeacherAttendanceRepository,
        student_attendance: StudentAttendanceRepository,
        schedules: ScheduleRepository,
        *,
        tz: tzinfo,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._teachers = teacher_attendance
        self._students = student_attendance
        self._schedules = schedules
        self._tz = tz
        self._clock = clock or (lambda: now_local(tz))

    def _day(self, value: Optional[DateLike]):
        require_present(value, "date")
        try:
            return to_local_date(value, self._tz)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid date: {value!r}", field="date")

    def _datetime(self, value: Union[datetime, str], field: str) -> datetime:
        try:
            return to_local_naive(value, self._tz)
        except (AttributeError, ValueError):
            raise ValidationError(f"Invalid {field}: {value!r}", field=field)

    def record_teacher_bulk(
        self,
        *,
        teacher_ids: Optional[Sequence[str]],
        date: Optional[DateLike],
        created_by: Optional[str],
        status: Optional[str] = None,
        notes: Optional[str] = None,
        checkin_time: Optional[Union[datetime, str]] = None,
    ) -> BulkResult:
        st = require_enum(TeacherAttendanceStatus, status, "status") if status else TeacherAttendanceStatus.HADIR
        recorder = BulkAttendanceRecorder(self._teachers, tz=self._tz, clock=self._clock)
        return recorder.record_bulk(teacher_ids, date, st, notes, created_by, checkin_time=checkin_time)

    def record_student_bulk(
        self,
        *,
        schedule_id: Optional[str],
        student_ids: Optional[Sequence[str]],
        date: Optional[DateLike],
        created_by: Optional[str],
        status: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> BulkResult:
        schedule_id = require_non_empty(schedule_id, "scheduleId")
        if not self._schedules.get_by_id(schedule_id):
            raise NotFoundError(f"Schedule {schedule_id} not found")

        st = require_enum(StudentAttendanceStatus, status, "status") if status else StudentAttendanceStatus.PRESENT
        recorder = BulkAttendanceRecorder(self._students.for_schedule(schedule_id), tz=self._tz, clock=self._clock)
        return recorder.record_bulk(student_ids, date, st, notes, created_by)

    def create_teacher_attendance(
        self,
        *,
        teacher_id: Optional[str],
        date: Optional[DateLike],
        created_by: Optional[str],
        status: Optional[str] = None,
        notes: Optional[str] = None,
        checkin_time: Optional[Union[datetime, str]] = None,
    ) -> AttendanceRecord:
        teacher_id = require_non_empty(teacher_id, "teacherId")
        created_by = require_non_empty(created_by, "createdBy")
        day = self._day(date)
        st = require_enum(TeacherAttendanceStatus, status, "status") if status else TeacherAttendanceStatus.HADIR

        if self._teachers.get_for_teacher_and_date(teacher_id, day):
            raise ConflictError("Attendance already recorded for this teacher on this date", conflicting=[teacher_id])

        now = self._clock()
        record = AttendanceRecord(
            attendance_id=new_id(),
            subject_id=teacher_id,
            date=day,
            status=st.value,
            notes=notes or None,
            created_by=created_by,
            created_at=now,
            checkin_time=self._datetime(checkin_time, "checkinTime") if checkin_time else now,
        )
        # A concurrent insert for the same day surfaces as ConflictError from the unique key
        self._teachers.create(record)
        log.info("teacher_attendance_created", teacher_id=teacher_id, day=day.isoformat(), status=st.value)
        return record

    def update_teacher_attendance(
        self,
        attendance_id: str,
        *,
        status: Optional[str] = None,
        notes: Optional[str] = None,
        checkout_time: Optional[Union[datetime, str]] = None,
    ) -> AttendanceRecord:
        attendance_id = require_non_empty(attendance_id, "id")
        if not self._teachers.get_by_id(attendance_id):
            raise NotFoundError(f"Attendance {attendance_id} not found")

        st = require_enum(TeacherAttendanceStatus, status, "status").value if status else None
        checkout = self._datetime(checkout_time, "checkoutTime") if checkout_time else None

        self._teachers.update(attendance_id=attendance_id, status=st, notes=notes, checkout_time=checkout)
        updated = self._teachers.get_by_id(attendance_id)
        if not updated:
            raise NotFoundError(f"Attendance {attendance_id} not found")
        return updated

    def delete_teacher_attendance(self, attendance_id: str) -> None:
        if not self._teachers.delete(require_non_empty(attendance_id, "id")):
            raise NotFoundError(f"Attendance {attendance_id} not found")

    def list_teacher_attendance(
        self, *, date: Optional[DateLike] = None, teacher_id: Optional[str] = None
    ) -> Sequence[AttendanceRecord]:
        day = self._day(date) if date else None
        return self._teachers.list_records(day=day, teacher_id=teacher_id or None)

    def list_student_attendance(self, schedule_id: str, *, date: Optional[DateLike] = None) -> Sequence[AttendanceRecord]:
        day = self._day(date) if date else None
        return self._students.list_for_schedule(require_non_empty(schedule_id, "scheduleId"), day=day)
