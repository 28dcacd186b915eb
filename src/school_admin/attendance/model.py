from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat(timespec="seconds") if value else None


@dataclass(frozen=True)
class AttendanceRecord:
    """One attendance outcome for one subject (student or teacher) on one day.

    ``schedule_id`` is set for student attendance, ``checkin_time`` and
    ``checkout_time`` for teacher attendance.
    """

    attendance_id: str
    subject_id: str
    date: date
    status: str
    created_by: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    checkin_time: Optional[datetime] = None
    checkout_time: Optional[datetime] = None
    schedule_id: Optional[str] = None

    def to_dict(self) -> dict:
        out = {
            "id": self.attendance_id,
            "subjectId": self.subject_id,
            "date": self.date.isoformat(),
            "status": self.status,
            "notes": self.notes,
            "createdBy": self.created_by,
            "createdAt": _iso(self.created_at),
        }
        if self.schedule_id is not None:
            out["scheduleId"] = self.schedule_id
        else:
            out["checkinTime"] = _iso(self.checkin_time)
            out["checkoutTime"] = _iso(self.checkout_time)
        return out


@dataclass(frozen=True)
class BulkResult:
    created_count: int
    already_existing_count: int
    created_subject_ids: list[str] = field(default_factory=list)
    already_existing_subject_ids: list[str] = field(default_factory=list)
    records: list[AttendanceRecord] = field(default_factory=list)

    @property
    def all_conflict(self) -> bool:
        """Nothing was written because every subject already had a record."""
        return self.created_count == 0 and self.already_existing_count > 0

    def to_dict(self) -> dict:
        return {
            "message": (
                f"Successfully created {self.created_count} attendance records. "
                f"{self.already_existing_count} already had attendance recorded."
            ),
            "created": self.created_count,
            "alreadyExists": self.already_existing_count,
            "alreadyExistingIds": list(self.already_existing_subject_ids),
            "data": [r.to_dict() for r in self.records],
        }


@dataclass(frozen=True)
class TeacherAttendanceReportRow:
    """Read-model for the teacher attendance report (one row per teacher)."""

    teacher_id: str
    name: str
    email: Optional[str]
    employee_id: Optional[str]
    position: Optional[str]
    attendances: tuple[AttendanceRecord, ...] = ()
