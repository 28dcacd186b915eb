from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..attendance.repository import TeacherAttendanceRepository
from ..common.logging import get_logger
from ..core.enums import TeacherAttendanceStatus
from ..core.exceptions import ValidationError

log = get_logger(__name__)


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]


def _percentage(part: int, total: int) -> str:
    return f"{part / total * 100:.2f}" if total > 0 else "0"


class AttendanceReportService:
    """Teacher attendance statistics over an optional date range."""

    def __init__(self, attendance: TeacherAttendanceRepository):
        self._attendance = attendance

    def build_teacher_report(self, *, start: Optional[date] = None, end: Optional[date] = None) -> ReportData:
        if (start is None) != (end is None):
            raise ValidationError("startDate and endDate must be given together", field="startDate")
        if start and end and start > end:
            raise ValidationError("startDate must not be after endDate", field="startDate")

        teachers = self._attendance.get_report_rows(start_date=start, end_date=end)

        rows: list[dict] = []
        summary: list[dict] = []
        for t in teachers:
            counts = {s: 0 for s in TeacherAttendanceStatus}
            counted = []
            for a in t.attendances:
                try:
                    counts[TeacherAttendanceStatus(a.status)] += 1
                except ValueError:
                    log.warning("report_unknown_status", attendance_id=a.attendance_id, status=a.status)
                    continue
                counted.append(a)

                rows.append(
                    {
                        "date": a.date.strftime("%Y-%m-%d"),
                        "teacher_id": t.teacher_id,
                        "name": t.name,
                        "employee_id": t.employee_id or "-",
                        "status": a.status,
                        "check_in": a.checkin_time.strftime("%H:%M") if a.checkin_time else "-",
                        "check_out": a.checkout_time.strftime("%H:%M") if a.checkout_time else "-",
                        "notes": a.notes or "",
                    }
                )

            total = len(counted)
            present = counts[TeacherAttendanceStatus.HADIR]
            summary.append(
                {
                    "id": t.teacher_id,
                    "name": t.name,
                    "email": t.email,
                    "employeeId": t.employee_id,
                    "position": t.position,
                    "attendances": [a.to_dict() for a in counted],
                    "statistics": {
                        "totalDays": total,
                        "presentDays": present,
                        "sickDays": counts[TeacherAttendanceStatus.SAKIT],
                        "leaveDays": counts[TeacherAttendanceStatus.IZIN],
                        "absentDays": counts[TeacherAttendanceStatus.ALFA],
                        "presentPercentage": _percentage(present, total),
                    },
                }
            )

        return ReportData(rows=rows, summary=summary)
