from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional


@dataclass(frozen=True)
class ScheduleSlot:
    """A recurring weekly class meeting.

    ``day_of_week`` uses 0 = Sunday .. 6 = Saturday; ``start_time`` and
    ``end_time`` are wall-clock 'HH:MM' strings. The display names are filled
    by repository joins and are optional.
    """

    schedule_id: str
    class_id: str
    subject_id: str
    teacher_id: str
    academic_year_id: str
    day_of_week: int
    start_time: str
    end_time: str
    room: Optional[str] = None
    class_name: Optional[str] = None
    subject_name: Optional[str] = None
    teacher_name: Optional[str] = None

    def to_dict(self) -> dict:
        d = asdict(self)
        return {
            "id": d["schedule_id"],
            "classId": d["class_id"],
            "subjectId": d["subject_id"],
            "teacherId": d["teacher_id"],
            "academicYearId": d["academic_year_id"],
            "dayOfWeek": d["day_of_week"],
            "startTime": d["start_time"],
            "endTime": d["end_time"],
            "room": d["room"],
            "className": d["class_name"],
            "subjectName": d["subject_name"],
            "teacherName": d["teacher_name"],
        }
