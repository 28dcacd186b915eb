from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from ..common.datetime_utils import normalize_day_of_week, parse_hhmm
from ..common.ids import new_id
from ..common.logging import get_logger
from ..common.validators import require_non_empty
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from .model import ScheduleSlot
from .repository import ScheduleRepository

log = get_logger(__name__)


def _clean_time(value: Optional[str], field: str) -> str:
    try:
        return parse_hhmm(value).strftime("%H:%M")
    except ValueError:
        raise ValidationError(f"{field} must be HH:MM", field=field)


def _clean_day(value: object) -> int:
    try:
        return normalize_day_of_week(value)
    except (TypeError, ValueError):
        raise ValidationError("dayOfWeek must be 0-6 (0 = Sunday) or 7 for Sunday", field="dayOfWeek")


class ScheduleService:
    """Use cases: manage weekly schedule slots and list the ones a user can see."""

    def __init__(self, schedules: ScheduleRepository):
        self._schedules = schedules

    def get(self, schedule_id: str) -> ScheduleSlot:
        slot = self._schedules.get_by_id(schedule_id)
        if not slot:
            raise NotFoundError(f"Schedule {schedule_id} not found")
        return slot

    def list_all(self, *, academic_year_id: Optional[str] = None) -> Sequence[ScheduleSlot]:
        return self._schedules.list_all(academic_year_id=academic_year_id)

    def list_for_student(self, student_id: str) -> Sequence[ScheduleSlot]:
        return self._schedules.list_for_student(require_non_empty(student_id, "studentId"))

    def list_for_teacher(self, teacher_id: str) -> Sequence[ScheduleSlot]:
        return self._schedules.list_for_teacher(require_non_empty(teacher_id, "teacherId"))

    def create(
        self,
        *,
        class_id: str,
        subject_id: str,
        teacher_id: str,
        academic_year_id: str,
        day_of_week: object,
        start_time: str,
        end_time: str,
        room: Optional[str] = None,
    ) -> ScheduleSlot:
        slot = ScheduleSlot(
            schedule_id=new_id(),
            class_id=require_non_empty(class_id, "classId"),
            subject_id=require_non_empty(subject_id, "subjectId"),
            teacher_id=require_non_empty(teacher_id, "teacherId"),
            academic_year_id=require_non_empty(academic_year_id, "academicYearId"),
            day_of_week=_clean_day(day_of_week),
            start_time=_clean_time(start_time, "startTime"),
            end_time=_clean_time(end_time, "endTime"),
            room=room.strip() if room and room.strip() else None,
        )
        self._ensure_unique(slot)
        self._schedules.create(slot)
        log.info("schedule_created", schedule_id=slot.schedule_id, class_id=slot.class_id)
        return slot

    def update(self, schedule_id: str, **changes) -> ScheduleSlot:
        current = self.get(schedule_id)

        cleaned: dict = {}
        for key in ("class_id", "subject_id", "teacher_id", "academic_year_id"):
            if changes.get(key) is not None:
                cleaned[key] = require_non_empty(changes[key], key)
        if changes.get("day_of_week") is not None:
            cleaned["day_of_week"] = _clean_day(changes["day_of_week"])
        if changes.get("start_time") is not None:
            cleaned["start_time"] = _clean_time(changes["start_time"], "startTime")
        if changes.get("end_time") is not None:
            cleaned["end_time"] = _clean_time(changes["end_time"], "endTime")
        if "room" in changes:
            room = changes["room"]
            cleaned["room"] = room.strip() if room and room.strip() else None

        updated = replace(current, **cleaned)
        self._ensure_unique(updated, exclude_id=schedule_id)
        self._schedules.update(updated)
        return updated

    def delete(self, schedule_id: str) -> None:
        if not self._schedules.delete(schedule_id):
            raise NotFoundError(f"Schedule {schedule_id} not found")

    def _ensure_unique(self, slot: ScheduleSlot, *, exclude_id: Optional[str] = None) -> None:
        if self._schedules.exists_slot(
            academic_year_id=slot.academic_year_id,
            class_id=slot.class_id,
            subject_id=slot.subject_id,
            teacher_id=slot.teacher_id,
            day_of_week=slot.day_of_week,
            start_time=slot.start_time,
            exclude_id=exclude_id,
        ):
            raise ConflictError("A schedule with the same class, subject, teacher, day and start time already exists")
