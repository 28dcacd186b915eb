from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import ScheduleSlot


class ScheduleRepository(Protocol):
    def get_by_id(self, schedule_id: str) -> Optional[ScheduleSlot]:
        raise NotImplementedError

    def list_all(self, *, academic_year_id: Optional[str] = None) -> Sequence[ScheduleSlot]:
        raise NotImplementedError

    def list_for_student(self, student_id: str) -> Sequence[ScheduleSlot]:
        """Schedules of the class the student belongs to."""

        raise NotImplementedError

    def list_for_teacher(self, teacher_id: str) -> Sequence[ScheduleSlot]:
        raise NotImplementedError

    def exists_slot(
        self,
        *,
        academic_year_id: str,
        class_id: str,
        subject_id: str,
        teacher_id: str,
        day_of_week: int,
        start_time: str,
        exclude_id: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def create(self, slot: ScheduleSlot) -> str:
        raise NotImplementedError

    def update(self, slot: ScheduleSlot) -> bool:
        raise NotImplementedError

    def delete(self, schedule_id: str) -> bool:
        raise NotImplementedError
