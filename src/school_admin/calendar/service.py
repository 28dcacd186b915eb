from __future__ import annotations

from dataclasses import replace
from datetime import date, tzinfo
from typing import Optional, Sequence

from ..common.datetime_utils import parse_iso_date
from ..common.ids import new_id
from ..common.validators import require_enum, require_non_empty, require_present
from ..core.enums import EventType
from ..core.exceptions import NotFoundError, ValidationError
from ..schedules.repository import ScheduleRepository
from .expander import expand
from .model import CalendarEvent, CalendarFeature
from .repository import CalendarEventRepository


def _clean_date(value: object, field: str) -> date:
    if isinstance(value, date):
        return value
    try:
        return parse_iso_date(str(require_present(value, field))[:10])
    except ValueError:
        raise ValidationError(f"{field} must be YYYY-MM-DD", field=field)


class CalendarService:
    """Use cases: manage calendar events and build a user's expanded calendar."""

    def __init__(self, events: CalendarEventRepository, schedules: ScheduleRepository, *, tz: tzinfo):
        self._events = events
        self._schedules = schedules
        self._tz = tz

    def calendar_for_student(self, student_id: str, *, reference_date: date) -> list[CalendarFeature]:
        schedules = self._schedules.list_for_student(student_id)
        return self._build(schedules, reference_date)

    def calendar_for_teacher(self, teacher_id: str, *, reference_date: date) -> list[CalendarFeature]:
        schedules = self._schedules.list_for_teacher(teacher_id)
        return self._build(schedules, reference_date)

    def calendar_events_only(self, *, reference_date: date) -> list[CalendarFeature]:
        return self._build([], reference_date)

    def _build(self, schedules, reference_date: date) -> list[CalendarFeature]:
        events = self._events.list_events(published_only=True)
        return expand(schedules, events, reference_date, tz=self._tz)

    def list_events(self, *, published_only: bool = False) -> Sequence[CalendarEvent]:
        return self._events.list_events(published_only=published_only)

    def create_event(
        self,
        *,
        title: str,
        event_date: object,
        event_type: str,
        academic_year_id: str,
        description: Optional[str] = None,
        is_published: bool = False,
    ) -> CalendarEvent:
        event = CalendarEvent(
            event_id=new_id(),
            title=require_non_empty(title, "title"),
            description=description or None,
            event_date=_clean_date(event_date, "eventDate"),
            event_type=require_enum(EventType, event_type, "eventType"),
            is_published=bool(is_published),
            academic_year_id=require_non_empty(academic_year_id, "academicYearId"),
        )
        self._events.create(event)
        return event

    def update_event(self, event_id: str, **changes) -> CalendarEvent:
        current = self._events.get_by_id(event_id)
        if not current:
            raise NotFoundError(f"Calendar event {event_id} not found")

        cleaned: dict = {}
        if changes.get("title") is not None:
            cleaned["title"] = require_non_empty(changes["title"], "title")
        if "description" in changes:
            cleaned["description"] = changes["description"] or None
        if changes.get("event_date") is not None:
            cleaned["event_date"] = _clean_date(changes["event_date"], "eventDate")
        if changes.get("event_type") is not None:
            cleaned["event_type"] = require_enum(EventType, changes["event_type"], "eventType")
        if changes.get("is_published") is not None:
            cleaned["is_published"] = bool(changes["is_published"])
        if changes.get("academic_year_id") is not None:
            cleaned["academic_year_id"] = require_non_empty(changes["academic_year_id"], "academicYearId")

        updated = replace(current, **cleaned)
        self._events.update(updated)
        return updated

    def delete_event(self, event_id: str) -> None:
        if not self._events.delete(event_id):
            raise NotFoundError(f"Calendar event {event_id} not found")
