"""Expand weekly schedule slots and one-off events into concrete calendar entries.

Schedule slots repeat every week of the reference year; published events
become full-day entries. The result is sorted by start time; entries with the
same start keep their input order (schedules before events).
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, tzinfo
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import (
    get_zone,
    local_midnight_millis,
    normalize_day_of_week,
    parse_hhmm,
    sunday_zero_weekday,
)
from ..core.enums import EventType, FeatureCategory, FeatureSource
from ..core.exceptions import ValidationError
from ..schedules.model import ScheduleSlot
from .model import CalendarEvent, CalendarFeature

_END_OF_DAY = time(23, 59, 59, 999000)

_EVENT_CATEGORIES = {
    EventType.HOLIDAY: FeatureCategory.HOLIDAY,
    EventType.EXAM: FeatureCategory.EXAM,
}


def _checked_slot(slot: ScheduleSlot) -> tuple[int, time, time]:
    try:
        day = normalize_day_of_week(slot.day_of_week)
    except (TypeError, ValueError):
        raise ValidationError(
            f"Schedule {slot.schedule_id} has an invalid day of week: {slot.day_of_week!r}",
            field="dayOfWeek",
            subject_id=slot.schedule_id,
        )
    try:
        start = parse_hhmm(slot.start_time)
        end = parse_hhmm(slot.end_time)
    except ValueError:
        raise ValidationError(
            f"Schedule {slot.schedule_id} has a malformed time range: {slot.start_time!r}-{slot.end_time!r}",
            field="startTime/endTime",
            subject_id=slot.schedule_id,
        )
    return day, start, end


def first_occurrence(start: date, day_of_week: int) -> date:
    offset = (day_of_week - sunday_zero_weekday(start)) % 7
    return start + timedelta(days=offset)


def _slot_name(slot: ScheduleSlot) -> str:
    return f"{slot.subject_name or slot.subject_id} - {slot.class_name or slot.class_id}"


def _slot_description(slot: ScheduleSlot) -> str:
    return (
        f"Teacher: {slot.teacher_name or slot.teacher_id}\n"
        f"Room: {slot.room or '-'}\n"
        f"Time: {slot.start_time} - {slot.end_time}"
    )


def _expand_slot(
    slot: ScheduleSlot,
    day: int,
    start: time,
    end: time,
    year_start: date,
    year_end: date,
    tz: tzinfo,
) -> Iterable[CalendarFeature]:
    name = _slot_name(slot)
    description = _slot_description(slot)

    current = first_occurrence(year_start, day)
    while current <= year_end:
        yield CalendarFeature(
            id=f"{slot.schedule_id}-{local_midnight_millis(current, tz)}",
            name=name,
            start_at=datetime.combine(current, start),
            # end before start is kept as entered; no overnight rollover
            end_at=datetime.combine(current, end),
            category=FeatureCategory.REGULAR_CLASS,
            source_type=FeatureSource.SCHEDULE,
            description=description,
        )
        current += timedelta(days=7)


def _event_feature(event: CalendarEvent) -> CalendarFeature:
    return CalendarFeature(
        id=event.event_id,
        name=event.title,
        start_at=datetime.combine(event.event_date, time()),
        end_at=datetime.combine(event.event_date, _END_OF_DAY),
        category=_EVENT_CATEGORIES.get(event.event_type, FeatureCategory.EVENT),
        source_type=FeatureSource.SPECIAL,
        description=event.description,
    )


def expand(
    schedules: Sequence[ScheduleSlot],
    events: Sequence[CalendarEvent],
    reference_date: date,
    *,
    tz: Optional[tzinfo] = None,
) -> list[CalendarFeature]:
    """Concrete calendar entries for the calendar year of ``reference_date``.

    All slots are validated before anything is expanded, so a malformed slot
    fails the whole call. Timestamps are naive local wall-clock times; ``tz``
    is only used to compute the epoch part of schedule feature ids.
    """

    tz = tz or get_zone()
    year_start = date(reference_date.year, 1, 1)
    year_end = date(reference_date.year, 12, 31)

    checked = [(slot, *_checked_slot(slot)) for slot in schedules]

    features: list[CalendarFeature] = []
    for slot, day, start, end in checked:
        features.extend(_expand_slot(slot, day, start, end, year_start, year_end, tz))

    features.extend(_event_feature(e) for e in events if e.is_published)

    # sorted() is stable
    return sorted(features, key=lambda f: f.start_at)
