from __future__ import annotations

import re
from datetime import date, datetime, time, tzinfo
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.constants import DEFAULT_TIMEZONE
from ..core.exceptions import ValidationError

_HHMM = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::(\d{2}))?\s*$")

DateLike = Union[date, datetime, str]


def get_zone(name: Optional[str] = None) -> tzinfo:
    try:
        return ZoneInfo(name or DEFAULT_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Unknown timezone: {name!r}", field="timezone")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_hhmm(value: Optional[str]) -> time:
    """Parse a wall-clock 'HH:MM' (optionally ':SS', checked then dropped) into time.

    Raises ValueError for anything else, callers attach context.
    """

    if not isinstance(value, str):
        raise ValueError(f"Invalid time: {value!r}")
    m = _HHMM.match(value)
    if not m:
        raise ValueError(f"Invalid time: {value!r}")
    hours, minutes, seconds = int(m.group(1)), int(m.group(2)), int(m.group(3) or 0)
    if hours > 23 or minutes > 59 or seconds > 59:
        raise ValueError(f"Invalid time: {value!r}")
    return time(hour=hours, minute=minutes)


def parse_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing 'Z'."""
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def to_local_date(value: DateLike, tz: tzinfo) -> date:
    """Truncate a date/datetime/ISO string to the calendar day in ``tz``.

    Aware datetimes are converted into ``tz`` first; naive datetimes are
    already local.
    """

    if isinstance(value, str):
        raw = value.strip()
        if len(raw) == 10:
            return parse_iso_date(raw)
        value = parse_datetime(raw)

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(tz)
        return value.date()

    if isinstance(value, date):
        return value

    raise TypeError(f"Unsupported date value type: {type(value)!r}")


def local_midnight_millis(day: date, tz: tzinfo) -> int:
    return int(datetime.combine(day, time(), tzinfo=tz).timestamp() * 1000)


def now_local(tz: Optional[tzinfo] = None) -> datetime:
    """Current local time (naive, wall clock of ``tz``).

    Note: Wrapped so tests can patch/mocked easier.
    """

    if tz is None:
        return datetime.now()
    return datetime.now(tz).replace(tzinfo=None)


def normalize_day_of_week(value: object) -> int:
    """Canonical weekday: 0 = Sunday .. 6 = Saturday; 7 is accepted as Sunday."""

    if isinstance(value, bool):
        raise ValueError(f"Invalid day of week: {value!r}")
    day = int(value)  # type: ignore[arg-type]
    if day == 7:
        return 0
    if not 0 <= day <= 6:
        raise ValueError(f"Invalid day of week: {value!r}")
    return day


def sunday_zero_weekday(day: date) -> int:
    return (day.weekday() + 1) % 7
