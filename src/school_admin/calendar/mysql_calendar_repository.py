from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import EventType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import CalendarEvent
from .repository import CalendarEventRepository


def _event_type(value: str) -> EventType:
    try:
        return EventType(value)
    except ValueError:
        # Free-form legacy values render as generic events
        return EventType.EVENT


def _row_to_event(r: dict) -> CalendarEvent:
    return CalendarEvent(
        event_id=r["id"],
        title=r["title"],
        description=r.get("description"),
        event_date=r["event_date"],
        event_type=_event_type(r["event_type"]),
        is_published=bool(r["is_published"]),
        academic_year_id=r["academic_year_id"],
    )


class MySQLCalendarEventRepository(CalendarEventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, event_id: str) -> Optional[CalendarEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, title, description, event_date, event_type, is_published, academic_year_id
                FROM calendar_events
                WHERE id=%s
                """,
                (event_id,),
            )
            r = fetchone(cur)
            return _row_to_event(r) if r else None

    def list_events(self, *, published_only: bool = False) -> Sequence[CalendarEvent]:
        where = "WHERE is_published=1" if published_only else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT id, title, description, event_date, event_type, is_published, academic_year_id
                FROM calendar_events
                {where}
                ORDER BY event_date ASC, created_at ASC
                """
            )
            return [_row_to_event(r) for r in fetchall(cur)]

    def create(self, event: CalendarEvent) -> str:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO calendar_events(id, title, description, event_date, event_type, is_published, academic_year_id)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    event.event_id,
                    event.title,
                    event.description,
                    event.event_date,
                    event.event_type.value,
                    int(event.is_published),
                    event.academic_year_id,
                ),
            )
            return event.event_id

    def update(self, event: CalendarEvent) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE calendar_events
                SET title=%s, description=%s, event_date=%s, event_type=%s, is_published=%s, academic_year_id=%s
                WHERE id=%s
                """,
                (
                    event.title,
                    event.description,
                    event.event_date,
                    event.event_type.value,
                    int(event.is_published),
                    event.academic_year_id,
                    event.event_id,
                ),
            )
            return cur.rowcount > 0

    def delete(self, event_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM calendar_events WHERE id=%s", (event_id,))
            return cur.rowcount > 0
