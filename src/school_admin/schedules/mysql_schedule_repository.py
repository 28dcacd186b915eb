from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, hhmm
from .model import ScheduleSlot
from .repository import ScheduleRepository

_SELECT = """
    SELECT
        sc.id, sc.class_id, sc.subject_id, sc.teacher_id, sc.academic_year_id,
        sc.day_of_week, sc.start_time, sc.end_time, sc.room,
        c.name AS class_name, s.name AS subject_name, t.name AS teacher_name
    FROM schedules sc
    LEFT JOIN classes c ON c.id = sc.class_id
    LEFT JOIN subjects s ON s.id = sc.subject_id
    LEFT JOIN users t ON t.id = sc.teacher_id
"""

_ORDER = " ORDER BY sc.day_of_week ASC, sc.start_time ASC, sc.id ASC"


def _row_to_slot(r: dict) -> ScheduleSlot:
    return ScheduleSlot(
        schedule_id=r["id"],
        class_id=r["class_id"],
        subject_id=r["subject_id"],
        teacher_id=r["teacher_id"],
        academic_year_id=r["academic_year_id"],
        day_of_week=int(r["day_of_week"]),
        start_time=hhmm(r["start_time"]),
        end_time=hhmm(r["end_time"]),
        room=r.get("room"),
        class_name=r.get("class_name"),
        subject_name=r.get("subject_name"),
        teacher_name=r.get("teacher_name"),
    )


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, schedule_id: str) -> Optional[ScheduleSlot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE sc.id=%s", (schedule_id,))
            r = fetchone(cur)
            return _row_to_slot(r) if r else None

    def list_all(self, *, academic_year_id: Optional[str] = None) -> Sequence[ScheduleSlot]:
        with db_cursor(self._conn_factory) as (_, cur):
            if academic_year_id:
                cur.execute(_SELECT + " WHERE sc.academic_year_id=%s" + _ORDER, (academic_year_id,))
            else:
                cur.execute(_SELECT + _ORDER)
            return [_row_to_slot(r) for r in fetchall(cur)]

    def list_for_student(self, student_id: str) -> Sequence[ScheduleSlot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT
                + " JOIN users st ON st.class_id = sc.class_id WHERE st.id=%s AND st.user_type='student'"
                + _ORDER,
                (student_id,),
            )
            return [_row_to_slot(r) for r in fetchall(cur)]

    def list_for_teacher(self, teacher_id: str) -> Sequence[ScheduleSlot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE sc.teacher_id=%s" + _ORDER, (teacher_id,))
            return [_row_to_slot(r) for r in fetchall(cur)]

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
        sql = """
            SELECT id FROM schedules
            WHERE academic_year_id=%s AND class_id=%s AND subject_id=%s
              AND teacher_id=%s AND day_of_week=%s AND start_time=%s
        """
        params: list[object] = [academic_year_id, class_id, subject_id, teacher_id, int(day_of_week), start_time]
        if exclude_id:
            sql += " AND id<>%s"
            params.append(exclude_id)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return fetchone(cur) is not None

    def create(self, slot: ScheduleSlot) -> str:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO schedules(id, class_id, subject_id, teacher_id, academic_year_id,
                                      day_of_week, start_time, end_time, room)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    slot.schedule_id,
                    slot.class_id,
                    slot.subject_id,
                    slot.teacher_id,
                    slot.academic_year_id,
                    int(slot.day_of_week),
                    slot.start_time,
                    slot.end_time,
                    slot.room,
                ),
            )
            return slot.schedule_id

    def update(self, slot: ScheduleSlot) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE schedules
                SET class_id=%s, subject_id=%s, teacher_id=%s, academic_year_id=%s,
                    day_of_week=%s, start_time=%s, end_time=%s, room=%s
                WHERE id=%s
                """,
                (
                    slot.class_id,
                    slot.subject_id,
                    slot.teacher_id,
                    slot.academic_year_id,
                    int(slot.day_of_week),
                    slot.start_time,
                    slot.end_time,
                    slot.room,
                    slot.schedule_id,
                ),
            )
            return cur.rowcount > 0

    def delete(self, schedule_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM schedules WHERE id=%s", (schedule_id,))
            return cur.rowcount > 0
