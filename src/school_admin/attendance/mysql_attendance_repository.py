from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import AttendanceRecord, TeacherAttendanceReportRow
from .repository import AttendanceLedger, StudentAttendanceRepository, TeacherAttendanceRepository

_TEACHER_COLUMNS = "id, teacher_id, date, status, notes, created_by, created_at, checkin_time, checkout_time"
_STUDENT_COLUMNS = "id, student_id, schedule_id, date, status, notes, created_by, created_at"


def _teacher_row(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=r["id"],
        subject_id=r["teacher_id"],
        date=r["date"],
        status=r["status"],
        notes=r.get("notes"),
        created_by=r["created_by"],
        created_at=r.get("created_at"),
        checkin_time=r.get("checkin_time"),
        checkout_time=r.get("checkout_time"),
    )


def _student_row(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=r["id"],
        subject_id=r["student_id"],
        schedule_id=r["schedule_id"],
        date=r["date"],
        status=r["status"],
        notes=r.get("notes"),
        created_by=r["created_by"],
        created_at=r.get("created_at"),
    )


class MySQLTeacherAttendanceRepository(TeacherAttendanceRepository):
    schedule_id = None
    tracks_checkin = True

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def existing_subject_ids(self, subject_ids: Sequence[str], day: date) -> set[str]:
        if not subject_ids:
            return set()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT teacher_id FROM teacher_attendances WHERE date=%s AND teacher_id IN ({in_clause(subject_ids)})",
                (day, *subject_ids),
            )
            return {r["teacher_id"] for r in fetchall(cur)}

    def insert_ignore_many(self, records: Sequence[AttendanceRecord]) -> int:
        if not records:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO teacher_attendances(id, teacher_id, date, status, notes, created_by, created_at, checkin_time)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE id=id
                """,
                [
                    (r.attendance_id, r.subject_id, r.date, r.status, r.notes, r.created_by, r.created_at, r.checkin_time)
                    for r in records
                ],
            )
            return int(cur.rowcount or 0)

    def list_by_ids(self, attendance_ids: Sequence[str]) -> Sequence[AttendanceRecord]:
        if not attendance_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_TEACHER_COLUMNS} FROM teacher_attendances WHERE id IN ({in_clause(attendance_ids)})",
                tuple(attendance_ids),
            )
            return [_teacher_row(r) for r in fetchall(cur)]

    def get_by_id(self, attendance_id: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_TEACHER_COLUMNS} FROM teacher_attendances WHERE id=%s", (attendance_id,))
            r = fetchone(cur)
            return _teacher_row(r) if r else None

    def get_for_teacher_and_date(self, teacher_id: str, day: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_TEACHER_COLUMNS} FROM teacher_attendances WHERE teacher_id=%s AND date=%s",
                (teacher_id, day),
            )
            r = fetchone(cur)
            return _teacher_row(r) if r else None

    def create(self, record: AttendanceRecord) -> str:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO teacher_attendances(id, teacher_id, date, status, notes, created_by, created_at, checkin_time)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    record.attendance_id,
                    record.subject_id,
                    record.date,
                    record.status,
                    record.notes,
                    record.created_by,
                    record.created_at,
                    record.checkin_time,
                ),
            )
            return record.attendance_id

    def update(
        self,
        *,
        attendance_id: str,
        status: Optional[str],
        notes: Optional[str],
        checkout_time: Optional[datetime],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE teacher_attendances
                SET status=COALESCE(%s, status), notes=%s, checkout_time=COALESCE(%s, checkout_time)
                WHERE id=%s
                """,
                (status, notes, checkout_time, attendance_id),
            )
            return cur.rowcount > 0

    def delete(self, attendance_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM teacher_attendances WHERE id=%s", (attendance_id,))
            return cur.rowcount > 0

    def list_records(self, *, day: Optional[date] = None, teacher_id: Optional[str] = None) -> Sequence[AttendanceRecord]:
        clauses: list[str] = []
        params: list[object] = []
        if day is not None:
            clauses.append("date=%s")
            params.append(day)
        if teacher_id:
            clauses.append("teacher_id=%s")
            params.append(teacher_id)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_TEACHER_COLUMNS} FROM teacher_attendances {where} ORDER BY date DESC, created_at DESC",
                tuple(params),
            )
            return [_teacher_row(r) for r in fetchall(cur)]

    def get_report_rows(
        self, *, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> Sequence[TeacherAttendanceReportRow]:
        join_range = ""
        params: list[object] = []
        if start_date and end_date:
            join_range = " AND ta.date BETWEEN %s AND %s"
            params.extend([start_date, end_date])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    u.id AS t_id, u.name, u.email, u.employee_id, u.position,
                    ta.id, ta.teacher_id, ta.date, ta.status, ta.notes, ta.created_by,
                    ta.created_at, ta.checkin_time, ta.checkout_time
                FROM users u
                LEFT JOIN teacher_attendances ta ON ta.teacher_id = u.id{join_range}
                WHERE u.user_type = 'teacher'
                  AND EXISTS (SELECT 1 FROM schedules sc WHERE sc.teacher_id = u.id)
                ORDER BY u.name ASC, u.id ASC, ta.date DESC
                """,
                tuple(params),
            )
            rows = fetchall(cur)

        grouped: dict[str, dict] = {}
        for r in rows:
            g = grouped.get(r["t_id"])
            if not g:
                g = {
                    "teacher_id": r["t_id"],
                    "name": r["name"],
                    "email": r.get("email"),
                    "employee_id": r.get("employee_id"),
                    "position": r.get("position"),
                    "attendances": [],
                }
                grouped[r["t_id"]] = g
            if r.get("id"):
                g["attendances"].append(_teacher_row(r))

        return [
            TeacherAttendanceReportRow(**{**g, "attendances": tuple(g["attendances"])})
            for g in grouped.values()
        ]


class MySQLStudentAttendanceLedger(AttendanceLedger):
    tracks_checkin = False

    def __init__(self, conn_factory: DatabaseConnection, schedule_id: str):
        self._conn_factory = conn_factory
        self.schedule_id = schedule_id

    def existing_subject_ids(self, subject_ids: Sequence[str], day: date) -> set[str]:
        if not subject_ids:
            return set()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT student_id FROM attendances
                WHERE schedule_id=%s AND date=%s AND student_id IN ({in_clause(subject_ids)})
                """,
                (self.schedule_id, day, *subject_ids),
            )
            return {r["student_id"] for r in fetchall(cur)}

    def insert_ignore_many(self, records: Sequence[AttendanceRecord]) -> int:
        if not records:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO attendances(id, student_id, schedule_id, date, status, notes, created_by, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE id=id
                """,
                [
                    (r.attendance_id, r.subject_id, self.schedule_id, r.date, r.status, r.notes, r.created_by, r.created_at)
                    for r in records
                ],
            )
            return int(cur.rowcount or 0)

    def list_by_ids(self, attendance_ids: Sequence[str]) -> Sequence[AttendanceRecord]:
        if not attendance_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_STUDENT_COLUMNS} FROM attendances WHERE id IN ({in_clause(attendance_ids)})",
                tuple(attendance_ids),
            )
            return [_student_row(r) for r in fetchall(cur)]


class MySQLStudentAttendanceRepository(StudentAttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def for_schedule(self, schedule_id: str) -> AttendanceLedger:
        return MySQLStudentAttendanceLedger(self._conn_factory, schedule_id)

    def list_for_schedule(self, schedule_id: str, *, day: Optional[date] = None) -> Sequence[AttendanceRecord]:
        sql = f"SELECT {_STUDENT_COLUMNS} FROM attendances WHERE schedule_id=%s"
        params: list[object] = [schedule_id]
        if day is not None:
            sql += " AND date=%s"
            params.append(day)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql + " ORDER BY date DESC, student_id ASC", tuple(params))
            return [_student_row(r) for r in fetchall(cur)]

    def list_for_student(self, student_id: str) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_STUDENT_COLUMNS} FROM attendances WHERE student_id=%s ORDER BY date DESC",
                (student_id,),
            )
            return [_student_row(r) for r in fetchall(cur)]
