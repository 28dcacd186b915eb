from __future__ import annotations

from datetime import date

import mysql.connector
import pytest

from school_admin.attendance.model import AttendanceRecord
from school_admin.attendance.mysql_attendance_repository import (
    MySQLStudentAttendanceLedger,
    MySQLTeacherAttendanceRepository,
)
from school_admin.core.exceptions import ConflictError, StorageError, ValidationError
from school_admin.database.bootstrap import _iter_sql_statements
from school_admin.database.mysql_base import db_cursor


class RecordingCursor:
    def __init__(self, fail_with=None, rows=()):
        self.statements: list[str] = []
        self.rowcount = 0
        self._fail_with = fail_with
        self._rows = list(rows)

    def execute(self, sql, params=None):
        self.statements.append(sql)
        if self._fail_with:
            raise self._fail_with

    def executemany(self, sql, seq):
        self.execute(sql)
        self.rowcount = len(seq)

    def fetchall(self):
        return self._rows

    def close(self):
        pass


class RecordingConnection:
    def __init__(self, cursor):
        self._cursor = cursor
        self.committed = False
        self.rolled_back = False

    def cursor(self, dictionary=False):
        return self._cursor

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        pass


class RecordingFactory:
    def __init__(self, cursor):
        self.cursor = cursor
        self.conn = RecordingConnection(cursor)

    def connect(self):
        return self.conn


def _run(error):
    factory = RecordingFactory(RecordingCursor(fail_with=error))
    with db_cursor(factory) as (_, cur):
        cur.execute("INSERT ...")
    return factory


def test_duplicate_key_becomes_conflict():
    with pytest.raises(ConflictError):
        _run(mysql.connector.IntegrityError(msg="Duplicate entry", errno=1062))


def test_missing_reference_becomes_validation_error():
    with pytest.raises(ValidationError):
        _run(mysql.connector.IntegrityError(msg="Cannot add or update a child row", errno=1452))


def test_other_driver_errors_become_storage_errors():
    with pytest.raises(StorageError):
        _run(mysql.connector.DataError(msg="Data too long", errno=1406))


def test_success_commits():
    factory = RecordingFactory(RecordingCursor())
    with db_cursor(factory) as (_, cur):
        cur.execute("SELECT 1")
    assert factory.conn.committed and not factory.conn.rolled_back


def _record(subject_id="t1"):
    return AttendanceRecord(
        attendance_id="a1", subject_id=subject_id, date=date(2025, 3, 1), status="hadir", created_by="admin"
    )


@pytest.mark.parametrize(
    "make_ledger",
    [
        lambda f: MySQLTeacherAttendanceRepository(f),
        lambda f: MySQLStudentAttendanceLedger(f, "sch1"),
    ],
)
def test_batch_insert_only_skips_duplicate_keys(make_ledger):
    factory = RecordingFactory(RecordingCursor())

    make_ledger(factory).insert_ignore_many([_record()])

    [sql] = factory.cursor.statements
    assert "ON DUPLICATE KEY UPDATE id=id" in sql
    assert "IGNORE" not in sql


def test_report_query_keeps_teachers_with_schedules():
    factory = RecordingFactory(RecordingCursor())

    assert MySQLTeacherAttendanceRepository(factory).get_report_rows() == []

    [sql] = factory.cursor.statements
    assert "u.user_type = 'teacher'" in sql
    assert "EXISTS (SELECT 1 FROM schedules" in sql


def test_sql_splitter_handles_comments_and_quoted_semicolons():
    sql = "-- roles\nCREATE TABLE a (x INT);\nINSERT INTO a VALUES ('x;y'); -- trailing\n"

    assert list(_iter_sql_statements(sql)) == ["CREATE TABLE a (x INT)", "INSERT INTO a VALUES ('x;y')"]
