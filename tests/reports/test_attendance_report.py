from __future__ import annotations

from datetime import date

import pytest

from fakes import UTC, InMemorySchedules, InMemoryTeacherAttendance, make_slot
from school_admin.attendance.model import AttendanceRecord
from school_admin.attendance.recorder import BulkAttendanceRecorder
from school_admin.core.exceptions import ValidationError
from school_admin.reports.export import CSV_FIELDS, report_csv_bytes
from school_admin.reports.service import AttendanceReportService


@pytest.fixture
def repo(fixed_now):
    repo = InMemoryTeacherAttendance(
        teachers=[
            {"id": "t1", "name": "Budi", "employee_id": "NIP-1"},
            {"id": "t2", "name": "Sari"},
            {"id": "t3", "name": "Dewi"},
        ],
        schedules=InMemorySchedules([make_slot("a", teacher_id="t1"), make_slot("b", teacher_id="t2", day_of_week=2)]),
    )
    recorder = BulkAttendanceRecorder(repo, tz=UTC, clock=lambda: fixed_now)
    recorder.record_bulk(["t1"], "2025-03-03", "hadir", None, "admin")
    recorder.record_bulk(["t1"], "2025-03-04", "hadir", None, "admin")
    recorder.record_bulk(["t1"], "2025-03-05", "sakit", "flu", "admin")
    recorder.record_bulk(["t1"], "2025-04-01", "alfa", None, "admin")
    return repo


def test_statistics_per_teacher(repo):
    data = AttendanceReportService(repo).build_teacher_report(start=date(2025, 3, 1), end=date(2025, 3, 31))

    budi, sari = data.summary
    assert budi["statistics"] == {
        "totalDays": 3,
        "presentDays": 2,
        "sickDays": 1,
        "leaveDays": 0,
        "absentDays": 0,
        "presentPercentage": "66.67",
    }
    assert sari["statistics"]["totalDays"] == 0
    assert sari["statistics"]["presentPercentage"] == "0"


def test_without_range_every_record_counts(repo):
    data = AttendanceReportService(repo).build_teacher_report()
    assert data.summary[0]["statistics"]["absentDays"] == 1
    assert len(data.rows) == 4


@pytest.mark.parametrize(
    "start, end",
    [(date(2025, 3, 1), None), (None, date(2025, 3, 1)), (date(2025, 3, 2), date(2025, 3, 1))],
)
def test_bad_ranges_are_rejected(repo, start, end):
    with pytest.raises(ValidationError):
        AttendanceReportService(repo).build_teacher_report(start=start, end=end)


def test_csv_export(repo):
    data = AttendanceReportService(repo).build_teacher_report(start=date(2025, 3, 1), end=date(2025, 3, 31))

    raw = report_csv_bytes(data)
    assert raw.startswith(b"\xef\xbb\xbf")

    lines = raw.decode("utf-8-sig").splitlines()
    assert lines[0] == ",".join(CSV_FIELDS)
    assert len(lines) == 4
    assert "2025-03-05,t1,Budi,NIP-1,sakit,07:15,-,flu" in lines


def test_teachers_without_schedules_are_left_out(repo):
    data = AttendanceReportService(repo).build_teacher_report()
    assert [s["id"] for s in data.summary] == ["t1", "t2"]


def test_unknown_status_is_neither_counted_nor_exported(repo):
    repo.rows["legacy"] = AttendanceRecord(
        attendance_id="legacy", subject_id="t2", date=date(2025, 3, 10), status="cuti", created_by="admin"
    )

    data = AttendanceReportService(repo).build_teacher_report(start=date(2025, 3, 1), end=date(2025, 3, 31))

    sari = data.summary[1]
    assert sari["statistics"]["totalDays"] == 0
    assert sari["attendances"] == []
    assert all(r["teacher_id"] != "t2" for r in data.rows)
