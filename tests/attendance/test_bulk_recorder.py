from __future__ import annotations

from datetime import date, datetime

import pytest

from fakes import UTC, InMemoryLedger
from school_admin.attendance.model import AttendanceRecord
from school_admin.attendance.recorder import BulkAttendanceRecorder
from school_admin.core.enums import TeacherAttendanceStatus
from school_admin.core.exceptions import StorageError, ValidationError

NOW = datetime(2025, 3, 1, 7, 15)


def _recorder(ledger=None):
    ledger = ledger or InMemoryLedger()
    return ledger, BulkAttendanceRecorder(ledger, tz=UTC, clock=lambda: NOW)


def test_second_call_creates_nothing():
    ledger, recorder = _recorder()

    first = recorder.record_bulk(["t1", "t2"], "2025-03-01", "hadir", None, "admin")
    second = recorder.record_bulk(["t1", "t2"], "2025-03-01", "hadir", None, "admin")

    assert (first.created_count, first.already_existing_count) == (2, 0)
    assert (second.created_count, second.already_existing_count) == (0, 2)
    assert second.all_conflict
    assert len(ledger.rows) == 2
    # the all-conflict path does not write
    assert ledger.writes == 1


def test_duplicate_ids_are_recorded_once():
    ledger, recorder = _recorder()

    result = recorder.record_bulk(["t1", "t1", "t2"], date(2025, 3, 1), "hadir", None, "admin")

    assert result.created_count == 2
    assert result.created_subject_ids == ["t1", "t2"]
    assert len(ledger.rows) == 2


def test_partial_conflict_reports_both_sides_in_input_order():
    ledger, recorder = _recorder()
    recorder.record_bulk(["t2"], "2025-03-01", "hadir", None, "admin")

    result = recorder.record_bulk(["t3", "t2", "t1"], "2025-03-01", "hadir", None, "admin")

    assert result.created_subject_ids == ["t3", "t1"]
    assert result.already_existing_subject_ids == ["t2"]
    assert not result.all_conflict
    assert [r.subject_id for r in result.records] == ["t3", "t1"]


def test_timestamps_on_the_same_local_day_share_one_record():
    ledger, recorder = _recorder()

    first = recorder.record_bulk(["t1"], "2025-03-01T23:59:00Z", "hadir", None, "admin")
    second = recorder.record_bulk(["t1"], "2025-03-01T00:00:01Z", "hadir", None, "admin")

    assert first.created_count == 1
    assert second.already_existing_count == 1
    [stored] = ledger.rows.values()
    assert stored.date == date(2025, 3, 1)


def test_aware_timestamp_is_converted_to_the_school_timezone():
    from zoneinfo import ZoneInfo

    ledger = InMemoryLedger()
    recorder = BulkAttendanceRecorder(ledger, tz=ZoneInfo("Asia/Jakarta"), clock=lambda: NOW)

    result = recorder.record_bulk(["t1"], "2025-03-01T20:00:00Z", "hadir", None, "admin")

    assert result.records[0].date == date(2025, 3, 2)


def test_records_carry_status_notes_and_checkin():
    _, recorder = _recorder()

    result = recorder.record_bulk(["t1"], "2025-03-01", TeacherAttendanceStatus.SAKIT, "flu", "admin")
    [record] = result.records

    assert record.status == "sakit"
    assert record.notes == "flu"
    assert record.created_by == "admin"
    assert record.checkin_time == NOW
    assert record.schedule_id is None


def test_explicit_checkin_time_is_used():
    _, recorder = _recorder()

    result = recorder.record_bulk(
        ["t1"], "2025-03-01", "hadir", None, "admin", checkin_time="2025-03-01T06:45:00"
    )
    assert result.records[0].checkin_time == datetime(2025, 3, 1, 6, 45)


def test_student_ledger_records_schedule_and_no_checkin():
    ledger = InMemoryLedger(schedule_id="sch1", tracks_checkin=False)
    _, recorder = _recorder(ledger)

    [record] = recorder.record_bulk(["s1"], "2025-03-03", "present", None, "t1").records

    assert record.schedule_id == "sch1"
    assert record.checkin_time is None


def test_concurrent_insert_moves_subject_to_already_existing():
    ledger, recorder = _recorder()

    def racer():
        # another request stores t2 between our read and our write
        ledger.rows["other"] = AttendanceRecord(
            attendance_id="other", subject_id="t2", date=date(2025, 3, 1), status="hadir", created_by="x"
        )

    ledger.before_insert = racer
    result = recorder.record_bulk(["t1", "t2"], "2025-03-01", "hadir", None, "admin")

    assert result.created_subject_ids == ["t1"]
    assert result.already_existing_subject_ids == ["t2"]
    assert [r.subject_id for r in ledger.rows.values()].count("t2") == 1


@pytest.mark.parametrize("ids", [[], None])
def test_no_subjects_is_rejected(ids):
    ledger, recorder = _recorder()

    with pytest.raises(ValidationError, match="no subjects supplied"):
        recorder.record_bulk(ids, "2025-03-01", "hadir", None, "admin")
    assert ledger.reads == 0


@pytest.mark.parametrize(
    "kwargs, field",
    [
        ({"date": None, "created_by": "admin"}, "date"),
        ({"date": "2025-03-01", "created_by": None}, "createdBy"),
        ({"date": "not-a-date", "created_by": "admin"}, "date"),
    ],
)
def test_missing_or_bad_fields_are_rejected(kwargs, field):
    _, recorder = _recorder()

    with pytest.raises(ValidationError) as exc:
        recorder.record_bulk(["t1"], kwargs["date"], "hadir", None, kwargs["created_by"])
    assert exc.value.field == field


def test_storage_failure_propagates():
    ledger, recorder = _recorder()

    def broken():
        raise StorageError("connection lost")

    ledger.before_insert = broken
    with pytest.raises(StorageError):
        recorder.record_bulk(["t1"], "2025-03-01", "hadir", None, "admin")
    assert ledger.rows == {}


@pytest.mark.parametrize("ids", ["t1", 5, ["t1", 2], ["t1", " "], {"t1": True}])
def test_subject_ids_must_be_a_list_of_ids(ids):
    ledger, recorder = _recorder()

    with pytest.raises(ValidationError) as exc:
        recorder.record_bulk(ids, "2025-03-01", "hadir", None, "admin")
    assert exc.value.field == "subjectIds"
    assert ledger.rows == {}
