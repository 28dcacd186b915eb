from __future__ import annotations

import io

import pytest
from openpyxl import Workbook

from school_admin.core.exceptions import StorageError
from school_admin.main import create_app


@pytest.fixture
def client(container):
    app = create_app(container=container, settings_module="config.testing")
    return app.test_client()


def login(client, user_id="admin1", role="admin"):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role


BULK = {"teacherIds": ["t1", "t2", "t1"], "date": "2025-03-01", "createdBy": "admin1", "status": "hadir"}


def test_bulk_teacher_attendance_then_conflict(client):
    login(client)

    resp = client.post("/api/teacher-attendance/bulk", json=BULK)
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["created"] == 2
    assert body["alreadyExists"] == 0
    assert [r["subjectId"] for r in body["data"]] == ["t1", "t2"]

    resp = client.post("/api/teacher-attendance/bulk", json=BULK)
    assert resp.status_code == 409
    assert resp.get_json()["conflicting"] == ["t1", "t2"]


def test_bulk_validation_errors_are_400(client):
    login(client)

    resp = client.post("/api/teacher-attendance/bulk", json={**BULK, "teacherIds": []})
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "no subjects supplied", "field": "subjectIds"}

    resp = client.post("/api/teacher-attendance/bulk", json={**BULK, "status": "present"})
    assert resp.status_code == 400


def test_storage_failure_is_500(client, container, monkeypatch):
    login(client)

    def broken(*args, **kwargs):
        raise StorageError("connection lost")

    monkeypatch.setattr(container.teacher_attendance_repo, "existing_subject_ids", broken)
    resp = client.post("/api/teacher-attendance/bulk", json=BULK)

    assert resp.status_code == 500
    assert "connection lost" not in resp.get_data(as_text=True)


def test_guard_rejects_anonymous_and_unprivileged(client):
    assert client.post("/api/teacher-attendance/bulk", json=BULK).status_code == 401

    login(client, "s1", "student")
    assert client.post("/api/teacher-attendance/bulk", json=BULK).status_code == 403


def test_teacher_records_student_attendance(client):
    login(client, "t1", "teacher")

    payload = {"scheduleId": "sch1", "studentIds": ["s1"], "date": "2025-03-03", "createdBy": "t1"}
    assert client.post("/api/attendance/bulk", json=payload).status_code == 201
    assert client.post("/api/attendance/bulk", json=payload).status_code == 409

    resp = client.get("/api/attendance?scheduleId=sch1&date=2025-03-03")
    assert [r["subjectId"] for r in resp.get_json()] == ["s1"]

    resp = client.post("/api/attendance/bulk", json={**payload, "scheduleId": "nope"})
    assert resp.status_code == 404


def test_single_teacher_attendance_crud(client):
    login(client)

    resp = client.post("/api/teacher-attendance", json={"teacherId": "t1", "date": "2025-03-01", "createdBy": "admin1"})
    assert resp.status_code == 201
    attendance_id = resp.get_json()["id"]

    again = client.post("/api/teacher-attendance", json={"teacherId": "t1", "date": "2025-03-01", "createdBy": "admin1"})
    assert again.status_code == 409

    resp = client.put(f"/api/teacher-attendance/{attendance_id}", json={"status": "izin"})
    assert resp.get_json()["status"] == "izin"

    assert client.delete(f"/api/teacher-attendance/{attendance_id}").status_code == 200
    assert client.delete(f"/api/teacher-attendance/{attendance_id}").status_code == 404


def test_student_calendar(client):
    login(client, "s1", "student")

    resp = client.get("/api/calendar?year=2025")
    assert resp.status_code == 200
    features = resp.get_json()
    assert features[0]["startAt"] == "2025-01-06T07:30:00.000"
    assert features[0]["category"] == "regular-class"
    holiday = next(f for f in features if f["id"] == "ev1")
    assert holiday["endAt"] == "2025-12-25T23:59:59.999"

    assert client.get("/api/calendar?year=20x5").status_code == 400


def test_schedule_create_and_duplicate(client):
    login(client)
    payload = {
        "classId": "c10a",
        "subjectId": "bio",
        "teacherId": "t2",
        "academicYearId": "ay2025",
        "dayOfWeek": 7,
        "startTime": "10:00",
        "endTime": "11:00",
    }

    resp = client.post("/api/schedules", json=payload)
    assert resp.status_code == 201
    assert resp.get_json()["dayOfWeek"] == 0

    assert client.post("/api/schedules", json=payload).status_code == 409


def test_report_csv_download(client):
    login(client)
    client.post("/api/teacher-attendance/bulk", json=BULK)

    resp = client.get("/api/teacher-attendance/reports.csv?startDate=2025-03-01&endDate=2025-03-31")

    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert "teacher_attendance_20250301_20250331.csv" in resp.headers["Content-Disposition"]

    resp = client.get("/api/teacher-attendance/reports?startDate=2025-03-01")
    assert resp.status_code == 400


def test_user_import_upload(client, container):
    login(client)
    wb = Workbook()
    wb.active.append(["Nama", "Email"])
    wb.active.append(["Ani", "ani@school.id"])
    buf = io.BytesIO()
    wb.save(buf)
    buf.seek(0)

    resp = client.post(
        "/api/users/student/import",
        data={"file": (buf, "siswa.xlsx")},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 201
    assert resp.get_json()["created"] == 1
    assert container.users_repo.created[0][1].name == "Ani"

    resp = client.post("/api/users/student/import", data={}, content_type="multipart/form-data")
    assert resp.status_code == 400


@pytest.mark.parametrize("teacher_ids", ["t1", 5, ["t1", None]])
def test_bulk_rejects_ids_that_are_not_a_list_of_strings(client, container, teacher_ids):
    login(client)

    resp = client.post("/api/teacher-attendance/bulk", json={**BULK, "teacherIds": teacher_ids})

    assert resp.status_code == 400
    assert resp.get_json()["field"] == "subjectIds"
    assert container.teacher_attendance_repo.rows == {}
