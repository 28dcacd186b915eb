from __future__ import annotations

import io
from datetime import date, datetime

import pytest
from openpyxl import Workbook

from fakes import InMemoryUsers
from school_admin.core.exceptions import ConflictError, ValidationError
from school_admin.users.importer import read_profiles
from school_admin.users.model import ParentProfile, StudentProfile, TeacherProfile
from school_admin.users.profiles import build_profile
from school_admin.users.service import UserService


def _xlsx(*rows) -> io.BytesIO:
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(list(row))
    buf = io.BytesIO()
    wb.save(buf)
    buf.seek(0)
    return buf


def test_build_profile_accepts_camel_case():
    profile = build_profile("student", {"name": " Ani ", "birthDate": "2009-05-01", "classId": "c10a"})

    assert profile == StudentProfile(name="Ani", birth_date=date(2009, 5, 1), class_id="c10a")


def test_build_profile_rejects_fields_of_other_types():
    with pytest.raises(ValidationError) as exc:
        build_profile("student", {"name": "Ani", "employeeId": "NIP-1"})
    assert exc.value.field == "employeeId"


def test_build_profile_requires_name_and_known_type():
    with pytest.raises(ValidationError):
        build_profile("teacher", {"email": "a@b.c"})
    with pytest.raises(ValidationError):
        build_profile("janitor", {"name": "X"})


def test_parent_student_ids_from_comma_list():
    profile = build_profile("parent", {"name": "Ibu Ani", "studentIds": "s1, s2,"})
    assert isinstance(profile, ParentProfile)
    assert profile.student_ids == ("s1", "s2")


def test_read_sheet_maps_headers_and_collects_row_errors():
    sheet = _xlsx(
        ("Nama", "Email", "NIP", "Tanggal Lahir"),
        ("Budi", "budi@school.id", 1987001.0, datetime(1987, 1, 2)),
        (None, None, None, None),
        ("Sari", None, "NIP-2", "02-01-1990"),
        ("", "ghost@school.id", None, None),
    )

    parsed = read_profiles(sheet, "teacher")

    [(row_no, budi)] = parsed.profiles
    assert row_no == 2
    assert budi == TeacherProfile(
        name="Budi", email="budi@school.id", employee_id="1987001", birth_date=date(1987, 1, 2)
    )
    assert [e.row for e in parsed.errors] == [4, 5]


def test_unknown_column_rejects_the_file():
    with pytest.raises(ValidationError) as exc:
        read_profiles(_xlsx(("name", "salary"), ("Budi", 10)), "teacher")
    assert "salary" in str(exc.value)


def test_missing_name_column_rejects_the_file():
    with pytest.raises(ValidationError):
        read_profiles(_xlsx(("email",), ("a@b.c",)), "student")


def test_not_a_workbook():
    with pytest.raises(ValidationError) as exc:
        read_profiles(io.BytesIO(b"name,email\nBudi,b@x\n"), "student")
    assert exc.value.field == "file"


def test_import_skips_taken_and_repeated_emails():
    users = InMemoryUsers(emails=["taken@school.id"])
    sheet = _xlsx(
        ("name", "email"),
        ("Ani", "ani@school.id"),
        ("Ana", "taken@school.id"),
        ("Ani 2", "ani@school.id"),
        ("Bayu", None),
    )

    result = UserService(users).import_users(sheet, "student")

    assert len(result.created_ids) == 2
    assert [p.name for _, p in users.created] == ["Ani", "Bayu"]
    assert [e.row for e in result.errors] == [3, 4]


def test_create_user_rejects_taken_email():
    service = UserService(InMemoryUsers(emails=["budi@school.id"]))

    with pytest.raises(ConflictError):
        service.create_user("teacher", {"name": "Budi", "email": "budi@school.id"})
    assert service.create_user("teacher", {"name": "Sari", "email": "sari@school.id"})


def test_parent_student_ids_from_a_numeric_cell():
    assert build_profile("parent", {"name": "Ibu Sari", "student_ids": 12345.0}).student_ids == ("12345",)
    assert build_profile("parent", {"name": "Ibu Sari", "student_ids": [1.0, "s2"]}).student_ids == ("1", "s2")


def test_read_parent_sheet_with_numeric_student_cell():
    sheet = _xlsx(("Nama", "Siswa"), ("Ibu Sari", 12345), ("Pak Budi", "s1,s2"))

    parsed = read_profiles(sheet, "parent")

    assert parsed.errors == []
    assert [p.student_ids for _, p in parsed.profiles] == [("12345",), ("s1", "s2")]
