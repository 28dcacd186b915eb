"""Read user records from an .xlsx sheet, mapping columns by header name.

The first non-empty row is the header. Headers are matched case- and
spacing-insensitively against the profile field names and a few Indonesian
aliases; a header that matches nothing rejects the whole file.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, BinaryIO
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from ..common.validators import require_enum
from ..core.enums import UserType
from ..core.exceptions import DomainError, ValidationError
from .model import Profile, profile_fields
from .profiles import build_profile

HEADER_ALIASES = {
    "nama": "name",
    "namalengkap": "name",
    "jeniskelamin": "gender",
    "tempatlahir": "birth_place",
    "tanggallahir": "birth_date",
    "alamat": "address",
    "telepon": "phone",
    "nohp": "phone",
    "teleponorangtua": "parent_phone",
    "nohporangtua": "parent_phone",
    "kelas": "class_id",
    "tahunajaran": "academic_year_id",
    "tanggalmasuk": "enrollment_date",
    "nip": "employee_id",
    "jabatan": "position",
    "tanggalmulai": "start_date",
    "hubungan": "relation",
    "siswa": "student_ids",
}


def _normalize_header(value: Any) -> str:
    return re.sub(r"[^a-z0-9]", "", str(value or "").lower())


def header_map(headers: list[Any], user_type: UserType) -> dict[int, str]:
    """Column index -> profile field name."""

    lookup = {_normalize_header(f): f for f in profile_fields(user_type)}
    lookup.update({k: v for k, v in HEADER_ALIASES.items() if v in lookup.values()})

    mapping: dict[int, str] = {}
    unknown: list[str] = []
    for idx, raw in enumerate(headers):
        key = _normalize_header(raw)
        if not key:
            continue
        name = lookup.get(key)
        if name is None:
            unknown.append(str(raw))
            continue
        if name in mapping.values():
            raise ValidationError(f"Duplicate column for {name}: {raw}", field=name)
        mapping[idx] = name

    if unknown:
        raise ValidationError(f"Unknown columns: {', '.join(unknown)}", field="columns")
    if "name" not in mapping.values():
        raise ValidationError("Missing required column: name", field="name")
    return mapping


@dataclass(frozen=True)
class RowError:
    row: int
    error: str

    def to_dict(self) -> dict:
        return {"row": self.row, "error": self.error}


@dataclass
class ParsedSheet:
    profiles: list[tuple[int, Profile]] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)


def read_profiles(stream: BinaryIO, user_type: UserType | str) -> ParsedSheet:
    user_type = require_enum(UserType, user_type, "userType")
    try:
        wb = load_workbook(stream, read_only=True, data_only=True)
    except (InvalidFileException, BadZipFile, OSError, KeyError, ValueError):
        raise ValidationError("File is not a readable .xlsx workbook", field="file")

    try:
        ws = wb.active
        rows = ws.iter_rows(values_only=True)

        mapping: dict[int, str] | None = None
        out = ParsedSheet()
        for row_no, row in enumerate(rows, start=1):
            if not any(v not in (None, "") for v in row):
                continue
            if mapping is None:
                mapping = header_map(list(row), user_type)
                continue

            payload = {name: row[idx] for idx, name in mapping.items() if idx < len(row)}
            try:
                out.profiles.append((row_no, build_profile(user_type, payload)))
            except DomainError as e:
                out.errors.append(RowError(row=row_no, error=str(e)))

        if mapping is None:
            raise ValidationError("The sheet is empty", field="file")
        return out
    finally:
        wb.close()
