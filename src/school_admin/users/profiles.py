from __future__ import annotations

from datetime import date, datetime
from typing import Any, Mapping

from ..common.datetime_utils import parse_iso_date
from ..common.validators import require_enum, require_non_empty
from ..core.enums import UserType
from ..core.exceptions import ValidationError
from .model import DATE_FIELDS, PROFILE_TYPES, Profile, profile_fields


def _snake(key: str) -> str:
    out: list[str] = []
    for ch in key.strip():
        if ch.isupper():
            out.append("_" + ch.lower())
        else:
            out.append(ch)
    return "".join(out).lstrip("_")


def _clean_value(name: str, value: Any) -> Any:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if name in DATE_FIELDS:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        try:
            return parse_iso_date(str(value).strip()[:10])
        except ValueError:
            raise ValidationError(f"{name} must be YYYY-MM-DD", field=name)
    if name == "student_ids":
        if isinstance(value, str):
            return tuple(s.strip() for s in value.split(",") if s.strip())
        if isinstance(value, (list, tuple)):
            return tuple(_text(s) for s in value if s is not None and _text(s))
        return (_text(value),)
    return _text(value)


def _text(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        # spreadsheet cells hold NISN/NIK and ids as floats
        value = int(value)
    return str(value).strip()


def build_profile(user_type: UserType | str, payload: Mapping[str, Any]) -> Profile:
    """Build the closed profile for ``user_type``; unknown fields are rejected.

    Keys may be snake_case or camelCase.
    """

    user_type = require_enum(UserType, user_type, "userType")
    allowed = set(profile_fields(user_type))

    values: dict[str, Any] = {}
    unknown: list[str] = []
    for key, value in payload.items():
        name = _snake(str(key))
        if name not in allowed:
            unknown.append(str(key))
            continue
        values[name] = _clean_value(name, value)

    if unknown:
        unknown.sort()
        raise ValidationError(f"Unknown fields for {user_type.value}: {', '.join(unknown)}", field=unknown[0])

    values["name"] = require_non_empty(values.get("name"), "name")
    if "student_ids" in values and values["student_ids"] is None:
        values["student_ids"] = ()
    return PROFILE_TYPES[user_type](**values)
