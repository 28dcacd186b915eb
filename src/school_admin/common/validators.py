from __future__ import annotations

from typing import Any, Iterable, Optional, Type, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E")


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required", field=field_name)
    return str(value).strip()


def require_present(value: Any, field_name: str) -> Any:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"Missing required field: {field_name}", field=field_name)
    return value


def require_enum(enum_cls: Type[E], value: Any, field_name: str) -> E:
    try:
        return enum_cls(value)  # type: ignore[call-arg]
    except ValueError:
        allowed = ", ".join(str(m.value) for m in enum_cls)  # type: ignore[attr-defined]
        raise ValidationError(f"{field_name} must be one of: {allowed}", field=field_name)


def dedupe(values: Iterable[str]) -> list[str]:
    """Drop repeated values keeping the first-seen order."""
    seen: set[str] = set()
    out: list[str] = []
    for v in values:
        if v in seen:
            continue
        seen.add(v)
        out.append(v)
    return out
