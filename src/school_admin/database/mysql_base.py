from __future__ import annotations

from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, List, Optional, Sequence

import mysql.connector

from ..core.exceptions import ConflictError, StorageError, ValidationError
from .connection import DatabaseConnection

DUPLICATE_KEY = 1062
MISSING_REFERENCE = 1452


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Yield (conn, cursor); commit on success, roll back and wrap driver errors."""

    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as e:
        raise StorageError(f"Database connection failed: {e.msg}") from e

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.IntegrityError as e:
        conn.rollback()
        if e.errno == DUPLICATE_KEY:
            raise ConflictError("Record already exists") from e
        if e.errno == MISSING_REFERENCE:
            raise ValidationError("Referenced record does not exist") from e
        raise StorageError(f"Database constraint failed: {e.msg}") from e
    except mysql.connector.Error as e:
        conn.rollback()
        raise StorageError(f"Database operation failed: {e.msg}") from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def in_clause(values: Sequence[Any]) -> str:
    """Placeholder list for ``IN (...)``; callers must not pass an empty sequence."""
    return ", ".join(["%s"] * len(values))


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Normalize MySQL TIME values across connector implementations.

    mysql-connector can return TIME as:
    - datetime.time
    - datetime.timedelta
    - string (e.g. '08:30:00')
    """

    if value is None:
        return None

    if isinstance(value, time):
        return value

    if isinstance(value, timedelta):
        total_seconds = int(value.total_seconds()) % 86400
        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        seconds = total_seconds % 60
        return time(hour=hours, minute=minutes, second=seconds)

    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        hours = int(parts[0])
        minutes = int(parts[1])
        seconds = int(parts[2]) if len(parts) >= 3 and parts[2] else 0
        return time(hour=hours, minute=minutes, second=seconds)

    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")


def hhmm(value: Any) -> Optional[str]:
    """TIME column -> 'HH:MM' string as used by the domain models."""
    t = normalize_mysql_time(value)
    return t.strftime("%H:%M") if t else None
