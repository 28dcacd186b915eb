from __future__ import annotations

from dataclasses import asdict
from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, in_clause
from .model import ParentProfile, Profile, user_type_of
from .repository import UserRepository


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_many(self, profiles: Sequence[tuple[str, Profile]]) -> int:
        if not profiles:
            return 0

        with db_cursor(self._conn_factory) as (_, cur):
            for user_id, profile in profiles:
                user_type = user_type_of(profile).value
                values = asdict(profile)
                student_ids = values.pop("student_ids", ())

                columns = ["id", "user_type", "role", *values.keys()]
                cur.execute(
                    f"INSERT INTO users({', '.join(columns)}) VALUES({in_clause(columns)})",
                    (user_id, user_type, user_type, *values.values()),
                )

                if isinstance(profile, ParentProfile) and student_ids:
                    cur.executemany(
                        "INSERT INTO parent_students(parent_id, student_id) VALUES(%s,%s) ON DUPLICATE KEY UPDATE parent_id=parent_id",
                        [(user_id, sid) for sid in student_ids],
                    )
            return len(profiles)

    def existing_emails(self, emails: Sequence[str]) -> set[str]:
        if not emails:
            return set()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT email FROM users WHERE email IN ({in_clause(emails)})", tuple(emails))
            return {r["email"] for r in fetchall(cur)}
