from __future__ import annotations

import json
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .policy import RoleRepository


class MySQLRoleRepository(RoleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_permissions(self, role_name: str) -> Optional[frozenset[str]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT permissions FROM roles WHERE name=%s", (role_name,))
            r = fetchone(cur)
            if not r:
                return None
            raw = r["permissions"]
            if isinstance(raw, (bytes, bytearray)):
                raw = raw.decode("utf-8")
            values = json.loads(raw) if isinstance(raw, str) else (raw or [])
            return frozenset(str(v) for v in values)
