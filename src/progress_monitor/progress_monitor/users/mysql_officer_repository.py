from __future__ import annotations

from typing import Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Officer
from .repository import OfficerRepository


class MySQLOfficerRepository(OfficerRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_code(self, officer_code: str) -> Optional[Officer]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT officer_code, name, role, org_unit_path, master_face_url, is_active
                FROM officers
                WHERE officer_code=%s
                """,
                (officer_code,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Officer(
                officer_code=str(r["officer_code"]),
                name=r["name"],
                role=Role(r["role"]),
                org_unit_path=r.get("org_unit_path") or "",
                master_face_url=r.get("master_face_url"),
                is_active=bool(r.get("is_active", 1)),
            )
