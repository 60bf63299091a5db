from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import GeoMethod, ProjectType, VisitType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, optional_float
from ..geo.model import GpsPoint
from .model import NewVisit, VisitEvent
from .repository import VisitRepository

_COLUMNS = """
    visit_id, project_id, created_by, created_at, visit_type, project_type,
    face_verified, geo_verified, geo_method, distance_meters,
    route_point_id, route_point_name, gps_lat, gps_lng, gps_accuracy, face_check_url
"""


class MySQLVisitRepository(VisitRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def append(self, visit: NewVisit) -> int:
        gps = visit.gps
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO visit_events(
                    project_id, created_by, created_at, visit_type, project_type,
                    face_verified, geo_verified, geo_method, distance_meters,
                    route_point_id, route_point_name, gps_lat, gps_lng, gps_accuracy, face_check_url
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    visit.project_id,
                    visit.created_by,
                    visit.created_at,
                    visit.visit_type.value,
                    visit.project_type.value,
                    int(visit.face_verified),
                    int(visit.geo_verified),
                    visit.geo_method.value,
                    visit.distance_meters,
                    visit.route_point_id,
                    visit.route_point_name,
                    gps.lat if gps else None,
                    gps.lng if gps else None,
                    gps.accuracy if gps else None,
                    visit.face_check_url,
                ),
            )
            return int(cur.lastrowid)

    def latest_for_actor(self, project_id: str, actor: str) -> Optional[VisitEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM visit_events
                WHERE project_id=%s AND created_by=%s
                ORDER BY created_at DESC, visit_id DESC
                LIMIT 1
                """,
                (project_id, actor),
            )
            r = fetchone(cur)
            return self._to_event(r) if r else None

    def list_for_project(self, project_id: str) -> Sequence[VisitEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM visit_events
                WHERE project_id=%s
                ORDER BY created_at DESC, visit_id DESC
                """,
                (project_id,),
            )
            return [self._to_event(r) for r in fetchall(cur)]

    @staticmethod
    def _to_event(r: dict) -> VisitEvent:
        gps = None
        if r.get("gps_lat") is not None and r.get("gps_lng") is not None:
            gps = GpsPoint(lat=float(r["gps_lat"]), lng=float(r["gps_lng"]), accuracy=optional_float(r.get("gps_accuracy")))
        return VisitEvent(
            visit_id=int(r["visit_id"]),
            project_id=str(r["project_id"]),
            created_by=str(r["created_by"]),
            created_at=r["created_at"],
            visit_type=VisitType(r["visit_type"]),
            face_verified=bool(r["face_verified"]),
            geo_verified=bool(r["geo_verified"]),
            geo_method=GeoMethod(r["geo_method"]),
            project_type=ProjectType(r.get("project_type") or ProjectType.POINT.value),
            distance_meters=optional_float(r.get("distance_meters")),
            route_point_id=r.get("route_point_id"),
            route_point_name=r.get("route_point_name"),
            gps=gps,
            face_check_url=r.get("face_check_url"),
        )
