from __future__ import annotations

import json
from typing import Optional, Sequence

from ..core.enums import Discipline, ProjectType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, optional_bool, optional_float
from ..geo.model import GpsPoint, RoutePoint
from .model import Package, Project
from .repository import ProjectRepository

_PROJECT_COLUMNS = """
    project_id, name, org_unit_path, project_type, sanctioned_amount,
    site_lat, site_lng, site_radius_meters, assigned_je_ids,
    physical_percent, financial_percent,
    agreement_start_date, agreement_end_date, expected_completion_date, actual_completion_date
"""


class MySQLProjectRepository(ProjectRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, project_id: str) -> Optional[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_PROJECT_COLUMNS} FROM projects WHERE project_id=%s", (project_id,))
            r = fetchone(cur)
            if not r:
                return None
            cur.execute(
                """
                SELECT route_point_id, name, lat, lng, km, active
                FROM route_points
                WHERE project_id=%s
                ORDER BY km IS NULL, km, route_point_id
                """,
                (project_id,),
            )
            route_points = tuple(
                RoutePoint(
                    id=str(rp["route_point_id"]),
                    name=rp.get("name") or "",
                    lat=float(rp["lat"]),
                    lng=float(rp["lng"]),
                    km=optional_float(rp.get("km")),
                    active=optional_bool(rp.get("active")),
                )
                for rp in fetchall(cur)
            )
            return self._to_project(r, route_points)

    def list_all(self) -> Sequence[Project]:
        # Route points are only needed for geofencing; listing skips them.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_PROJECT_COLUMNS} FROM projects ORDER BY name")
            return [self._to_project(r, ()) for r in fetchall(cur)]

    def get_package(self, project_id: str, package_id: str) -> Optional[Package]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT package_id, project_id, name, amount, discipline, owner_je_id, physical_percent, financial_percent
                FROM packages
                WHERE project_id=%s AND package_id=%s
                """,
                (project_id, package_id),
            )
            r = fetchone(cur)
            return self._to_package(r) if r else None

    def list_packages(self, project_id: str) -> Sequence[Package]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT package_id, project_id, name, amount, discipline, owner_je_id, physical_percent, financial_percent
                FROM packages
                WHERE project_id=%s
                ORDER BY name
                """,
                (project_id,),
            )
            return [self._to_package(r) for r in fetchall(cur)]

    def update_project_aggregates(self, project_id: str, *, physical_percent: float, financial_percent: float) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE projects SET physical_percent=%s, financial_percent=%s WHERE project_id=%s",
                (float(physical_percent), float(financial_percent), project_id),
            )
            return cur.rowcount > 0

    def update_package_aggregates(
        self,
        project_id: str,
        package_id: str,
        *,
        physical_percent: float,
        financial_percent: float,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE packages SET physical_percent=%s, financial_percent=%s
                WHERE project_id=%s AND package_id=%s
                """,
                (float(physical_percent), float(financial_percent), project_id, package_id),
            )
            return cur.rowcount > 0

    @staticmethod
    def _to_project(r: dict, route_points: tuple[RoutePoint, ...]) -> Project:
        site_center = None
        if r.get("site_lat") is not None and r.get("site_lng") is not None:
            site_center = GpsPoint(lat=float(r["site_lat"]), lng=float(r["site_lng"]))

        return Project(
            project_id=str(r["project_id"]),
            name=r["name"],
            org_unit_path=r.get("org_unit_path") or "",
            sanctioned_amount=float(r.get("sanctioned_amount") or 0),
            project_type=ProjectType(r.get("project_type") or ProjectType.POINT.value),
            site_center=site_center,
            site_radius_meters=optional_float(r.get("site_radius_meters")),
            route_points=route_points,
            assigned_je_ids=tuple(json.loads(r["assigned_je_ids"])) if r.get("assigned_je_ids") else (),
            physical_percent=float(r.get("physical_percent") or 0),
            financial_percent=float(r.get("financial_percent") or 0),
            agreement_start_date=r.get("agreement_start_date"),
            agreement_end_date=r.get("agreement_end_date"),
            expected_completion_date=r.get("expected_completion_date"),
            actual_completion_date=r.get("actual_completion_date"),
        )

    @staticmethod
    def _to_package(r: dict) -> Package:
        return Package(
            package_id=str(r["package_id"]),
            project_id=str(r["project_id"]),
            name=r["name"],
            amount=float(r.get("amount") or 0),
            discipline=Discipline(r.get("discipline") or Discipline.UNKNOWN.value),
            owner_je_id=r.get("owner_je_id"),
            physical_percent=float(r.get("physical_percent") or 0),
            financial_percent=float(r.get("financial_percent") or 0),
        )
