from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Discipline, ProjectType
from ..geo.model import GpsPoint, RoutePoint


@dataclass(frozen=True)
class Project:
    """Domain entity: Project.

    `physical_percent` / `financial_percent` are denormalized aggregates written
    only by the rollup service.
    """

    project_id: str
    name: str
    org_unit_path: str
    sanctioned_amount: float
    project_type: ProjectType = ProjectType.POINT
    site_center: Optional[GpsPoint] = None
    site_radius_meters: Optional[float] = None
    route_points: tuple[RoutePoint, ...] = ()
    assigned_je_ids: tuple[str, ...] = ()
    physical_percent: float = 0.0
    financial_percent: float = 0.0
    agreement_start_date: Optional[datetime] = None
    agreement_end_date: Optional[datetime] = None
    expected_completion_date: Optional[datetime] = None
    actual_completion_date: Optional[datetime] = None


@dataclass(frozen=True)
class Package:
    package_id: str
    project_id: str
    name: str
    amount: float
    discipline: Discipline = Discipline.UNKNOWN
    owner_je_id: Optional[str] = None
    physical_percent: float = 0.0
    financial_percent: float = 0.0

