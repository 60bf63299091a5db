from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import GeoMethod, ProjectType, Role, VisitType
from ..geo.model import GpsPoint


@dataclass(frozen=True)
class VisitEvent:
    """Domain entity: a recorded presence event.

    Append-only. `face_verified` / `geo_verified` are decided at write time and
    never recomputed.
    """

    visit_id: int
    project_id: str
    created_by: str
    created_at: datetime
    visit_type: VisitType
    face_verified: bool
    geo_verified: bool
    geo_method: GeoMethod
    project_type: ProjectType = ProjectType.POINT
    distance_meters: Optional[float] = None
    route_point_id: Optional[str] = None
    route_point_name: Optional[str] = None
    gps: Optional[GpsPoint] = None
    face_check_url: Optional[str] = None


@dataclass(frozen=True)
class NewVisit:
    """Visit fields before the ledger assigns an id."""

    project_id: str
    created_by: str
    created_at: datetime
    visit_type: VisitType
    face_verified: bool
    geo_verified: bool
    geo_method: GeoMethod
    project_type: ProjectType = ProjectType.POINT
    distance_meters: Optional[float] = None
    route_point_id: Optional[str] = None
    route_point_name: Optional[str] = None
    gps: Optional[GpsPoint] = None
    face_check_url: Optional[str] = None


@dataclass(frozen=True)
class ActorVisitSummary:
    """Read-model: per-actor attendance derived from visits."""

    user_id: str
    total_visits: int
    verified_visits: int
    last_visit_at: Optional[datetime]
    last_visit_type: Optional[VisitType]


@dataclass(frozen=True)
class RoleVisitSummary:
    """Read-model: per-role attendance for oversight dashboards."""

    role: Role
    total_visits: int
    last_visit: Optional[datetime]
    last_by: Optional[str]
    last_visit_type: Optional[VisitType]
