from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import GeoMethod


@dataclass(frozen=True)
class GpsPoint:
    lat: float
    lng: float
    accuracy: Optional[float] = None


@dataclass(frozen=True)
class RoutePoint:
    """A surveyed point along a LINEAR project (road, pipeline, line)."""

    id: str
    name: str
    lat: float
    lng: float
    km: Optional[float] = None
    active: Optional[bool] = None


@dataclass(frozen=True)
class GeoDecision:
    geo_verified: bool
    geo_method: GeoMethod
    distance_meters: Optional[float] = None
    route_point_id: Optional[str] = None
    route_point_name: Optional[str] = None


NO_GEO_CHECK = GeoDecision(geo_verified=False, geo_method=GeoMethod.NONE)
