"""Geofence decisions over POINT and LINEAR project geometries.

Two radius policies live here on purpose:

- `GeoVerifier` is the strict visit check: distance <= radius, no margin.
- `is_near_project` answers general "is this point near the project" queries
  and adds a fixed margin (NEAR_PROJECT_MARGIN_METERS by default).

They are not interchangeable; a visit is only ever geo-verified by the strict
check.
"""
from __future__ import annotations

import logging
import math
from typing import Iterable, Optional, Sequence

from ..core.constants import DEFAULT_CORRIDOR_RADIUS_METERS, EARTH_RADIUS_METERS, NEAR_PROJECT_MARGIN_METERS
from ..core.enums import GeoMethod, ProjectType, VisitType
from ..projects.model import Project
from .model import NO_GEO_CHECK, GeoDecision, GpsPoint, RoutePoint

log = logging.getLogger(__name__)


def haversine_meters(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in meters on a spherical Earth."""
    p1 = math.radians(lat1)
    p2 = math.radians(lat2)
    dphi = p2 - p1
    dl = math.radians(lng2 - lng1)
    a = math.sin(dphi / 2.0) ** 2 + math.cos(p1) * math.cos(p2) * math.sin(dl / 2.0) ** 2
    return 2 * EARTH_RADIUS_METERS * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def distance_between(a: GpsPoint, b: GpsPoint) -> float:
    return haversine_meters(a.lat, a.lng, b.lat, b.lng)


def _usable(rp: RoutePoint) -> bool:
    return (
        isinstance(rp.lat, (int, float))
        and isinstance(rp.lng, (int, float))
        and math.isfinite(rp.lat)
        and math.isfinite(rp.lng)
    )


def candidate_route_points(route_points: Sequence[RoutePoint]) -> list[RoutePoint]:
    """Active points (active is not False); all points when none is active."""
    active = [rp for rp in route_points if rp.active is not False]
    return active or list(route_points)


def nearest_route_point(point: GpsPoint, route_points: Iterable[RoutePoint]) -> tuple[Optional[RoutePoint], float]:
    best: Optional[RoutePoint] = None
    best_dist = math.inf
    for rp in route_points:
        if not _usable(rp):
            continue
        d = haversine_meters(point.lat, point.lng, rp.lat, rp.lng)
        if d < best_dist:
            best, best_dist = rp, d
    return best, best_dist


class GeoVerifier:
    """Strict visit geofence: is the reported point inside the authorized zone?"""

    def __init__(self, *, default_corridor_meters: float = DEFAULT_CORRIDOR_RADIUS_METERS):
        self._default_corridor = float(default_corridor_meters)

    def verify(self, point: Optional[GpsPoint], project: Project, visit_type: VisitType) -> GeoDecision:
        # Office visits never attempt a geo check. Accuracy is recorded by the
        # caller but does not move the decision.
        if visit_type != VisitType.SITE or point is None:
            return NO_GEO_CHECK

        if project.project_type == ProjectType.LINEAR and project.route_points:
            best, best_dist = nearest_route_point(point, candidate_route_points(project.route_points))
            if best is not None:
                corridor = self._corridor_radius(project)
                return GeoDecision(
                    geo_verified=best_dist <= corridor,
                    geo_method=GeoMethod.ROUTE_CORRIDOR,
                    distance_meters=best_dist,
                    route_point_id=best.id,
                    route_point_name=best.name,
                )
            log.warning("project %s has no usable route point, falling back to site center", project.project_id)

        return self._verify_point(point, project)

    def _corridor_radius(self, project: Project) -> float:
        radius = project.site_radius_meters
        if radius is None or not math.isfinite(radius):
            return self._default_corridor
        return float(radius)

    @staticmethod
    def _verify_point(point: GpsPoint, project: Project) -> GeoDecision:
        if project.site_center is None or project.site_radius_meters is None:
            return NO_GEO_CHECK
        d = distance_between(point, project.site_center)
        return GeoDecision(
            geo_verified=d <= project.site_radius_meters,
            geo_method=GeoMethod.POINT_RADIUS,
            distance_meters=d,
        )


def is_near_project(project: Project, point: GpsPoint, margin_meters: float = NEAR_PROJECT_MARGIN_METERS) -> bool:
    """Lenient membership query: radius plus a fixed margin. Not used for visits."""
    if project.site_center is None or not project.site_radius_meters:
        return False
    return distance_between(project.site_center, point) <= project.site_radius_meters + margin_meters
