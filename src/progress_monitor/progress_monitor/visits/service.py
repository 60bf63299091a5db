from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..core.enums import VISIT_ROLES, Role, VisitType
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..faces.gate import FaceMatchGate
from ..geo.geofence import GeoVerifier
from ..geo.model import GpsPoint
from ..projects.repository import ProjectRepository
from ..storage.client import ObjectStorage, visit_photo_key
from ..users.access import require_project_access
from ..users.repository import OfficerRepository
from . import ledger
from .model import ActorVisitSummary, NewVisit, RoleVisitSummary, VisitEvent
from .repository import VisitRepository

log = logging.getLogger(__name__)


class VisitService:
    """Records presence events. A visit is only written after the face gate passes."""

    def __init__(
        self,
        visits: VisitRepository,
        officers: OfficerRepository,
        projects: ProjectRepository,
        storage: ObjectStorage,
        face_gate: FaceMatchGate,
        geo: GeoVerifier | None = None,
    ):
        self._visits = visits
        self._officers = officers
        self._projects = projects
        self._storage = storage
        self._face_gate = face_gate
        self._geo = geo or GeoVerifier()

    def record_visit(
        self,
        officer_code: str,
        project_id: str,
        visit_type: VisitType,
        lat: Optional[float],
        lng: Optional[float],
        accuracy: Optional[float],
        face_image: bytes,
        *,
        now: datetime | None = None,
    ) -> VisitEvent:
        now = now or datetime.now()

        officer = self._officers.get_by_code(officer_code)
        if not officer or not officer.is_active:
            raise AuthorizationError("Unknown or inactive officer")
        if officer.role not in VISIT_ROLES:
            raise AuthorizationError(f"Role {officer.role.value} cannot record visits")

        project = self._projects.get_by_id(project_id)
        if not project:
            raise NotFoundError("Project not found")
        require_project_access(officer, project)

        if not officer.has_enrolled_face:
            raise ValidationError("Master face not registered. Contact admin.")
        if not face_image:
            raise ValidationError("Face image is required")

        live_url = self._storage.put(face_image, key=visit_photo_key(project_id, officer_code), content_type="image/jpeg")

        if not self._face_gate.matches(officer.master_face_url, live_url):
            log.warning("face verification failed officer=%s project=%s", officer_code, project_id)
            raise AuthorizationError("Face verification failed. Visit not recorded.")

        gps = None
        if lat is not None and lng is not None:
            gps = GpsPoint(lat=lat, lng=lng, accuracy=accuracy)
        decision = self._geo.verify(gps, project, visit_type)

        new_visit = NewVisit(
            project_id=project_id,
            created_by=officer_code,
            created_at=now,
            visit_type=visit_type,
            face_verified=True,
            geo_verified=decision.geo_verified,
            geo_method=decision.geo_method,
            project_type=project.project_type,
            distance_meters=decision.distance_meters,
            route_point_id=decision.route_point_id,
            route_point_name=decision.route_point_name,
            gps=gps,
            face_check_url=live_url,
        )
        visit_id = self._visits.append(new_visit)
        log.info(
            "visit recorded id=%s officer=%s project=%s type=%s geo_verified=%s method=%s",
            visit_id,
            officer_code,
            project_id,
            visit_type.value,
            decision.geo_verified,
            decision.geo_method.value,
        )
        return VisitEvent(visit_id=visit_id, **_fields(new_visit))

    def attendance(self, officer_code: str, project_id: str) -> tuple[list[ActorVisitSummary], dict[Role, RoleVisitSummary]]:
        """Per-actor and per-role attendance for one project."""
        officer = self._officers.get_by_code(officer_code)
        if not officer:
            raise AuthorizationError("Unknown officer")
        project = self._projects.get_by_id(project_id)
        if not project:
            raise NotFoundError("Project not found")
        require_project_access(officer, project)

        events = list(self._visits.list_for_project(project_id))
        by_actor = ledger.summarize_by_actor(events)
        by_role = ledger.summarize_by_role(events, self._officers.get_by_code)
        return by_actor, by_role


def _fields(visit: NewVisit) -> dict:
    return {name: getattr(visit, name) for name in visit.__dataclass_fields__}
