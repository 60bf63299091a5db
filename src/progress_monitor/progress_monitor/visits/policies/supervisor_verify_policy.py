from __future__ import annotations

from ...core.enums import VisitType
from ..model import VisitEvent
from .base import VisitPolicy


class SupervisorVerifyPolicy(VisitPolicy):
    """Supervisors may verify from the office; a site visit still has to be inside the fence."""

    name = "supervisor-verify"

    def qualifies(self, event: VisitEvent) -> bool:
        if not event.face_verified:
            return False
        if event.visit_type == VisitType.OFFICE:
            return True
        return event.visit_type == VisitType.SITE and event.geo_verified
