from __future__ import annotations

from ...core.enums import VisitType
from ..model import VisitEvent
from .base import VisitPolicy


class FieldReportPolicy(VisitPolicy):
    """Field actors must be physically on site, face and geo verified."""

    name = "field-report"

    def qualifies(self, event: VisitEvent) -> bool:
        return event.visit_type == VisitType.SITE and event.face_verified and event.geo_verified
