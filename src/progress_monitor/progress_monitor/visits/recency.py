from __future__ import annotations

import logging
from datetime import datetime, timedelta

from ..core.constants import VISIT_RECENCY_HOURS
from ..core.exceptions import AuthorizationError
from .model import VisitEvent
from .policies.base import VisitPolicy
from .repository import VisitRepository

log = logging.getLogger(__name__)


class VisitRecencyGuard:
    """Gate for progress writes: the actor's latest visit must qualify and be fresh.

    Only the single latest visit counts. An older qualifying visit does not
    rescue a newer non-qualifying one.
    """

    def __init__(self, visits: VisitRepository, *, window_hours: float = VISIT_RECENCY_HOURS):
        self._visits = visits
        self._window = timedelta(hours=window_hours)

    def require(self, actor: str, project_id: str, policy: VisitPolicy, now: datetime) -> VisitEvent:
        latest = self._visits.latest_for_actor(project_id, actor)
        if latest is None:
            log.info("recency guard: no visit for actor=%s project=%s", actor, project_id)
            raise AuthorizationError("A recent verified visit is required before this action")

        if not policy.qualifies(latest):
            log.info(
                "recency guard: visit %s does not satisfy %s (type=%s face=%s geo=%s)",
                latest.visit_id,
                policy.name,
                latest.visit_type.value,
                latest.face_verified,
                latest.geo_verified,
            )
            raise AuthorizationError("A recent verified visit is required before this action")

        if now - latest.created_at > self._window:
            log.info("recency guard: visit %s is stale (created_at=%s)", latest.visit_id, latest.created_at.isoformat())
            raise AuthorizationError("A recent verified visit is required before this action")

        return latest
