"""Read-time aggregation over the visit ledger. Nothing here is persisted."""
from __future__ import annotations

from typing import Callable, Iterable, Optional

from ..core.enums import Role
from ..users.model import Officer
from .model import ActorVisitSummary, RoleVisitSummary, VisitEvent


def summarize_by_actor(events: Iterable[VisitEvent]) -> list[ActorVisitSummary]:
    acc: dict[str, dict] = {}
    for e in events:
        s = acc.get(e.created_by)
        if s is None:
            s = {"total": 0, "verified": 0, "last": None}
            acc[e.created_by] = s
        s["total"] += 1
        if e.geo_verified:
            s["verified"] += 1
        if s["last"] is None or e.created_at > s["last"].created_at:
            s["last"] = e

    return [
        ActorVisitSummary(
            user_id=actor,
            total_visits=s["total"],
            verified_visits=s["verified"],
            last_visit_at=s["last"].created_at if s["last"] else None,
            last_visit_type=s["last"].visit_type if s["last"] else None,
        )
        for actor, s in acc.items()
    ]


def summarize_by_role(
    events: Iterable[VisitEvent],
    resolve_officer: Callable[[str], Optional[Officer]],
) -> dict[Role, RoleVisitSummary]:
    """Group visits by the actor's role; actors unknown to the directory are skipped."""
    cache: dict[str, Optional[Officer]] = {}
    acc: dict[Role, dict] = {}

    for e in events:
        if e.created_by not in cache:
            cache[e.created_by] = resolve_officer(e.created_by)
        officer = cache[e.created_by]
        if officer is None:
            continue

        s = acc.setdefault(officer.role, {"total": 0, "last": None, "by": None})
        s["total"] += 1
        if s["last"] is None or e.created_at > s["last"].created_at:
            s["last"] = e
            s["by"] = officer.name or officer.officer_code

    return {
        role: RoleVisitSummary(
            role=role,
            total_visits=s["total"],
            last_visit=s["last"].created_at,
            last_by=s["by"],
            last_visit_type=s["last"].visit_type,
        )
        for role, s in acc.items()
    }
