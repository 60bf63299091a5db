from datetime import datetime

from src.progress_monitor.progress_monitor.core.enums import GeoMethod, Role, VisitType
from src.progress_monitor.progress_monitor.visits import ledger

from tests.fakes import InMemoryOfficers, InMemoryVisits, officer


def seed():
    visits = InMemoryVisits()
    rows = [
        ("JE1", datetime(2026, 1, 1, 9), VisitType.SITE, True),
        ("JE1", datetime(2026, 1, 3, 9), VisitType.SITE, False),
        ("FE1", datetime(2026, 1, 2, 9), VisitType.SITE, True),
        ("SDO1", datetime(2026, 1, 4, 9), VisitType.OFFICE, False),
        ("GHOST", datetime(2026, 1, 5, 9), VisitType.SITE, True),
    ]
    for actor, at, vt, geo in rows:
        visits.add(
            project_id="P1",
            created_by=actor,
            created_at=at,
            visit_type=vt,
            face_verified=True,
            geo_verified=geo,
            geo_method=GeoMethod.POINT_RADIUS,
        )
    return visits


def test_summarize_by_actor_counts_verified_and_latest():
    summaries = {s.user_id: s for s in ledger.summarize_by_actor(seed().list_for_project("P1"))}

    je = summaries["JE1"]
    assert je.total_visits == 2
    assert je.verified_visits == 1
    assert je.last_visit_at == datetime(2026, 1, 3, 9)
    assert je.last_visit_type == VisitType.SITE
    assert summaries["SDO1"].verified_visits == 0


def test_summarize_by_role_skips_unknown_actors():
    officers = InMemoryOfficers().add(officer("JE1", Role.JE), officer("FE1", Role.FE), officer("SDO1", Role.SDO))

    by_role = ledger.summarize_by_role(seed().list_for_project("P1"), officers.get_by_code)

    assert set(by_role) == {Role.JE, Role.FE, Role.SDO}
    assert by_role[Role.JE].total_visits == 2
    assert by_role[Role.JE].last_visit == datetime(2026, 1, 3, 9)
    assert by_role[Role.JE].last_by == "Officer JE1"
    assert by_role[Role.SDO].last_visit_type == VisitType.OFFICE


def test_empty_ledger():
    assert ledger.summarize_by_actor([]) == []
    assert ledger.summarize_by_role([], lambda code: None) == {}
