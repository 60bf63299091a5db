from datetime import datetime, timedelta

import pytest

from src.progress_monitor.progress_monitor.core.enums import GeoMethod, Role, VisitType
from src.progress_monitor.progress_monitor.core.exceptions import AuthorizationError
from src.progress_monitor.progress_monitor.visits.factory import VisitPolicyFactory
from src.progress_monitor.progress_monitor.visits.policies.field_report_policy import FieldReportPolicy
from src.progress_monitor.progress_monitor.visits.policies.supervisor_verify_policy import SupervisorVerifyPolicy
from src.progress_monitor.progress_monitor.visits.recency import VisitRecencyGuard

from tests.fakes import InMemoryVisits

T0 = datetime(2026, 3, 1, 9, 0, 0)


def add_visit(visits, *, actor="JE1", at=T0, visit_type=VisitType.SITE, face=True, geo=True):
    return visits.add(
        project_id="P1",
        created_by=actor,
        created_at=at,
        visit_type=visit_type,
        face_verified=face,
        geo_verified=geo,
        geo_method=GeoMethod.POINT_RADIUS if visit_type == VisitType.SITE else GeoMethod.NONE,
    )


def test_field_report_boundary_23h59_passes_24h01_fails():
    visits = InMemoryVisits()
    visit = add_visit(visits)
    guard = VisitRecencyGuard(visits)

    assert guard.require("JE1", "P1", FieldReportPolicy(), T0 + timedelta(hours=23, minutes=59)) == visit
    with pytest.raises(AuthorizationError):
        guard.require("JE1", "P1", FieldReportPolicy(), T0 + timedelta(hours=24, minutes=1))


def test_exactly_24_hours_still_qualifies():
    visits = InMemoryVisits()
    add_visit(visits)
    assert VisitRecencyGuard(visits).require("JE1", "P1", FieldReportPolicy(), T0 + timedelta(hours=24))


def test_no_visit_is_rejected():
    with pytest.raises(AuthorizationError):
        VisitRecencyGuard(InMemoryVisits()).require("JE1", "P1", FieldReportPolicy(), T0)


def test_only_latest_visit_counts():
    visits = InMemoryVisits()
    add_visit(visits, at=T0)
    add_visit(visits, at=T0 + timedelta(hours=1), geo=False)

    with pytest.raises(AuthorizationError):
        VisitRecencyGuard(visits).require("JE1", "P1", FieldReportPolicy(), T0 + timedelta(hours=2))


def test_other_actor_visits_do_not_count():
    visits = InMemoryVisits()
    add_visit(visits, actor="JE2")
    with pytest.raises(AuthorizationError):
        VisitRecencyGuard(visits).require("JE1", "P1", FieldReportPolicy(), T0)


@pytest.mark.parametrize(
    "visit_type,face,geo,field_ok,supervisor_ok",
    [
        (VisitType.SITE, True, True, True, True),
        (VisitType.SITE, True, False, False, False),
        (VisitType.OFFICE, True, False, False, True),
        (VisitType.OFFICE, False, False, False, False),
        (VisitType.SITE, False, True, False, False),
    ],
)
def test_policy_matrix(visit_type, face, geo, field_ok, supervisor_ok):
    visits = InMemoryVisits()
    event = add_visit(visits, visit_type=visit_type, face=face, geo=geo)

    assert FieldReportPolicy().qualifies(event) is field_ok
    assert SupervisorVerifyPolicy().qualifies(event) is supervisor_ok


def test_factory_picks_policy_by_role():
    factory = VisitPolicyFactory()
    assert isinstance(factory.for_role(Role.JE), FieldReportPolicy)
    assert isinstance(factory.for_role(Role.FE), FieldReportPolicy)
    assert isinstance(factory.for_role(Role.SDO), SupervisorVerifyPolicy)
    with pytest.raises(AuthorizationError):
        factory.for_role(Role.PS)
