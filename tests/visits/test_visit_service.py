from datetime import datetime

import pytest

from src.progress_monitor.progress_monitor.core.enums import GeoMethod, Role, VisitType
from src.progress_monitor.progress_monitor.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.progress_monitor.progress_monitor.faces.gate import FaceMatchGate
from src.progress_monitor.progress_monitor.visits.service import VisitService

from tests.fakes import (
    SITE,
    FakeFaceClient,
    FakeStorage,
    InMemoryOfficers,
    InMemoryProjects,
    InMemoryVisits,
    north_of,
    officer,
    point_project,
)

NOW = datetime(2026, 3, 2, 10, 0, 0)


def make_service(*, score=95.0, fail=False, officers=None):
    visits = InMemoryVisits()
    storage = FakeStorage()
    officers = officers or InMemoryOfficers().add(officer("JE1", Role.JE), officer("SDO1", Role.SDO))
    svc = VisitService(
        visits,
        officers,
        InMemoryProjects([point_project("P1", radius=200)]),
        storage,
        FaceMatchGate(FakeFaceClient(score, fail=fail), min_score=90),
    )
    return svc, visits, storage


def test_site_visit_inside_fence_is_face_and_geo_verified():
    svc, visits, storage = make_service()

    visit = svc.record_visit("JE1", "P1", VisitType.SITE, SITE.lat, SITE.lng, 12.0, b"face", now=NOW)

    assert visit.face_verified is True
    assert visit.geo_verified is True
    assert visit.geo_method == GeoMethod.POINT_RADIUS
    assert visit.created_at == NOW
    assert visit.gps.accuracy == 12.0
    assert visit.face_check_url.startswith("https://storage.test/visits/P1/JE1/")
    assert visits.events == [visit]
    assert len(storage.objects) == 1


def test_site_visit_outside_fence_is_recorded_but_not_geo_verified():
    svc, visits, _ = make_service()
    gps = north_of(SITE, 230)

    visit = svc.record_visit("JE1", "P1", VisitType.SITE, gps.lat, gps.lng, None, b"face", now=NOW)

    assert visit.face_verified is True
    assert visit.geo_verified is False
    assert visit.distance_meters == pytest.approx(230, abs=0.01)
    assert len(visits.events) == 1


def test_office_visit_skips_geo():
    svc, _, _ = make_service()
    visit = svc.record_visit("SDO1", "P1", VisitType.OFFICE, None, None, None, b"face", now=NOW)
    assert visit.geo_method == GeoMethod.NONE
    assert visit.geo_verified is False


def test_face_mismatch_records_nothing():
    svc, visits, _ = make_service(score=60.0)

    with pytest.raises(AuthorizationError, match="Face verification failed"):
        svc.record_visit("JE1", "P1", VisitType.SITE, SITE.lat, SITE.lng, None, b"face", now=NOW)
    assert visits.events == []


def test_face_service_outage_records_nothing():
    svc, visits, _ = make_service(fail=True)

    with pytest.raises(AuthorizationError):
        svc.record_visit("JE1", "P1", VisitType.SITE, SITE.lat, SITE.lng, None, b"face", now=NOW)
    assert visits.events == []


def test_actor_without_enrolled_face_cannot_record_visits():
    officers = InMemoryOfficers().add(officer("JE2", Role.JE, face=None))
    svc, visits, storage = make_service(officers=officers)

    with pytest.raises(ValidationError, match="Master face not registered"):
        svc.record_visit("JE2", "P1", VisitType.SITE, SITE.lat, SITE.lng, None, b"face", now=NOW)
    assert visits.events == []
    assert storage.objects == {}


def test_unknown_project_and_foreign_officer():
    officers = InMemoryOfficers().add(officer("JE3", Role.JE, path="STATE/Zone B"))
    svc, _, _ = make_service(officers=officers)

    with pytest.raises(NotFoundError):
        svc.record_visit("JE3", "NOPE", VisitType.SITE, SITE.lat, SITE.lng, None, b"face", now=NOW)
    with pytest.raises(AuthorizationError):
        svc.record_visit("JE3", "P1", VisitType.SITE, SITE.lat, SITE.lng, None, b"face", now=NOW)


def test_attendance_summaries_for_project():
    svc, _, _ = make_service()
    svc.record_visit("JE1", "P1", VisitType.SITE, SITE.lat, SITE.lng, None, b"f", now=NOW)
    svc.record_visit("SDO1", "P1", VisitType.OFFICE, None, None, None, b"f", now=NOW.replace(hour=12))

    by_actor, by_role = svc.attendance("SDO1", "P1")

    assert {s.user_id for s in by_actor} == {"JE1", "SDO1"}
    assert by_role[Role.SDO].last_visit_type == VisitType.OFFICE
    assert by_role[Role.JE].total_visits == 1
