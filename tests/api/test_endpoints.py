import io

import pytest

from src.progress_monitor.progress_monitor.container import Container
from src.progress_monitor.progress_monitor.core.enums import Role
from src.progress_monitor.progress_monitor.core.exceptions import StorageError
from src.progress_monitor.progress_monitor.faces.gate import FaceMatchGate
from src.progress_monitor.progress_monitor.geo.geofence import GeoVerifier
from src.progress_monitor.progress_monitor.main import create_app
from src.progress_monitor.progress_monitor.payments.service import PaymentService
from src.progress_monitor.progress_monitor.progress.model import Stage
from src.progress_monitor.progress_monitor.progress.service import ProgressService
from src.progress_monitor.progress_monitor.projects.model import Package
from src.progress_monitor.progress_monitor.risk.service import OversightService
from src.progress_monitor.progress_monitor.rollup.service import RollupService
from src.progress_monitor.progress_monitor.visits.recency import VisitRecencyGuard
from src.progress_monitor.progress_monitor.visits.service import VisitService

from tests.fakes import (
    SITE,
    FakeFaceClient,
    FakeStorage,
    InMemoryOfficers,
    InMemoryPayments,
    InMemoryProgress,
    InMemoryProjects,
    InMemoryVisits,
    north_of,
    officer,
    point_project,
)


class BrokenStorage:
    def put(self, data, *, key, content_type):
        raise StorageError("bucket unavailable")


def build(storage=None, face_score=95.0) -> Container:
    officers = InMemoryOfficers().add(
        officer("JE1", Role.JE),
        officer("SDO1", Role.SDO),
        officer("EE1", Role.EE),
    )
    projects = InMemoryProjects(
        [point_project("P1", radius=200)],
        [Package(package_id="PK1", project_id="P1", name="Civil", amount=1_000_000)],
    )
    visits = InMemoryVisits()
    progress = InMemoryProgress(
        [Stage(stage_id=1, project_id="P1", package_id="PK1", name="Foundation", order=1, weight_percent=100)]
    )
    payments = InMemoryPayments()
    storage = storage or FakeStorage()
    geo = GeoVerifier()
    rollup = RollupService(projects, progress, payments)
    return Container(
        conn=None,
        officers_repo=officers,
        projects_repo=projects,
        visits_repo=visits,
        progress_repo=progress,
        payments_repo=payments,
        geo_verifier=geo,
        near_project_margin_meters=50,
        visit_service=VisitService(visits, officers, projects, storage, FaceMatchGate(FakeFaceClient(face_score)), geo),
        progress_service=ProgressService(progress, officers, projects, VisitRecencyGuard(visits), storage, rollup),
        payment_service=PaymentService(payments, officers, projects, rollup),
        rollup_service=rollup,
        oversight_service=OversightService(projects, visits, officers, rollup),
    )


@pytest.fixture
def make_client(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")

    def _make(container=None):
        app = create_app(container or build())
        return app.test_client()

    return _make


def as_officer(code):
    return {"X-Officer-Code": code}


def post_visit(client, code, point, visit_type="site"):
    return client.post(
        "/api/visits",
        data={
            "projectId": "P1",
            "visitType": visit_type,
            "lat": str(point.lat),
            "lng": str(point.lng),
            "accuracy": "8",
            "face": (io.BytesIO(b"live-face"), "face.jpg"),
        },
        headers=as_officer(code),
        content_type="multipart/form-data",
    )


def test_missing_principal_header_is_401(make_client):
    resp = make_client().get("/api/oversight/projects")
    assert resp.status_code == 401
    assert resp.get_json()["ok"] is False


def test_visit_reports_strict_and_margin_checks_separately(make_client):
    client = make_client()

    resp = post_visit(client, "JE1", north_of(SITE, 230))

    body = resp.get_json()
    assert resp.status_code == 201
    assert body["visit"]["geo_verified"] is False
    assert body["visit"]["face_verified"] is True
    assert body["nearProject"] is True


def test_face_mismatch_is_403(make_client):
    client = make_client(build(face_score=10.0))
    resp = post_visit(client, "JE1", SITE)
    assert resp.status_code == 403
    assert "Face verification failed" in resp.get_json()["error"]


def test_storage_failure_is_502(make_client):
    client = make_client(build(storage=BrokenStorage()))
    resp = post_visit(client, "JE1", SITE)
    assert resp.status_code == 502


def test_bad_visit_type_is_400(make_client):
    resp = post_visit(make_client(), "JE1", SITE, visit_type="home")
    assert resp.status_code == 400


def test_full_flow_report_verify_pay_and_review(make_client):
    client = make_client()
    assert post_visit(client, "JE1", SITE).status_code == 201

    resp = client.post(
        "/api/progress",
        data={
            "projectId": "P1",
            "packageId": "PK1",
            "stageId": "1",
            "percent": "60",
            "note": "footing poured",
            "photos": [(io.BytesIO(b"p1"), "p1.jpg")],
        },
        headers=as_officer("JE1"),
        content_type="multipart/form-data",
    )
    assert resp.status_code == 201
    event_id = resp.get_json()["eventId"]
    assert resp.get_json()["rollup"]["project_physical_percent"] == 60

    lower = client.post(
        "/api/progress",
        data={"projectId": "P1", "packageId": "PK1", "stageId": "1", "percent": "40", "photos": [(io.BytesIO(b"p"), "p.jpg")]},
        headers=as_officer("JE1"),
        content_type="multipart/form-data",
    )
    assert lower.status_code == 400

    assert client.post(
        f"/api/progress/{event_id}/comment", json={"projectId": "P1", "comment": "curing"}, headers=as_officer("JE1")
    ).status_code == 200

    assert post_visit(client, "SDO1", SITE, visit_type="office").status_code == 201
    resp = client.post(
        "/api/stages/verify",
        json={"projectId": "P1", "packageId": "PK1", "stageId": 1, "eventId": event_id, "percent": 50},
        headers=as_officer("SDO1"),
    )
    assert resp.status_code == 200
    assert resp.get_json()["verification"]["source"] == "office"

    resp = client.post(
        "/api/payments",
        json={"projectId": "P1", "packageId": "PK1", "billNo": "RA-1", "billDate": "2026-02-01", "amount": 2_500_000},
        headers=as_officer("EE1"),
    )
    assert resp.status_code == 201
    assert resp.get_json()["projectFinancialPercent"] == 25.0

    resp = client.get("/api/projects/P1/overview", headers=as_officer("EE1"))
    overview = resp.get_json()["overview"]
    assert resp.status_code == 200
    assert overview["row"]["physical_percent"] == 50
    assert overview["row"]["risk"] == "low"
    assert overview["breakdown"]["green_verified"] == 50
    assert overview["attendance"]["JE"]["total_visits"] == 1

    rows = client.get("/api/oversight/projects", headers=as_officer("EE1")).get_json()["projects"]
    assert [r["project_id"] for r in rows] == ["P1"]

    attendance = client.get("/api/projects/P1/attendance", headers=as_officer("SDO1")).get_json()
    assert {a["user_id"] for a in attendance["byActor"]} == {"JE1", "SDO1"}


def test_stage_admin_endpoints(make_client):
    client = make_client()

    resp = client.post(
        "/api/stages",
        json={"projectId": "P1", "packageId": "PK1", "name": "Extra", "order": 2, "weightPercent": 10},
        headers=as_officer("EE1"),
    )
    assert resp.status_code == 400

    resp = client.get("/api/stages?projectId=P1&packageId=PK1", headers=as_officer("EE1"))
    assert [s["name"] for s in resp.get_json()["stages"]] == ["Foundation"]

    assert client.get("/api/stages?projectId=P1&packageId=NOPE", headers=as_officer("EE1")).status_code == 404


def test_unknown_project_is_404(make_client):
    resp = make_client().get("/api/projects/NOPE/overview", headers=as_officer("EE1"))
    assert resp.status_code == 404
