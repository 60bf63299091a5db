from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .audit.client import HttpPhotoAuditClient
from .database.connection import DBConfig, DatabaseConnection
from .faces.client import HttpFaceComparisonClient
from .faces.gate import FaceMatchGate
from .geo.geofence import GeoVerifier
from .payments.mysql_payment_repository import MySQLPaymentRepository
from .payments.repository import PaymentRepository
from .payments.service import PaymentService
from .progress.mysql_progress_repository import MySQLProgressRepository
from .progress.repository import ProgressRepository
from .progress.service import ProgressService
from .projects.mysql_project_repository import MySQLProjectRepository
from .projects.repository import ProjectRepository
from .risk.classifier import risk_policy_named
from .risk.service import OversightService
from .rollup.service import RollupService
from .storage.client import HttpObjectStorage
from .users.mysql_officer_repository import MySQLOfficerRepository
from .users.repository import OfficerRepository
from .visits.factory import VisitPolicyFactory
from .visits.mysql_visit_repository import MySQLVisitRepository
from .visits.repository import VisitRepository
from .visits.recency import VisitRecencyGuard
from .visits.service import VisitService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    officers_repo: OfficerRepository
    projects_repo: ProjectRepository
    visits_repo: VisitRepository
    progress_repo: ProgressRepository
    payments_repo: PaymentRepository

    geo_verifier: GeoVerifier
    near_project_margin_meters: float

    visit_service: VisitService
    progress_service: ProgressService
    payment_service: PaymentService
    rollup_service: RollupService
    oversight_service: OversightService


def build_container(*, db_config: dict, settings: Optional[object] = None) -> Container:
    """Wire repositories, collaborator clients and services from a settings module."""
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    def setting(name: str, default=None):
        return getattr(settings, name, default) if settings is not None else default

    timeout = float(setting("HTTP_TIMEOUT_SECONDS", 10.0))

    officers_repo = MySQLOfficerRepository(conn)
    projects_repo = MySQLProjectRepository(conn)
    visits_repo = MySQLVisitRepository(conn)
    progress_repo = MySQLProgressRepository(conn)
    payments_repo = MySQLPaymentRepository(conn)

    storage = HttpObjectStorage(
        setting("STORAGE_BASE_URL", ""),
        public_base_url=setting("STORAGE_PUBLIC_URL"),
        timeout=timeout,
    )

    face_url = setting("FACE_SERVICE_URL")
    face_client = (
        HttpFaceComparisonClient(face_url, api_key=setting("FACE_SERVICE_API_KEY"), timeout=timeout) if face_url else None
    )
    face_gate = FaceMatchGate(
        face_client,
        min_score=float(setting("FACE_MATCH_MIN_SCORE", 90)),
        allow_bypass=bool(setting("ALLOW_FAKE_FACE_MATCH", False)),
    )

    audit_url = setting("AUDIT_SERVICE_URL")
    audit_client = (
        HttpPhotoAuditClient(audit_url, api_key=setting("AUDIT_SERVICE_API_KEY"), timeout=timeout) if audit_url else None
    )

    geo_verifier = GeoVerifier()
    rollup_service = RollupService(projects_repo, progress_repo, payments_repo)
    recency = VisitRecencyGuard(visits_repo)

    visit_service = VisitService(visits_repo, officers_repo, projects_repo, storage, face_gate, geo_verifier)
    progress_service = ProgressService(
        progress_repo,
        officers_repo,
        projects_repo,
        recency,
        storage,
        rollup_service,
        audit_client,
        policy_factory=VisitPolicyFactory(),
    )
    payment_service = PaymentService(payments_repo, officers_repo, projects_repo, rollup_service)
    oversight_service = OversightService(
        projects_repo,
        visits_repo,
        officers_repo,
        rollup_service,
        policy=risk_policy_named(setting("RISK_POLICY", "lenient")),
    )

    return Container(
        conn=conn,
        officers_repo=officers_repo,
        projects_repo=projects_repo,
        visits_repo=visits_repo,
        progress_repo=progress_repo,
        payments_repo=payments_repo,
        geo_verifier=geo_verifier,
        near_project_margin_meters=float(setting("NEAR_PROJECT_MARGIN_METERS", 50)),
        visit_service=visit_service,
        progress_service=progress_service,
        payment_service=payment_service,
        rollup_service=rollup_service,
        oversight_service=oversight_service,
    )
