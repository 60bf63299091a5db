from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..audit.client import PhotoAuditClient
from ..audit.model import AuditAdvisory, AuditContext
from ..common.validators import require_non_empty, require_percent, require_positive
from ..core.constants import MAX_PACKAGE_STAGE_WEIGHT, PREVIOUS_STAGES_FOR_AUDIT
from ..core.enums import FIELD_ROLES, STAGE_ADMIN_ROLES, VERIFIER_ROLES, VerificationSource, VisitType
from ..core.exceptions import AuthorizationError, NotFoundError, PhotoAuditError, ValidationError
from ..projects.model import Package, Project
from ..projects.repository import ProjectRepository
from ..rollup.service import RollupResult, RollupService
from ..storage.client import ObjectStorage, progress_photo_key
from ..users.access import in_org_tree, require_project_access
from ..users.model import Officer
from ..users.repository import OfficerRepository
from ..visits.factory import VisitPolicyFactory
from ..visits.model import VisitEvent
from ..visits.recency import VisitRecencyGuard
from .model import NewProgressEvent, NewStage, Stage, Verification
from .repository import ProgressRepository

log = logging.getLogger(__name__)


def verification_source_for(visit: VisitEvent) -> VerificationSource:
    if visit.visit_type == VisitType.SITE and visit.geo_verified:
        return VerificationSource.SITE
    return VerificationSource.OFFICE


class ProgressService:
    """Two-track progress ledger: field reports go up only, supervisors set the verified value."""

    def __init__(
        self,
        progress: ProgressRepository,
        officers: OfficerRepository,
        projects: ProjectRepository,
        recency: VisitRecencyGuard,
        storage: ObjectStorage,
        rollup: RollupService,
        audit: PhotoAuditClient | None = None,
        *,
        policy_factory: VisitPolicyFactory | None = None,
    ):
        self._progress = progress
        self._officers = officers
        self._projects = projects
        self._recency = recency
        self._storage = storage
        self._rollup = rollup
        self._audit = audit
        self._policies = policy_factory or VisitPolicyFactory()

    def _officer(self, officer_code: str) -> Officer:
        officer = self._officers.get_by_code(officer_code)
        if not officer or not officer.is_active:
            raise AuthorizationError("Unknown or inactive officer")
        return officer

    def _project_and_package(self, project_id: str, package_id: str) -> tuple[Project, Package]:
        project = self._projects.get_by_id(project_id)
        if not project:
            raise NotFoundError("Project not found")
        package = self._projects.get_package(project_id, package_id)
        if not package:
            raise NotFoundError("Package not found")
        return project, package

    def _stage(self, project_id: str, package_id: str, stage_id: int) -> Stage:
        stage = self._progress.get_stage(project_id, package_id, int(stage_id))
        if not stage:
            raise NotFoundError("Stage not found")
        return stage

    def report_progress(
        self,
        officer_code: str,
        project_id: str,
        package_id: str,
        stage_id: int,
        percent,
        photos: Sequence[bytes],
        note: Optional[str] = None,
        zone: Optional[str] = None,
        je_comment: Optional[str] = None,
        *,
        now: datetime | None = None,
    ) -> tuple[int, RollupResult]:
        now = now or datetime.now()

        officer = self._officer(officer_code)
        if officer.role not in FIELD_ROLES:
            raise AuthorizationError("Only JE/FE can report progress")

        project, package = self._project_and_package(project_id, package_id)
        require_project_access(officer, project)
        if package.owner_je_id and package.owner_je_id != officer_code:
            raise AuthorizationError("Only the package owner can report progress on this package")
        value = require_percent(percent, "percent")

        self._recency.require(officer_code, project_id, self._policies.for_role(officer.role), now)

        photos = [p for p in (photos or []) if p]
        if not photos:
            raise ValidationError("Photo required")

        stage = self._stage(project_id, package_id, stage_id)
        if value < stage.reported_progress_percent:
            raise ValidationError("Progress cannot be reduced. Contact SDO if correction is needed.")

        photo_urls = tuple(
            self._storage.put(p, key=progress_photo_key(project_id, package_id), content_type="image/jpeg")
            for p in photos
        )
        advisory = self._run_audit(photo_urls, project, package, stage)

        event_id = self._progress.record_report(
            NewProgressEvent(
                project_id=project_id,
                package_id=package_id,
                stage_id=stage.stage_id,
                created_by=officer_code,
                created_at=now,
                reported_progress_percent=value,
                photo_urls=photo_urls,
                note=note or None,
                zone=zone or None,
                je_comment=je_comment or None,
                advisory=advisory,
            )
        )
        if event_id is None:
            # Lost a race against a higher concurrent report.
            raise ValidationError("Progress cannot be reduced. Contact SDO if correction is needed.")

        log.info(
            "progress reported event=%s stage=%s officer=%s percent=%.1f",
            event_id,
            stage.stage_id,
            officer_code,
            value,
        )
        return event_id, self._rollup.after_stage_change(project_id, package_id)

    def _run_audit(self, photo_urls: Sequence[str], project: Project, package: Package, stage: Stage) -> Optional[AuditAdvisory]:
        if self._audit is None:
            return None
        context = AuditContext(
            project_name=project.name or project.project_id,
            package_name=package.name or package.package_id,
            stage_name=stage.name,
            stage_order=stage.order,
            previous_stage_names=tuple(
                self._progress.previous_stage_names(
                    project.project_id, package.package_id, stage.order, PREVIOUS_STAGES_FOR_AUDIT
                )
            ),
            discipline=package.discipline,
        )
        try:
            return self._audit.audit(photo_urls, context)
        except PhotoAuditError:
            log.warning("photo audit unavailable for stage %s, storing report without advisory", stage.stage_id, exc_info=True)
            return None

    def verify_stage(
        self,
        officer_code: str,
        project_id: str,
        package_id: str,
        stage_id: int,
        event_id: int,
        percent,
        sdo_comment: Optional[str] = None,
        *,
        now: datetime | None = None,
    ) -> tuple[Verification, RollupResult]:
        now = now or datetime.now()

        officer = self._officer(officer_code)
        if officer.role not in VERIFIER_ROLES:
            raise AuthorizationError("Only SDO can verify stages")

        project, _ = self._project_and_package(project_id, package_id)
        if not in_org_tree(officer, project):
            raise AuthorizationError("Access denied for this project")
        value = require_percent(percent, "percent")

        visit = self._recency.require(officer_code, project_id, self._policies.for_role(officer.role), now)

        stage = self._stage(project_id, package_id, stage_id)
        event = self._progress.get_event(int(event_id))
        if not event:
            raise NotFoundError("Progress event not found")
        if event.project_id != project_id or event.package_id != package_id or event.stage_id != stage.stage_id:
            raise ValidationError("Event does not belong to this stage/package")

        verification = Verification(
            stage_id=stage.stage_id,
            event_id=event.event_id,
            percent=value,
            source=verification_source_for(visit),
            verified_by=officer_code,
            verified_at=now,
            sdo_comment=sdo_comment or None,
        )
        self._progress.apply_verification(verification)
        log.info(
            "stage verified stage=%s event=%s officer=%s percent=%.1f source=%s",
            stage.stage_id,
            event.event_id,
            officer_code,
            value,
            verification.source.value,
        )
        return verification, self._rollup.after_stage_change(project_id, package_id)

    def create_stage(
        self,
        officer_code: str,
        project_id: str,
        package_id: str,
        name: str,
        order,
        weight_percent,
        *,
        now: datetime | None = None,
    ) -> Stage:
        now = now or datetime.now()

        officer = self._officer(officer_code)
        if officer.role not in STAGE_ADMIN_ROLES:
            raise AuthorizationError("Only EE/ADMIN can create stages")

        project, _ = self._project_and_package(project_id, package_id)
        require_project_access(officer, project)

        name = require_non_empty(name, "name")
        order_value = require_positive(order, "order")
        if order_value != int(order_value):
            raise ValidationError("order must be a whole number")
        weight = require_positive(weight_percent, "weightPercent")

        existing = self._progress.total_weight(project_id, package_id)
        if existing + weight > MAX_PACKAGE_STAGE_WEIGHT:
            raise ValidationError(
                f"Total stage weight would exceed {MAX_PACKAGE_STAGE_WEIGHT}% (existing {existing:g}%, new {weight:g}%)"
            )

        stage = self._progress.create_stage(
            NewStage(
                project_id=project_id,
                package_id=package_id,
                name=name,
                order=int(order_value),
                weight_percent=weight,
                created_at=now,
            )
        )
        log.info("stage created id=%s package=%s weight=%.1f", stage.stage_id, package_id, weight)
        self._rollup.after_stage_change(project_id, package_id)
        return stage

    def comment_on_event(
        self,
        officer_code: str,
        project_id: str,
        event_id: int,
        comment: str,
        *,
        now: datetime | None = None,
    ) -> None:
        now = now or datetime.now()

        officer = self._officer(officer_code)
        if officer.role not in FIELD_ROLES:
            raise AuthorizationError("Only JE/FE can comment on progress")

        event = self._progress.get_event(int(event_id))
        if not event or event.project_id != project_id:
            raise NotFoundError("Progress event not found")
        if event.created_by != officer_code:
            raise AuthorizationError("You can only comment on your own progress updates")

        self._progress.update_je_comment(event.event_id, require_non_empty(comment, "comment"), now)

    def list_stages(self, officer_code: str, project_id: str, package_id: str) -> list[Stage]:
        officer = self._officer(officer_code)
        project, _ = self._project_and_package(project_id, package_id)
        require_project_access(officer, project)
        return sorted(self._progress.list_stages(project_id, package_id), key=lambda s: (s.order, s.stage_id))
