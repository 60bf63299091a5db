from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..core.exceptions import NotFoundError
from ..payments.repository import PaymentRepository
from ..progress.repository import ProgressRepository
from ..projects.repository import ProjectRepository
from .calculator import (
    ProgressBreakdown,
    financial_percent,
    package_physical_percent,
    progress_breakdown,
    project_physical_percent,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RollupResult:
    project_id: str
    project_physical_percent: float
    project_financial_percent: float
    package_id: Optional[str] = None
    package_physical_percent: Optional[float] = None
    package_financial_percent: Optional[float] = None


class RollupService:
    """The only code path that writes denormalized percent fields.

    Every method recomputes from source rows, so calling it twice is harmless.
    """

    def __init__(self, projects: ProjectRepository, progress: ProgressRepository, payments: PaymentRepository):
        self._projects = projects
        self._progress = progress
        self._payments = payments

    def after_stage_change(self, project_id: str, package_id: str) -> RollupResult:
        return self._recompute(project_id, package_id)

    def after_payment(self, project_id: str, package_id: Optional[str] = None) -> RollupResult:
        return self._recompute(project_id, package_id)

    def recompute_project(self, project_id: str) -> RollupResult:
        project = self._projects.get_by_id(project_id)
        if not project:
            raise NotFoundError("Project not found")
        for pkg in self._projects.list_packages(project_id):
            self._recompute_package(project_id, pkg.package_id, pkg.amount)
        return self._recompute_project_totals(project_id, project.sanctioned_amount)

    def breakdown(self, project_id: str) -> ProgressBreakdown:
        rows = [
            (pkg.amount, list(self._progress.list_stages(project_id, pkg.package_id)))
            for pkg in self._projects.list_packages(project_id)
        ]
        return progress_breakdown(rows)

    def _recompute(self, project_id: str, package_id: Optional[str]) -> RollupResult:
        project = self._projects.get_by_id(project_id)
        if not project:
            raise NotFoundError("Project not found")

        pkg_physical = pkg_financial = None
        if package_id is not None:
            pkg = self._projects.get_package(project_id, package_id)
            if pkg is None:
                log.warning("rollup skipped unknown package %s/%s", project_id, package_id)
            else:
                pkg_physical, pkg_financial = self._recompute_package(project_id, package_id, pkg.amount)

        totals = self._recompute_project_totals(project_id, project.sanctioned_amount)
        return RollupResult(
            project_id=project_id,
            project_physical_percent=totals.project_physical_percent,
            project_financial_percent=totals.project_financial_percent,
            package_id=package_id,
            package_physical_percent=pkg_physical,
            package_financial_percent=pkg_financial,
        )

    def _recompute_package(self, project_id: str, package_id: str, amount: float) -> tuple[float, float]:
        physical = package_physical_percent(self._progress.list_stages(project_id, package_id))
        financial = financial_percent(self._payments.total_paid(project_id, package_id), amount)
        self._projects.update_package_aggregates(
            project_id, package_id, physical_percent=physical, financial_percent=financial
        )
        return physical, financial

    def _recompute_project_totals(self, project_id: str, sanctioned_amount: float) -> RollupResult:
        # Package rows were just written, so re-read them for the rupee-weighted mean.
        packages = self._projects.list_packages(project_id)
        physical = project_physical_percent((p.amount, p.physical_percent) for p in packages)
        financial = financial_percent(self._payments.total_paid(project_id), sanctioned_amount)
        self._projects.update_project_aggregates(project_id, physical_percent=physical, financial_percent=financial)
        log.info("rollup project=%s physical=%.2f financial=%.2f", project_id, physical, financial)
        return RollupResult(project_id=project_id, project_physical_percent=physical, project_financial_percent=financial)
