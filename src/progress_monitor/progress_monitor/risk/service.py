from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import FIELD_ROLES, RiskLevel, Role
from ..core.exceptions import AuthorizationError, NotFoundError
from ..projects.model import Package, Project
from ..projects.repository import ProjectRepository
from ..rollup.calculator import ProgressBreakdown
from ..rollup.service import RollupService
from ..users.access import can_access_project, require_project_access
from ..users.model import Officer
from ..users.repository import OfficerRepository
from ..visits import ledger
from ..visits.model import RoleVisitSummary
from ..visits.repository import VisitRepository
from .classifier import (
    LENIENT,
    RISK_RANK,
    ReviewFlags,
    RiskPolicy,
    classify_risk,
    expected_physical_percent,
    review_flags,
    review_reasons,
)


@dataclass(frozen=True)
class OversightRow:
    project_id: str
    name: str
    org_unit_path: str
    sanctioned_amount: float
    physical_percent: float
    financial_percent: float
    gap: float
    risk: RiskLevel
    expected_physical_percent: float
    flags: ReviewFlags
    reasons: tuple[str, ...]
    last_field_visit_at: Optional[datetime]


@dataclass(frozen=True)
class ProjectOverview:
    row: OversightRow
    breakdown: ProgressBreakdown
    packages: tuple[Package, ...]
    attendance: dict[Role, RoleVisitSummary]


class OversightService:
    """Read-only dashboards over rolled-up figures. Never writes."""

    def __init__(
        self,
        projects: ProjectRepository,
        visits: VisitRepository,
        officers: OfficerRepository,
        rollup: RollupService,
        *,
        policy: RiskPolicy = LENIENT,
    ):
        self._projects = projects
        self._visits = visits
        self._officers = officers
        self._rollup = rollup
        self._policy = policy

    def _viewer(self, officer_code: str) -> Officer:
        officer = self._officers.get_by_code(officer_code)
        if not officer or not officer.is_active:
            raise AuthorizationError("Unknown or inactive officer")
        return officer

    def project_overview(self, officer_code: str, project_id: str, *, now: datetime | None = None) -> ProjectOverview:
        now = now or datetime.now()
        viewer = self._viewer(officer_code)
        project = self._projects.get_by_id(project_id)
        if not project:
            raise NotFoundError("Project not found")
        require_project_access(viewer, project)

        attendance = ledger.summarize_by_role(self._visits.list_for_project(project_id), self._officers.get_by_code)
        return ProjectOverview(
            row=self._row(project, attendance, now),
            breakdown=self._rollup.breakdown(project_id),
            packages=tuple(self._projects.list_packages(project_id)),
            attendance=attendance,
        )

    def portfolio(self, officer_code: str, *, now: datetime | None = None) -> list[OversightRow]:
        """Projects visible to the officer, high risk first, then worst gap."""
        now = now or datetime.now()
        viewer = self._viewer(officer_code)

        rows = []
        for project in self._projects.list_all():
            if not can_access_project(viewer, project):
                continue
            attendance = ledger.summarize_by_role(
                self._visits.list_for_project(project.project_id), self._officers.get_by_code
            )
            rows.append(self._row(project, attendance, now))
        return sort_rows(rows)

    def _row(self, project: Project, attendance: dict[Role, RoleVisitSummary], now: datetime) -> OversightRow:
        physical = float(project.physical_percent or 0)
        financial = float(project.financial_percent or 0)
        expected = expected_physical_percent(project.agreement_start_date, project.expected_completion_date, now)
        last_field_visit = last_field_visit_at(attendance)
        flags = review_flags(
            physical=physical,
            expected_physical=expected,
            expected_completion=project.expected_completion_date,
            last_field_visit_at=last_field_visit,
            now=now,
        )
        return OversightRow(
            project_id=project.project_id,
            name=project.name,
            org_unit_path=project.org_unit_path,
            sanctioned_amount=project.sanctioned_amount,
            physical_percent=physical,
            financial_percent=financial,
            gap=physical - financial,
            risk=classify_risk(physical, financial, self._policy),
            expected_physical_percent=expected,
            flags=flags,
            reasons=tuple(
                review_reasons(
                    physical=physical,
                    financial=financial,
                    expected_physical=expected,
                    expected_completion=project.expected_completion_date,
                    flags=flags,
                )
            ),
            last_field_visit_at=last_field_visit,
        )


def last_field_visit_at(attendance: dict[Role, RoleVisitSummary]) -> Optional[datetime]:
    times = [s.last_visit for role, s in attendance.items() if role in FIELD_ROLES and s.last_visit]
    return max(times) if times else None


def sort_rows(rows: Sequence[OversightRow]) -> list[OversightRow]:
    return sorted(rows, key=lambda r: (RISK_RANK[r.risk], r.gap))
