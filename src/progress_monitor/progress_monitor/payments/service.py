from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional

from ..common.validators import require_date, require_non_empty, require_positive
from ..core.enums import PAYMENT_ROLES
from ..core.exceptions import AuthorizationError, NotFoundError
from ..projects.repository import ProjectRepository
from ..rollup.service import RollupResult, RollupService
from ..users.access import require_project_access
from ..users.repository import OfficerRepository
from .model import NewPayment, Payment
from .repository import PaymentRepository

log = logging.getLogger(__name__)


class PaymentService:
    """Financial track input. Payments never touch physical progress."""

    def __init__(
        self,
        payments: PaymentRepository,
        officers: OfficerRepository,
        projects: ProjectRepository,
        rollup: RollupService,
    ):
        self._payments = payments
        self._officers = officers
        self._projects = projects
        self._rollup = rollup

    def add_payment(
        self,
        officer_code: str,
        project_id: str,
        bill_no: str,
        bill_date: date | str,
        amount,
        package_id: Optional[str] = None,
        *,
        now: datetime | None = None,
    ) -> tuple[Payment, RollupResult]:
        now = now or datetime.now()

        officer = self._officers.get_by_code(officer_code)
        if not officer or not officer.is_active:
            raise AuthorizationError("Unknown or inactive officer")
        if officer.role not in PAYMENT_ROLES:
            raise AuthorizationError("Only EE/ADMIN can add payments")

        project = self._projects.get_by_id(project_id)
        if not project:
            raise NotFoundError("Project not found")
        require_project_access(officer, project)

        bill_no = require_non_empty(bill_no, "billNo")
        value = require_positive(amount, "amount")
        bill_date = require_date(bill_date, "billDate")

        package_id = package_id or None
        if package_id is not None and not self._projects.get_package(project_id, package_id):
            raise NotFoundError("Package not found")

        payment = self._payments.add(
            NewPayment(
                project_id=project_id,
                package_id=package_id,
                bill_no=bill_no,
                bill_date=bill_date,
                amount=value,
                created_by=officer_code,
                created_at=now,
            )
        )
        log.info("payment recorded id=%s project=%s package=%s amount=%.2f", payment.payment_id, project_id, package_id, value)
        return payment, self._rollup.after_payment(project_id, package_id)
