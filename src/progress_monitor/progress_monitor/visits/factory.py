from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import FIELD_ROLES, VERIFIER_ROLES, Role
from ..core.exceptions import AuthorizationError
from .policies.base import VisitPolicy
from .policies.field_report_policy import FieldReportPolicy
from .policies.supervisor_verify_policy import SupervisorVerifyPolicy


@dataclass
class VisitPolicyFactory:
    """Factory Pattern: choose the visit policy that gates a role's writes."""

    def for_role(self, role: Role) -> VisitPolicy:
        if role in FIELD_ROLES:
            return FieldReportPolicy()
        if role in VERIFIER_ROLES:
            return SupervisorVerifyPolicy()
        raise AuthorizationError(f"Role {role.value} cannot submit progress actions")
