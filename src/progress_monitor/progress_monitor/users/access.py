from __future__ import annotations

from ..core.enums import FIELD_ROLES
from ..core.exceptions import AuthorizationError
from ..projects.model import Project
from .model import Officer


def in_org_tree(officer: Officer, project: Project) -> bool:
    return project.org_unit_path.startswith(officer.org_unit_path or "")


def can_access_project(officer: Officer, project: Project) -> bool:
    """Officers see their org subtree; field actors also see projects they are assigned to."""
    if officer.role in FIELD_ROLES and officer.officer_code in project.assigned_je_ids:
        return True
    return in_org_tree(officer, project)


def require_project_access(officer: Officer, project: Project) -> None:
    if not can_access_project(officer, project):
        raise AuthorizationError("Access denied for this project")
