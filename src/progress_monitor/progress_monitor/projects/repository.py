from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Package, Project


class ProjectRepository(Protocol):
    """Read access to projects/packages plus the aggregate write-back path.

    Project and package CRUD belongs to the admin tooling; this core only reads
    them and updates the denormalized percent fields.
    """

    def get_by_id(self, project_id: str) -> Optional[Project]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Project]:
        raise NotImplementedError

    def get_package(self, project_id: str, package_id: str) -> Optional[Package]:
        raise NotImplementedError

    def list_packages(self, project_id: str) -> Sequence[Package]:
        raise NotImplementedError

    def update_project_aggregates(self, project_id: str, *, physical_percent: float, financial_percent: float) -> bool:
        raise NotImplementedError

    def update_package_aggregates(
        self,
        project_id: str,
        package_id: str,
        *,
        physical_percent: float,
        financial_percent: float,
    ) -> bool:
        raise NotImplementedError
