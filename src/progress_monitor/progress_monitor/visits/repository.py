from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import NewVisit, VisitEvent


class VisitRepository(Protocol):
    """Append-only visit ledger. There is deliberately no update or delete."""

    def append(self, visit: NewVisit) -> int:
        raise NotImplementedError

    def latest_for_actor(self, project_id: str, actor: str) -> Optional[VisitEvent]:
        raise NotImplementedError

    def list_for_project(self, project_id: str) -> Sequence[VisitEvent]:
        """Most recent first."""
        raise NotImplementedError
