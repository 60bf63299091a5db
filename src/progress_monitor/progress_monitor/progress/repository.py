from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import NewProgressEvent, NewStage, ProgressEvent, Stage, Verification


class ProgressRepository(Protocol):
    """Stages plus the append-only progress event log."""

    def get_stage(self, project_id: str, package_id: str, stage_id: int) -> Optional[Stage]:
        raise NotImplementedError

    def list_stages(self, project_id: str, package_id: str) -> Sequence[Stage]:
        """Ordered by stage order."""
        raise NotImplementedError

    def total_weight(self, project_id: str, package_id: str) -> float:
        raise NotImplementedError

    def create_stage(self, stage: NewStage) -> Stage:
        raise NotImplementedError

    def previous_stage_names(self, project_id: str, package_id: str, before_order: int, limit: int) -> list[str]:
        """Names of the closest preceding stages, nearest first."""
        raise NotImplementedError

    def record_report(self, event: NewProgressEvent) -> Optional[int]:
        """Atomically raise the stage's reported percent and append the event.

        Returns the new event id, or None when the stored reported percent is
        already higher than the submitted one. In that case nothing is written.
        """
        raise NotImplementedError

    def get_event(self, event_id: int) -> Optional[ProgressEvent]:
        raise NotImplementedError

    def apply_verification(self, verification: Verification) -> None:
        """Write the verified percent on the stage and stamp the event, in one transaction."""
        raise NotImplementedError

    def update_je_comment(self, event_id: int, comment: str, at: datetime) -> None:
        raise NotImplementedError
