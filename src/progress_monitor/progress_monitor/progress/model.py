from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..audit.model import AuditAdvisory
from ..core.enums import VerificationSource


@dataclass(frozen=True)
class Stage:
    """Domain entity: a weighted step of a package.

    Two tracks: `reported_progress_percent` belongs to the field actor and only
    moves up; `verified_progress_percent` belongs to the supervisor and is
    `None` until the first verification.
    """

    stage_id: int
    project_id: str
    package_id: str
    name: str
    order: int
    weight_percent: float
    reported_progress_percent: float = 0.0
    verified_progress_percent: Optional[float] = None
    verification_source: VerificationSource = VerificationSource.UNKNOWN
    last_reported_by: Optional[str] = None
    last_reported_at: Optional[datetime] = None
    last_verified_by: Optional[str] = None
    last_verified_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def is_verified(self) -> bool:
        return self.verified_progress_percent is not None


@dataclass(frozen=True)
class NewStage:
    project_id: str
    package_id: str
    name: str
    order: int
    weight_percent: float
    created_at: datetime


@dataclass(frozen=True)
class NewProgressEvent:
    project_id: str
    package_id: str
    stage_id: int
    created_by: str
    created_at: datetime
    reported_progress_percent: float
    photo_urls: tuple[str, ...]
    note: Optional[str] = None
    zone: Optional[str] = None
    je_comment: Optional[str] = None
    advisory: Optional[AuditAdvisory] = None


@dataclass(frozen=True)
class ProgressEvent:
    """Append-only field submission; verification stamps are added later."""

    event_id: int
    project_id: str
    package_id: str
    stage_id: int
    created_by: str
    created_at: datetime
    reported_progress_percent: float
    photo_urls: tuple[str, ...]
    note: Optional[str] = None
    zone: Optional[str] = None
    je_comment: Optional[str] = None
    je_comment_updated_at: Optional[datetime] = None
    advisory: Optional[AuditAdvisory] = None
    verified_percent: Optional[float] = None
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None
    sdo_comment: Optional[str] = None
    verification_source: Optional[VerificationSource] = None


@dataclass(frozen=True)
class Verification:
    """A supervisor's decision on a stage, stamped on the stage and the triggering event."""

    stage_id: int
    event_id: int
    percent: float
    source: VerificationSource
    verified_by: str
    verified_at: datetime
    sdo_comment: Optional[str] = None
