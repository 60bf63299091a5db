from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from ..core.enums import Discipline, FakePhoto, Realism


@dataclass(frozen=True)
class AuditContext:
    """What the photo auditor is told about the submission."""

    project_name: str
    package_name: str
    stage_name: str
    stage_order: Optional[int] = None
    previous_stage_names: tuple[str, ...] = ()
    discipline: Optional[str] = None


@dataclass(frozen=True)
class AuditAdvisory:
    """Opaque, non-authoritative photo audit result.

    Stored next to a progress event for human review. Never used to set or
    override a progress percentage.
    """

    discipline: Discipline = Discipline.UNKNOWN
    detected_stage: Optional[str] = None
    sequence_ok: bool = True
    missing_stages: tuple[str, ...] = ()
    fake_photo: FakePhoto = FakePhoto.NO
    realism: Realism = Realism.REALISTIC
    risk_score: float = 20.0
    confidence: float = 0.6
    quality_issues: tuple[str, ...] = ()
    comments: str = ""

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["discipline"] = self.discipline.value
        d["fake_photo"] = self.fake_photo.value
        d["realism"] = self.realism.value
        d["missing_stages"] = list(self.missing_stages)
        d["quality_issues"] = list(self.quality_issues)
        return d


def _enum_or(enum_cls, value, default):
    try:
        return enum_cls(value)
    except ValueError:
        return default


def _number_or(value, default: float, *, low: float, high: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value != value:
        return default
    return max(low, min(high, float(value)))


def _str_list(value) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(str(v) for v in value if v is not None)


def normalize_advisory(raw: dict[str, Any]) -> AuditAdvisory:
    """Coerce whatever the auditor answered into a well-formed advisory.

    Unknown enum values fall back to neutral defaults; risk score is clamped to
    0..100 and confidence to 0..1. Accepts both snake_case and camelCase keys.
    """

    def pick(*keys, default=None):
        for k in keys:
            if k in raw:
                return raw[k]
        return default

    detected = pick("detected_stage", "detectedStage", "detectedStageName")
    comments = pick("comments", default="")
    sequence_ok = pick("sequence_ok", "sequenceOk", default=True)

    return AuditAdvisory(
        discipline=_enum_or(Discipline, pick("discipline"), Discipline.UNKNOWN),
        detected_stage=detected if isinstance(detected, str) else None,
        sequence_ok=sequence_ok if isinstance(sequence_ok, bool) else True,
        missing_stages=_str_list(pick("missing_stages", "missingStages")),
        fake_photo=_enum_or(FakePhoto, pick("fake_photo", "fakePhoto"), FakePhoto.NO),
        realism=_enum_or(Realism, pick("realism"), Realism.REALISTIC),
        risk_score=_number_or(pick("risk_score", "riskScore"), 20.0, low=0.0, high=100.0),
        confidence=_number_or(pick("confidence"), 0.6, low=0.0, high=1.0),
        quality_issues=_str_list(pick("quality_issues", "qualityIssues")),
        comments=comments if isinstance(comments, str) else "",
    )


def advisory_from_dict(data: Optional[dict[str, Any]]) -> Optional[AuditAdvisory]:
    if not data:
        return None
    return normalize_advisory(data)
