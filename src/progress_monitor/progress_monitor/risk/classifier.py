from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..core.constants import BEHIND_PLAN_TOLERANCE_PERCENT, FINANCIAL_AHEAD_REASON_PERCENT, NO_RECENT_VISIT_DAYS
from ..core.enums import RiskLevel


@dataclass(frozen=True)
class RiskPolicy:
    """Gap thresholds; `gap = physical - financial` below a bound escalates the tier."""

    name: str
    high_below: float
    medium_below: float


LENIENT = RiskPolicy(name="lenient", high_below=-20, medium_below=-10)
STRICT = RiskPolicy(name="strict", high_below=-15, medium_below=-5)

RISK_POLICIES = {LENIENT.name: LENIENT, STRICT.name: STRICT}

RISK_RANK = {RiskLevel.HIGH: 0, RiskLevel.MEDIUM: 1, RiskLevel.LOW: 2}


def risk_policy_named(name: Optional[str]) -> RiskPolicy:
    if not name:
        return LENIENT
    try:
        return RISK_POLICIES[name.strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown RISK_POLICY {name!r}, expected one of {sorted(RISK_POLICIES)}")


def classify_risk(physical: float, financial: float, policy: RiskPolicy = LENIENT) -> RiskLevel:
    gap = float(physical or 0) - float(financial or 0)
    if gap < policy.high_below:
        return RiskLevel.HIGH
    if gap < policy.medium_below:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def expected_physical_percent(
    start: Optional[datetime],
    expected_completion: Optional[datetime],
    now: datetime,
) -> float:
    """Linear plan between agreement start and expected completion."""
    if start is None or expected_completion is None:
        return 0.0
    if now <= start:
        return 0.0
    total = (expected_completion - start).total_seconds()
    if now >= expected_completion or total <= 0:
        return 100.0
    elapsed = (now - start).total_seconds()
    return round(elapsed / total * 100, 1)


@dataclass(frozen=True)
class ReviewFlags:
    """Independent review markers; any combination may be set at once."""

    behind_plan: bool
    delayed: bool
    no_recent_visit: bool


def review_flags(
    *,
    physical: float,
    expected_physical: float,
    expected_completion: Optional[datetime],
    last_field_visit_at: Optional[datetime],
    now: datetime,
) -> ReviewFlags:
    physical = float(physical or 0)
    return ReviewFlags(
        behind_plan=physical < expected_physical - BEHIND_PLAN_TOLERANCE_PERCENT,
        delayed=expected_completion is not None and now > expected_completion and physical < 100,
        no_recent_visit=last_field_visit_at is None
        or now - last_field_visit_at > timedelta(days=NO_RECENT_VISIT_DAYS),
    )


def review_reasons(
    *,
    physical: float,
    financial: float,
    expected_physical: float,
    expected_completion: Optional[datetime],
    flags: ReviewFlags,
) -> list[str]:
    """Short explanations for the review dashboard, worst concern first."""
    physical = float(physical or 0)
    gap = physical - float(financial or 0)
    reasons: list[str] = []

    if gap < FINANCIAL_AHEAD_REASON_PERCENT:
        reasons.append(f"Financial ahead of physical by {abs(round(gap))}%")
    if flags.behind_plan:
        reasons.append(f"Physical {round(physical)}% vs Plan {round(expected_physical)}% (behind plan)")
    if flags.delayed and expected_completion is not None:
        reasons.append(f"Past expected completion (due {expected_completion:%d %b %Y})")
    if flags.no_recent_visit:
        reasons.append(f"No JE/FE site visit in last {NO_RECENT_VISIT_DAYS} days")

    return reasons or ["Within normal tolerance"]
