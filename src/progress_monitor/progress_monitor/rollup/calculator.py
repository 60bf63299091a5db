"""Pure rollup math: stage -> package -> project.

Nothing here touches storage; `RollupService` feeds it and writes the results.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence

from ..progress.model import Stage


@dataclass(frozen=True)
class ProgressBreakdown:
    physical: float
    green_verified: float
    je_only: float
    offsite_verified: float = 0.0


def clamp_percent(value: float) -> float:
    if value is None or not math.isfinite(value):
        return 0.0
    return max(0.0, min(100.0, float(value)))


def effective_stage_progress(stage: Stage) -> float:
    """Supervisor value wins once present; an explicit verified 0 is still a verification."""
    if stage.verified_progress_percent is not None:
        return clamp_percent(stage.verified_progress_percent)
    if stage.reported_progress_percent is not None:
        return clamp_percent(stage.reported_progress_percent)
    return 0.0


def package_physical_percent(stages: Iterable[Stage]) -> float:
    return _package_tracks(list(stages))[0]


def project_physical_percent(packages: Iterable[tuple[float, float]]) -> float:
    """Rupee-weighted mean over `(amount, physical_percent)` pairs."""
    total_amount = 0.0
    weighted = 0.0
    for amount, physical in packages:
        amt = float(amount or 0)
        if amt <= 0:
            continue
        total_amount += amt
        weighted += amt * float(physical or 0)

    if total_amount <= 0:
        return 0.0
    return weighted / total_amount


def financial_percent(total_paid: float, base_amount: float) -> float:
    if not base_amount or base_amount <= 0:
        return 0.0
    return round(clamp_percent(float(total_paid or 0) / float(base_amount) * 100), 2)


def _package_tracks(stages: Sequence[Stage]) -> tuple[float, float, float]:
    total_weight = 0.0
    weighted = 0.0
    green = 0.0
    je_only = 0.0
    for st in stages:
        w = float(st.weight_percent or 0)
        if not w:
            continue
        total_weight += w
        weighted += w * (effective_stage_progress(st) / 100)
        if st.verified_progress_percent is not None:
            green += w * (clamp_percent(st.verified_progress_percent) / 100)
        elif (st.reported_progress_percent or 0) > 0:
            je_only += w * (clamp_percent(st.reported_progress_percent) / 100)

    if total_weight <= 0:
        return 0.0, 0.0, 0.0
    return (
        clamp_percent(weighted / total_weight * 100),
        clamp_percent(green / total_weight * 100),
        clamp_percent(je_only / total_weight * 100),
    )


def progress_breakdown(packages: Iterable[tuple[float, Sequence[Stage]]]) -> ProgressBreakdown:
    """Split project physical progress into supervisor-verified and field-only tracks.

    Input is `(package_amount, stages)` pairs. Off-site verification is not
    tracked yet and always reports 0.
    """
    rows = [(float(amount or 0), stages) for amount, stages in packages]
    total_amount = sum(amount for amount, _ in rows if amount > 0)
    if total_amount <= 0:
        return ProgressBreakdown(physical=0.0, green_verified=0.0, je_only=0.0)

    physical = green = je_only = 0.0
    for amount, stages in rows:
        if amount <= 0:
            continue
        share = amount / total_amount
        p, g, j = _package_tracks(stages)
        physical += p * share
        green += g * share
        je_only += j * share

    return ProgressBreakdown(
        physical=clamp_percent(physical),
        green_verified=clamp_percent(green),
        je_only=clamp_percent(je_only),
    )
