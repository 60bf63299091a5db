import pytest

from src.progress_monitor.progress_monitor.progress.model import Stage
from src.progress_monitor.progress_monitor.rollup.calculator import (
    effective_stage_progress,
    financial_percent,
    package_physical_percent,
    progress_breakdown,
    project_physical_percent,
)


def stage(weight, reported=0.0, verified=None, stage_id=1):
    return Stage(
        stage_id=stage_id,
        project_id="P1",
        package_id="PK1",
        name=f"S{stage_id}",
        order=stage_id,
        weight_percent=weight,
        reported_progress_percent=reported,
        verified_progress_percent=verified,
    )


def test_verified_takes_precedence_even_when_lower():
    assert effective_stage_progress(stage(10, reported=80, verified=30)) == 30
    assert effective_stage_progress(stage(10, reported=80, verified=0)) == 0
    assert effective_stage_progress(stage(10, reported=80)) == 80
    assert effective_stage_progress(stage(10, reported=150)) == 100


def test_package_rollup_scenario_74():
    stages = [stage(40, reported=50, verified=None, stage_id=1), stage(60, reported=80, verified=90, stage_id=2)]
    assert [effective_stage_progress(s) for s in stages] == [50, 90]
    assert package_physical_percent(stages) == pytest.approx(74)


def test_genuine_zero_verification_is_not_treated_as_unverified():
    stages = [stage(40, reported=50, verified=0, stage_id=1), stage(60, reported=80, verified=90, stage_id=2)]
    assert package_physical_percent(stages) == pytest.approx(54)


def test_package_rollup_with_supervisor_override_of_field_report():
    stages = [
        stage(40, reported=100, verified=100, stage_id=1),
        stage(30, reported=80, verified=60, stage_id=2),
        stage(30, reported=40, verified=None, stage_id=3),
    ]
    # 40 + 18 + 12
    assert package_physical_percent(stages) == pytest.approx(70)


def test_package_rollup_normalizes_and_skips_zero_weight():
    assert package_physical_percent([stage(20, reported=50), stage(0, reported=100, stage_id=2)]) == pytest.approx(50)
    assert package_physical_percent([stage(0, reported=100)]) == 0
    assert package_physical_percent([]) == 0


def test_project_rollup_scenario_22_8():
    assert project_physical_percent([(1_000_000, 74), (4_000_000, 10)]) == pytest.approx(22.8)


def test_project_rollup_excludes_non_positive_amounts():
    assert project_physical_percent([(0, 100), (-5, 100), (200, 30)]) == pytest.approx(30)
    assert project_physical_percent([(0, 100)]) == 0
    assert project_physical_percent([]) == 0


def test_splitting_a_stage_with_same_progress_keeps_rollup():
    whole = [stage(50, reported=60, stage_id=1), stage(50, reported=20, stage_id=2)]
    split = [
        stage(25, reported=60, stage_id=1),
        stage(25, reported=60, stage_id=3),
        stage(50, reported=20, stage_id=2),
    ]
    assert package_physical_percent(split) == pytest.approx(package_physical_percent(whole))


def test_rollup_is_idempotent():
    stages = [stage(40, reported=35, stage_id=1), stage(60, reported=10, verified=12, stage_id=2)]
    first = package_physical_percent(stages)
    assert package_physical_percent(stages) == first
    assert project_physical_percent([(10, first), (10, first)]) == pytest.approx(first)


def test_financial_percent_scenario_and_edges():
    assert financial_percent(2_500_000, 10_000_000) == 25.0
    assert financial_percent(1, 3) == 33.33
    assert financial_percent(20_000_000, 10_000_000) == 100.0
    assert financial_percent(100, 0) == 0.0


def test_breakdown_splits_verified_and_field_only_tracks():
    packages = [
        (1_000_000, [stage(50, reported=100, verified=80, stage_id=1), stage(50, reported=40, stage_id=2)]),
        (1_000_000, [stage(100, reported=0, stage_id=3)]),
    ]

    b = progress_breakdown(packages)

    # package 1: green 40, je-only 20, physical 60; package 2: all zero; halved by rupee share
    assert b.green_verified == pytest.approx(20)
    assert b.je_only == pytest.approx(10)
    assert b.physical == pytest.approx(30)
    assert b.offsite_verified == 0


def test_breakdown_counts_explicit_zero_verification_as_verified():
    b = progress_breakdown([(1, [stage(100, reported=50, verified=0)])])
    assert b.physical == 0
    assert b.green_verified == 0
    assert b.je_only == 0


def test_breakdown_without_amounts_is_zero():
    assert progress_breakdown([]).physical == 0
    assert progress_breakdown([(0, [stage(100, reported=50)])]).physical == 0
