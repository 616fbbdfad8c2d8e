from __future__ import annotations

import pytest

from score2.models.engine import Parameters, calculate_risk
from score2.sim.what_if import (
    SBP_RANGE,
    cholesterol_slider_range,
    simulate,
    simulate_from_controls,
    simulate_grid,
    slider_bounds,
)

SMOKER = Parameters(
    age=58,
    sex="female",
    region="high",
    smoking="smoker",
    systolic_bp=150.0,
    total_cholesterol=6.2,
)


def test_quitting_smoking_is_an_improvement():
    outcome = simulate(SMOKER, smoking="non-smoker")

    assert outcome.simulated_params.smoking == "non-smoker"
    assert outcome.original_params is SMOKER
    assert outcome.original == calculate_risk(SMOKER)
    assert outcome.difference < 0
    assert outcome.is_improvement
    assert outcome.summary().startswith("Reduction: ")
    assert outcome.encouragement().startswith("Great news!")


def test_unchanged_simulation_matches_original():
    outcome = simulate(SMOKER)

    assert outcome.simulated == outcome.original
    assert outcome.difference == 0
    assert not outcome.is_improvement
    assert outcome.summary() == "Increase: 0.0%"
    assert outcome.encouragement() is None


def test_raising_blood_pressure_is_not_improvement():
    outcome = simulate(SMOKER, systolic_bp=190.0)
    assert outcome.difference > 0
    assert not outcome.is_improvement


def test_cholesterol_change_stays_in_entered_unit():
    params = Parameters(
        age=58,
        sex="male",
        region="moderate",
        smoking="non-smoker",
        systolic_bp=130.0,
        total_cholesterol=250.0,
        cholesterol_unit="mg/dL",
    )
    outcome = simulate(params, total_cholesterol=180.0)

    assert outcome.simulated_params.cholesterol_unit == "mg/dL"
    assert outcome.simulated_params.total_cholesterol == 180.0
    assert outcome.is_improvement


def test_cholesterol_slider_range():
    assert cholesterol_slider_range("mmol/L") == (3.0, 10.0, 0.1)
    assert cholesterol_slider_range("mg/dL") == (116.0, 387.0, 3.9)


def test_simulate_grid_default_range():
    grid = simulate_grid(SMOKER)

    assert [sbp for sbp, _ in grid][0] == 90.0
    assert [sbp for sbp, _ in grid][-1] == 200.0
    assert len(grid) == 23
    risks = [pct for _, pct in grid]
    assert risks == sorted(risks)


def test_simulate_grid_custom_values():
    grid = simulate_grid(SMOKER, [120.0, 150.0])
    assert grid[1] == (150.0, calculate_risk(SMOKER).risk_percentage)


def test_slider_bounds_include_entered_value():
    assert slider_bounds(90.0, 200.0, 230.0) == (90.0, 230.0)
    assert slider_bounds(3.0, 10.0, 2.5) == (2.5, 10.0)
    assert slider_bounds(90.0, 200.0, 130.0) == (90.0, 200.0)


def test_untouched_controls_outside_slider_range_change_nothing():
    params = Parameters(
        age=62,
        sex="male",
        region="moderate",
        smoking="non-smoker",
        systolic_bp=230.0,
        total_cholesterol=11.0,
    )
    sbp_low, sbp_high = slider_bounds(*SBP_RANGE, params.systolic_bp)
    chol_low, chol_high, _ = cholesterol_slider_range(params.cholesterol_unit)
    chol_low, chol_high = slider_bounds(chol_low, chol_high, params.total_cholesterol)
    assert sbp_low <= params.systolic_bp <= sbp_high
    assert chol_low <= params.total_cholesterol <= chol_high

    outcome = simulate_from_controls(
        params,
        non_smoker=True,
        systolic_bp=min(sbp_high, max(sbp_low, params.systolic_bp)),
        total_cholesterol=min(chol_high, max(chol_low, params.total_cholesterol)),
    )

    assert outcome.difference == 0
    assert not outcome.is_improvement
    assert outcome.encouragement() is None


def test_difference_matches_reported_percentages():
    outcome = simulate(SMOKER, smoking="non-smoker", systolic_bp=120.0)
    expected = outcome.simulated.risk_percentage - outcome.original.risk_percentage
    assert outcome.difference == pytest.approx(expected, abs=1e-9)


def test_moved_controls_are_simulated():
    outcome = simulate_from_controls(SMOKER, non_smoker=True, systolic_bp=120.0, total_cholesterol=6.2)

    assert outcome.simulated_params.smoking == "non-smoker"
    assert outcome.simulated_params.systolic_bp == 120.0
    assert outcome.simulated_params.total_cholesterol == 6.2
    assert outcome.is_improvement
