from __future__ import annotations

from dataclasses import dataclass, replace

from score2.models.engine import MG_DL_PER_MMOL_L, Parameters, RiskResult, calculate_risk, round_half_up

SBP_RANGE = (90.0, 200.0)
SBP_STEP = 5.0
CHOLESTEROL_RANGE_MMOL = (3.0, 10.0)
CHOLESTEROL_STEP_MMOL = 0.1


@dataclass(frozen=True)
class WhatIfOutcome:
    original_params: Parameters
    simulated_params: Parameters
    original: RiskResult
    simulated: RiskResult

    @property
    def difference(self) -> float:
        return round_half_up(self.simulated.risk_percentage - self.original.risk_percentage, 1)

    @property
    def is_improvement(self) -> bool:
        return self.difference < 0

    def summary(self) -> str:
        label = "Reduction" if self.is_improvement else "Increase"
        return f"{label}: {abs(self.difference):.1f}%"

    def encouragement(self) -> str | None:
        if not self.is_improvement:
            return None
        return (
            f"Great news! These changes could reduce your cardiovascular risk by {abs(self.difference):.1f}%. "
            "Consider discussing these targets with your healthcare provider."
        )


def slider_bounds(low: float, high: float, value: float) -> tuple[float, float]:
    """Widen (low, high) so the entered value is the slider's starting point.

    A clamped start would simulate a change nobody made.
    """
    return min(low, value), max(high, value)


def cholesterol_slider_range(unit: str) -> tuple[float, float, float]:
    """(min, max, step) for the cholesterol control in the caller's unit."""
    low, high = CHOLESTEROL_RANGE_MMOL
    if unit == "mg/dL":
        return (
            round_half_up(low * MG_DL_PER_MMOL_L),
            round_half_up(high * MG_DL_PER_MMOL_L),
            round_half_up(CHOLESTEROL_STEP_MMOL * MG_DL_PER_MMOL_L, 1),
        )
    return low, high, CHOLESTEROL_STEP_MMOL


def simulate(
    original: Parameters,
    *,
    smoking: str | None = None,
    systolic_bp: float | None = None,
    total_cholesterol: float | None = None,
) -> WhatIfOutcome:
    """Recompute risk with some modifiable factors changed.

    ``total_cholesterol`` is read in ``original.cholesterol_unit``.
    """
    changes: dict[str, object] = {}
    if smoking is not None:
        changes["smoking"] = smoking
    if systolic_bp is not None:
        changes["systolic_bp"] = systolic_bp
    if total_cholesterol is not None:
        changes["total_cholesterol"] = total_cholesterol

    simulated_params = replace(original, **changes)
    return WhatIfOutcome(
        original_params=original,
        simulated_params=simulated_params,
        original=calculate_risk(original),
        simulated=calculate_risk(simulated_params),
    )


def simulate_grid(original: Parameters, systolic_values: list[float] | None = None) -> list[tuple[float, float]]:
    if systolic_values is None:
        low, high = SBP_RANGE
        count = int((high - low) / SBP_STEP) + 1
        systolic_values = [low + i * SBP_STEP for i in range(count)]
    return [
        (sbp, calculate_risk(replace(original, systolic_bp=sbp)).risk_percentage)
        for sbp in systolic_values
    ]


def simulate_from_controls(
    original: Parameters,
    non_smoker: bool,
    systolic_bp: float,
    total_cholesterol: float,
) -> WhatIfOutcome:
    """Outcome for the what-if panel; controls left at the entered values change nothing."""
    return simulate(
        original,
        smoking="non-smoker" if non_smoker else "smoker",
        systolic_bp=systolic_bp if systolic_bp != original.systolic_bp else None,
        total_cholesterol=total_cholesterol if total_cholesterol != original.total_cholesterol else None,
    )
