from __future__ import annotations

# Simplified SCORE2 / SCORE2-OP estimate for educational use. Not a calibrated
# survival model and not validated for clinical decisions.

import logging
import math
from dataclasses import asdict, dataclass, replace
from typing import Any

logger = logging.getLogger(__name__)

MG_DL_PER_MMOL_L = 38.67

SEXES = ("male", "female")
REGIONS = ("low", "moderate", "high", "very-high")
SMOKING_STATUSES = ("smoker", "non-smoker")
CHOLESTEROL_UNITS = ("mmol/L", "mg/dL")
DIABETES_STATUSES = ("yes", "no")
CATEGORIES = ("low", "moderate", "high", "very-high")

REGIONAL_FACTORS = {
    "low": 0.7,
    "moderate": 1.0,
    "high": 1.4,
    "very-high": 1.8,
}
DEFAULT_REGIONAL_FACTOR = 1.0

OP_AGE_THRESHOLD = 70
OP_SCORE_MULTIPLIER = 1.2
BASELINE_RISK = 0.08
BASELINE_RISK_OP = 0.15

MIN_RISK_PCT = 0.1
MAX_RISK_PCT = 50.0

REFERENCE_SYSTOLIC_BP = 120.0
REFERENCE_TOTAL_CHOLESTEROL = 5.0
REFERENCE_HDL = 1.3

# (upper bound exclusive, category) per age band
_THRESHOLDS_UNDER_50 = ((2.5, "low"), (7.5, "moderate"), (10.0, "high"))
_THRESHOLDS_50_PLUS = ((5.0, "low"), (10.0, "moderate"), (15.0, "high"))


@dataclass(frozen=True)
class Parameters:
    age: int
    sex: str
    region: str
    smoking: str
    systolic_bp: float
    total_cholesterol: float
    cholesterol_unit: str = "mmol/L"
    hdl_cholesterol: float | None = None
    diabetes: str | None = None
    bmi: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "Parameters":
        return cls(**payload)


@dataclass(frozen=True)
class RiskResult:
    risk_percentage: float
    risk_category: str
    heart_age: int
    algorithm: str
    interpretation: str
    recommendations: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["recommendations"] = list(self.recommendations)
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "RiskResult":
        return cls(**{**payload, "recommendations": tuple(payload["recommendations"])})


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a calculator does (2.5 -> 3), not banker's rounding."""
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def _ln(value: float) -> float:
    # Out-of-domain inputs give a non-finite term instead of raising.
    if value > 0:
        return math.log(value)
    return -math.inf if value == 0 else math.nan


def normalize_cholesterol(params: Parameters) -> tuple[float, float | None]:
    """Return (total, hdl) in mmol/L."""
    total = params.total_cholesterol
    hdl = params.hdl_cholesterol or None
    if params.cholesterol_unit == "mg/dL":
        total = total / MG_DL_PER_MMOL_L
        if hdl:
            hdl = hdl / MG_DL_PER_MMOL_L
    return total, hdl


def uses_older_persons_model(age: int) -> bool:
    return age >= OP_AGE_THRESHOLD


def _linear_score(
    age: int,
    sex: str,
    region: str,
    smoking: str,
    systolic_bp: float,
    total_mmol: float,
    hdl_mmol: float | None,
    diabetes: str | None,
    use_op: bool,
) -> float:
    male = sex == "male"
    score = _ln(age / 40) * (0.8 if male else 0.7)
    score += 0.5 if male else 0.0
    score += 0.6 if smoking == "smoker" else 0.0
    score += _ln(systolic_bp / 120) * 0.4
    score += _ln(total_mmol / 5.0) * 0.3
    if hdl_mmol:
        score += -_ln(hdl_mmol / REFERENCE_HDL) * 0.2
    if diabetes == "yes":
        score += 0.4

    score *= REGIONAL_FACTORS.get(region, DEFAULT_REGIONAL_FACTOR)
    if use_op:
        score *= OP_SCORE_MULTIPLIER
    return score


def _score_to_percentage(score: float, use_op: bool) -> float:
    baseline = BASELINE_RISK_OP if use_op else BASELINE_RISK
    try:
        pct = (1 - math.exp(-math.exp(score) * baseline)) * 100
    except OverflowError:
        pct = 100.0
    if math.isnan(pct):
        return MIN_RISK_PCT
    return max(MIN_RISK_PCT, min(MAX_RISK_PCT, pct))


def compute_score(
    params: Parameters,
    use_op: bool,
    total_mmol: float | None = None,
) -> float:
    """Clamped, unrounded 10-year risk percentage for ``params``.

    ``total_mmol`` overrides the normalized total cholesterol; the heart-age
    reference profile uses it to pin cholesterol at 5.0 mmol/L whatever unit
    the caller entered.
    """
    total, hdl = normalize_cholesterol(params)
    if total_mmol is not None:
        total = total_mmol
    score = _linear_score(
        params.age,
        params.sex,
        params.region,
        params.smoking,
        params.systolic_bp,
        total,
        hdl,
        params.diabetes,
        use_op,
    )
    pct = _score_to_percentage(score, use_op)
    logger.debug("score=%.5f use_op=%s pct=%.4f", score, use_op, pct)
    return pct


def categorize_risk(risk_percentage: float, age: int) -> str:
    bands = _THRESHOLDS_UNDER_50 if age < 50 else _THRESHOLDS_50_PLUS
    for upper, category in bands:
        if risk_percentage < upper:
            return category
    return "very-high"


def reference_parameters(params: Parameters) -> Parameters:
    """Same person with the modifiable factors at healthy values."""
    return replace(
        params,
        smoking="non-smoker",
        systolic_bp=REFERENCE_SYSTOLIC_BP,
        diabetes="no",
    )


def estimate_heart_age(params: Parameters, risk_percentage: float) -> int:
    use_op = uses_older_persons_model(params.age)
    reference_pct = compute_score(
        reference_parameters(params), use_op, total_mmol=REFERENCE_TOTAL_CHOLESTEROL
    )
    ratio = risk_percentage / reference_pct
    logger.debug("reference_pct=%.4f ratio=%.4f", reference_pct, ratio)
    heart_age = int(round_half_up(params.age + (ratio - 1) * 10))
    return max(params.age, min(100, heart_age))


def generate_recommendations(params: Parameters, risk_category: str) -> list[str]:
    recommendations: list[str] = []

    if params.smoking == "smoker":
        recommendations.append(
            "Quit smoking - this is the single most important step to reduce your cardiovascular risk"
        )
        recommendations.append(
            "Consider nicotine replacement therapy or consult your doctor about smoking cessation aids"
        )

    if params.systolic_bp > 140:
        recommendations.append("Discuss blood pressure management with your doctor")
        recommendations.append("Reduce salt intake and increase physical activity")
        recommendations.append("Consider antihypertensive medication if lifestyle changes are insufficient")
    elif params.systolic_bp > 130:
        recommendations.append("Monitor blood pressure regularly and maintain a healthy lifestyle")

    total_mmol, _ = normalize_cholesterol(params)
    if total_mmol > 5.5:
        recommendations.append("Discuss cholesterol management with your doctor")
        recommendations.append("Follow a Mediterranean-style diet rich in fruits, vegetables, and healthy fats")
        recommendations.append("Consider statin therapy if dietary changes are insufficient")

    if params.diabetes == "yes":
        recommendations.append("Maintain optimal blood glucose control")
        recommendations.append("Regular monitoring of HbA1c levels")
        recommendations.append("Consider additional cardiovascular protection medications")

    if risk_category in ("moderate", "high", "very-high"):
        recommendations.append(
            "Engage in regular physical activity (at least 150 minutes of moderate exercise per week)"
        )
        recommendations.append("Maintain a healthy weight (BMI 18.5-24.9)")
        recommendations.append("Limit alcohol consumption")
        recommendations.append("Consider low-dose aspirin therapy (consult your doctor)")
    elif risk_category == "low":
        recommendations.append("Maintain your current healthy lifestyle")
        recommendations.append("Continue regular physical activity and healthy diet")
        recommendations.append("Regular health check-ups every 2-3 years")

    return recommendations


def generate_interpretation(risk_percentage: float, sex: str) -> str:
    people = "men" if sex == "male" else "women"
    count = int(round_half_up(risk_percentage))
    return (
        f"This means out of 100 {people} like you, about {count} "
        "will have a heart attack or stroke in the next 10 years."
    )


def calculate_risk(params: Parameters) -> RiskResult:
    """10-year cardiovascular risk for an already validated ``params``."""
    use_op = uses_older_persons_model(params.age)
    pct = compute_score(params, use_op)

    category = categorize_risk(pct, params.age)
    heart_age = estimate_heart_age(params, pct)

    return RiskResult(
        risk_percentage=round_half_up(pct, 1),
        risk_category=category,
        heart_age=heart_age,
        algorithm="SCORE2-OP" if use_op else "SCORE2",
        interpretation=generate_interpretation(pct, params.sex),
        recommendations=tuple(generate_recommendations(params, category)),
    )
