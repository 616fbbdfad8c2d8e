from __future__ import annotations

import math
from typing import Any

from score2.models.engine import (
    CHOLESTEROL_UNITS,
    DIABETES_STATUSES,
    REGIONS,
    SEXES,
    SMOKING_STATUSES,
    Parameters,
)

_MISSING_TOKENS = {"", "na", "nan", "none", "null", "?"}


class ValidationError(ValueError):
    """Raised with every violated input constraint at once."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


def _to_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if text.lower() in _MISSING_TOKENS:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def _to_int(value: Any) -> int | None:
    number = _to_number(value)
    if number is None:
        return None
    return int(number)


def _to_choice(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    if text.lower() in _MISSING_TOKENS:
        return None
    return text


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _in_range(value: Any, low: float, high: float) -> bool:
    return _is_number(value) and low <= value <= high


def _is_positive(value: Any) -> bool:
    return _is_number(value) and value > 0


def validate_inputs(params: Parameters) -> list[str]:
    """Return one message per violated constraint (empty when valid)."""
    errors: list[str] = []

    if not _in_range(params.age, 40, 100):
        errors.append("Age must be between 40 and 100 years")

    if params.sex not in SEXES:
        errors.append("Sex must be specified as male or female")

    if params.region not in REGIONS:
        errors.append("Risk region must be specified")

    if params.smoking not in SMOKING_STATUSES:
        errors.append("Smoking status must be specified")

    if not _in_range(params.systolic_bp, 80, 250):
        errors.append("Systolic blood pressure must be between 80 and 250 mmHg")

    if not _is_positive(params.total_cholesterol):
        errors.append("Total cholesterol must be specified and greater than 0")

    if params.cholesterol_unit not in CHOLESTEROL_UNITS:
        errors.append("Cholesterol unit must be mmol/L or mg/dL")

    if params.hdl_cholesterol is not None and not _is_positive(params.hdl_cholesterol):
        errors.append("HDL cholesterol must be greater than 0 when provided")

    if params.diabetes is not None and params.diabetes not in DIABETES_STATUSES:
        errors.append("Diabetes status must be yes or no")

    if params.bmi is not None and not _is_positive(params.bmi):
        errors.append("BMI must be greater than 0 when provided")

    return errors


def require_valid(params: Parameters) -> Parameters:
    errors = validate_inputs(params)
    if errors:
        raise ValidationError(errors)
    return params


def parse_parameters(form: dict[str, Any], validate: bool = True) -> Parameters:
    """Build Parameters from raw form or CLI values.

    Blank and unparsable entries become None so validation can report them
    together instead of failing on the first bad field.
    """
    params = Parameters(
        age=_to_int(form.get("age")),
        sex=_to_choice(form.get("sex")),
        region=_to_choice(form.get("region")),
        smoking=_to_choice(form.get("smoking")),
        systolic_bp=_to_number(form.get("systolic_bp")),
        total_cholesterol=_to_number(form.get("total_cholesterol")),
        cholesterol_unit=_to_choice(form.get("cholesterol_unit")) or "mmol/L",
        hdl_cholesterol=_to_number(form.get("hdl_cholesterol")),
        diabetes=_to_choice(form.get("diabetes")),
        bmi=_to_number(form.get("bmi")),
    )
    if validate:
        require_valid(params)
    return params
