from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Any

import jinja2

from score2.models.engine import Parameters, RiskResult

logger = logging.getLogger(__name__)

REPORT_TITLE = "SCORE2 Cardiovascular Risk Assessment Report"
REPORT_TEMPLATE = "report.html"
TEMPLATE_DIR = Path(__file__).parent / "templates"
DEFAULT_REPORT_DIR = Path("reports")

RISK_COLORS = {
    "low": "#22c55e",
    "moderate": "#eab308",
    "high": "#f97316",
    "very-high": "#ef4444",
}
FALLBACK_COLOR = "#6b7280"

CITATION = "Based on the SCORE2 algorithm (2021 ESC Guidelines for cardiovascular disease prevention)."
DISCLAIMER = (
    "This tool is for educational purposes only. It does not replace medical advice. "
    "Please consult your doctor before making health decisions. "
    "The SCORE2 algorithm is based on the 2021 ESC Guidelines for cardiovascular disease prevention."
)


def capitalize(value: str) -> str:
    return value[:1].upper() + value[1:] if value else value


def category_color(category: str) -> str:
    return RISK_COLORS.get(category, FALLBACK_COLOR)


def _template_env() -> jinja2.Environment:
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(TEMPLATE_DIR),
        autoescape=jinja2.select_autoescape(["html", "xml"]),
    )
    env.filters["capitalize_first"] = lambda value: capitalize(str(value))
    return env


def _or_default(value: Any, default: str) -> Any:
    return default if value in (None, "") else value


def build_report(params: Parameters, result: RiskResult, generated: date | None = None) -> dict[str, Any]:
    generated = generated or date.today()
    return {
        "title": REPORT_TITLE,
        "date": generated.isoformat(),
        "patient_info": {
            "age": params.age,
            "sex": params.sex,
            "region": params.region,
            "smoking": params.smoking,
            "systolic_bp": params.systolic_bp,
            "total_cholesterol": params.total_cholesterol,
            "cholesterol_unit": params.cholesterol_unit,
            "hdl_cholesterol": _or_default(params.hdl_cholesterol, "Not provided"),
            "diabetes": _or_default(params.diabetes, "Not specified"),
            "bmi": _or_default(params.bmi, "Not provided"),
        },
        "results": result.to_dict(),
    }



def _patient_rows(info: dict[str, Any]) -> list[tuple[str, str]]:
    unit = info["cholesterol_unit"]
    return [
        ("Age", f"{info['age']} years"),
        ("Sex", capitalize(str(info["sex"]))),
        ("Risk Region", capitalize(str(info["region"]))),
        ("Smoking Status", capitalize(str(info["smoking"]))),
        ("Systolic BP", f"{info['systolic_bp']} mmHg"),
        ("Total Cholesterol", f"{info['total_cholesterol']} {unit}"),
        ("HDL Cholesterol", f"{info['hdl_cholesterol']} {unit}"),
        ("Diabetes", str(info["diabetes"])),
        ("BMI", f"{info['bmi']} kg/m²"),
    ]


def render_report_html(report: dict[str, Any]) -> str:
    template = _template_env().get_template(REPORT_TEMPLATE)
    return template.render(
        report=report,
        results=report["results"],
        patient_rows=_patient_rows(report["patient_info"]),
        disclaimer=DISCLAIMER,
    )


def report_filename(generated: date) -> str:
    return f"SCORE2_Risk_Report_{generated.isoformat()}.html"


def write_report(
    params: Parameters,
    result: RiskResult,
    output_dir: str | Path = DEFAULT_REPORT_DIR,
    generated: date | None = None,
) -> Path:
    generated = generated or date.today()
    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    out = out_dir / report_filename(generated)
    out.write_text(render_report_html(build_report(params, result, generated)), encoding="utf-8")
    logger.info("Wrote risk report to %s", out)
    return out


def share_summary(params: Parameters, result: RiskResult, generated: date | None = None) -> str:
    generated = generated or date.today()
    lines = [
        "SCORE2 Cardiovascular Risk Assessment",
        "",
        f"Risk: {result.risk_percentage}% ({result.risk_category} risk)",
        f"Heart Age: {result.heart_age} years",
        f"Algorithm: {result.algorithm}",
        "",
        result.interpretation,
        "",
        f"Age {params.age}, {params.sex}, {params.smoking}, "
        f"SBP {params.systolic_bp} mmHg, cholesterol {params.total_cholesterol} {params.cholesterol_unit}",
        "",
        "Educational estimate only, not medical advice.",
        CITATION,
        "Generated by SCORE2 Risk Calculator",
        f"Date: {generated.isoformat()}",
    ]
    return "\n".join(lines)
