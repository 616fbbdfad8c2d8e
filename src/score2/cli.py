from __future__ import annotations

import argparse
import logging
import sys

from score2.eval.report import DEFAULT_REPORT_DIR, share_summary, write_report
from score2.models.engine import (
    CHOLESTEROL_UNITS,
    DIABETES_STATUSES,
    REGIONS,
    SEXES,
    SMOKING_STATUSES,
    Parameters,
    RiskResult,
    calculate_risk,
)
from score2.sim.what_if import simulate
from score2.state.assessment import Assessment
from score2.validation.inputs import ValidationError, parse_parameters

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_PARAM_FIELDS = (
    "age",
    "sex",
    "region",
    "smoking",
    "systolic_bp",
    "total_cholesterol",
    "cholesterol_unit",
    "hdl_cholesterol",
    "diabetes",
    "bmi",
)


def _add_patient_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--age", required=True, help="Age in years (40-100)")
    parser.add_argument("--sex", required=True, choices=SEXES)
    parser.add_argument("--region", required=True, choices=REGIONS, help="Risk region")
    parser.add_argument("--smoking", required=True, choices=SMOKING_STATUSES)
    parser.add_argument("--systolic-bp", dest="systolic_bp", required=True, help="Systolic BP in mmHg")
    parser.add_argument("--total-cholesterol", dest="total_cholesterol", required=True)
    parser.add_argument("--cholesterol-unit", dest="cholesterol_unit", default="mmol/L", choices=CHOLESTEROL_UNITS)
    parser.add_argument("--hdl-cholesterol", dest="hdl_cholesterol", default=None)
    parser.add_argument("--diabetes", default=None, choices=DIABETES_STATUSES)
    parser.add_argument("--bmi", default=None, help="Informational only")


def _params_from_args(args: argparse.Namespace) -> Parameters:
    return parse_parameters({name: getattr(args, name) for name in _PARAM_FIELDS})


def format_result(result: RiskResult) -> str:
    lines = [
        f"10-year risk: {result.risk_percentage}% ({result.risk_category} risk)",
        f"Heart age: {result.heart_age} years",
        f"Algorithm: {result.algorithm}",
        "",
        result.interpretation,
        "",
        "Recommendations:",
    ]
    lines.extend(f"  - {rec}" for rec in result.recommendations)
    return "\n".join(lines)


def run_calculate(params: Parameters, as_json: bool = False) -> str:
    result = calculate_risk(params)
    if as_json:
        return Assessment(parameters=params, result=result).to_json()
    return format_result(result)


def run_what_if(
    params: Parameters,
    systolic_bp: float | None = None,
    total_cholesterol: float | None = None,
    quit_smoking: bool = False,
) -> str:
    outcome = simulate(
        params,
        smoking="non-smoker" if quit_smoking else None,
        systolic_bp=systolic_bp,
        total_cholesterol=total_cholesterol,
    )
    lines = [
        f"Current risk: {outcome.original.risk_percentage}%",
        f"Simulated risk: {outcome.simulated.risk_percentage}%",
        outcome.summary(),
    ]
    message = outcome.encouragement()
    if message:
        lines.append(message)
    return "\n".join(lines)


def run_report(params: Parameters, output_dir: str) -> str:
    result = calculate_risk(params)
    try:
        path = write_report(params, result, output_dir=output_dir)
    except OSError as exc:
        logger.error("Could not write report to %s: %s", output_dir, exc)
        return "Unable to save the report. Copy the summary below manually.\n\n" + share_summary(params, result)
    return f"Report written to {path}"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="SCORE2 cardiovascular risk calculator")
    parser.add_argument("--log-level", default="WARNING", type=str.upper, choices=LOG_LEVELS, help="Logging level")
    sub = parser.add_subparsers(dest="command", required=True)

    calc_parser = sub.add_parser("calculate", help="Estimate 10-year cardiovascular risk")
    _add_patient_args(calc_parser)
    calc_parser.add_argument("--json", action="store_true", help="Print a JSON snapshot")

    sim_parser = sub.add_parser("what-if", help="Compare risk after lifestyle changes")
    _add_patient_args(sim_parser)
    sim_parser.add_argument("--sim-sbp", type=float, default=None, help="Simulated systolic BP")
    sim_parser.add_argument("--sim-cholesterol", type=float, default=None, help="Simulated total cholesterol")
    sim_parser.add_argument("--quit-smoking", action="store_true")

    report_parser = sub.add_parser("report", help="Write an HTML report")
    _add_patient_args(report_parser)
    report_parser.add_argument("--output-dir", default=str(DEFAULT_REPORT_DIR))

    share_parser = sub.add_parser("share", help="Print a shareable text summary")
    _add_patient_args(share_parser)

    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    try:
        params = _params_from_args(args)
    except ValidationError as exc:
        print("Please check your inputs:", file=sys.stderr)
        for message in exc.errors:
            print(f"  {message}", file=sys.stderr)
        return 2

    if args.command == "calculate":
        output = run_calculate(params, as_json=args.json)
    elif args.command == "what-if":
        output = run_what_if(params, args.sim_sbp, args.sim_cholesterol, args.quit_smoking)
    elif args.command == "report":
        output = run_report(params, args.output_dir)
    else:
        output = share_summary(params, calculate_risk(params))

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
