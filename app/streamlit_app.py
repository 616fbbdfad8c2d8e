from __future__ import annotations

from datetime import date

import streamlit as st

from score2.eval.report import (
    build_report,
    capitalize,
    category_color,
    render_report_html,
    report_filename,
    share_summary,
)
from score2.models.engine import CHOLESTEROL_UNITS, calculate_risk
from score2.sim.what_if import (
    SBP_RANGE,
    SBP_STEP,
    cholesterol_slider_range,
    simulate_from_controls,
    simulate_grid,
    slider_bounds,
)
from score2.validation.inputs import ValidationError, parse_parameters

REGION_LABELS = {
    "low": "Low Risk Region",
    "moderate": "Moderate Risk Region",
    "high": "High Risk Region",
    "very-high": "Very High Risk Region",
}

st.set_page_config(page_title="SCORE2 Risk Calculator", layout="wide")
st.title("SCORE2 Cardiovascular Risk Calculator")
st.caption("Educational estimate based on the 2021 ESC SCORE2 methodology. Not medical advice.")

form_col, result_col = st.columns(2)

with form_col:
    with st.form("patient"):
        age = st.text_input("Age (years)", placeholder="40-100")
        sex = st.radio("Sex", ["male", "female"], index=None, format_func=capitalize, horizontal=True)
        region = st.selectbox(
            "Risk Region", list(REGION_LABELS), index=None, format_func=REGION_LABELS.get,
            placeholder="Select risk region",
        )
        smoking = st.radio("Smoking Status", ["non-smoker", "smoker"], index=None, format_func=capitalize, horizontal=True)
        systolic_bp = st.text_input("Systolic Blood Pressure (mmHg)")
        total_cholesterol = st.text_input("Total Cholesterol")
        cholesterol_unit = st.radio("Unit", list(CHOLESTEROL_UNITS), horizontal=True)
        with st.expander("Optional"):
            hdl_cholesterol = st.text_input(f"HDL Cholesterol ({cholesterol_unit})")
            diabetes = st.radio("Diabetes", ["no", "yes"], index=None, format_func=capitalize, horizontal=True)
            bmi = st.text_input("BMI (kg/m²)")
        submitted = st.form_submit_button("Calculate Risk")

    if submitted:
        form = {
            "age": age,
            "sex": sex,
            "region": region,
            "smoking": smoking,
            "systolic_bp": systolic_bp,
            "total_cholesterol": total_cholesterol,
            "cholesterol_unit": cholesterol_unit,
            "hdl_cholesterol": hdl_cholesterol,
            "diabetes": diabetes,
            "bmi": bmi,
        }
        try:
            st.session_state["params"] = parse_parameters(form)
        except ValidationError as exc:
            st.session_state.pop("params", None)
            st.error("Please check your inputs:\n\n" + "\n".join(f"- {msg}" for msg in exc.errors))

params = st.session_state.get("params")

with result_col:
    if params is None:
        st.info('Fill in the required fields and click "Calculate Risk" to see the results.')
        st.stop()

    result = calculate_risk(params)
    st.subheader("10-Year Cardiovascular Risk")
    color = category_color(result.risk_category)
    st.markdown(
        f"<h1 style='color:{color};text-align:center'>{result.risk_percentage}%</h1>"
        f"<p style='text-align:center'><b>{capitalize(result.risk_category)} Risk</b> · {result.algorithm}</p>",
        unsafe_allow_html=True,
    )
    st.progress(min(1.0, result.risk_percentage / 100))

    st.subheader("What This Means")
    st.write(result.interpretation)
    st.metric("Heart Age", f"{result.heart_age} years")

    st.subheader("Recommendations")
    for rec in result.recommendations:
        st.markdown(f"- {rec}")

    today = date.today()
    st.download_button(
        "Export Report",
        data=render_report_html(build_report(params, result, today)),
        file_name=report_filename(today),
        mime="text/html",
    )
    with st.expander("Share Results"):
        st.code(share_summary(params, result, today), language=None)

st.subheader("What If Simulation")
st.caption("See how lifestyle changes could affect your cardiovascular risk.")
non_smoker = st.toggle("Non-smoker", value=params.smoking == "non-smoker")
sbp_low, sbp_high = slider_bounds(*SBP_RANGE, float(params.systolic_bp))
sim_sbp = st.slider(
    "Systolic Blood Pressure (mmHg)", min_value=sbp_low, max_value=sbp_high,
    value=float(params.systolic_bp), step=SBP_STEP,
)
chol_low, chol_high, chol_step = cholesterol_slider_range(params.cholesterol_unit)
chol_low, chol_high = slider_bounds(chol_low, chol_high, float(params.total_cholesterol))
sim_chol = st.slider(
    f"Total Cholesterol ({params.cholesterol_unit})", min_value=chol_low, max_value=chol_high,
    value=float(params.total_cholesterol), step=chol_step,
)

outcome = simulate_from_controls(params, non_smoker, sim_sbp, sim_chol)
current_col, simulated_col = st.columns(2)
current_col.metric("Current Risk", f"{outcome.original.risk_percentage}%")
simulated_col.metric(
    "Simulated Risk", f"{outcome.simulated.risk_percentage}%",
    delta=f"{outcome.difference:+.1f}%", delta_color="inverse",
)
st.write(outcome.summary())
message = outcome.encouragement()
if message:
    st.success(message)

grid = simulate_grid(outcome.simulated_params)
st.line_chart({"systolic_bp": [sbp for sbp, _ in grid], "risk": [pct for _, pct in grid]}, x="systolic_bp", y="risk")
st.caption("Simulated risk across systolic blood pressure values, 90-200 mmHg.")
