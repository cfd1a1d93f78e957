import pandas as pd
import streamlit as st
from pydantic import ValidationError

from core.state import save_state
from core.utils import money
from drivewise.catalog import get_vehicle_by_id, load_catalog
from drivewise.depreciation import (
    calculate_resale_value,
    depreciation_path,
    generate_depreciation_forecast,
)
from drivewise.models import DepreciationFactors, DepreciationRequest, ResaleRequest
from ui.advisories import render_validation_error
from ui.profile import current_user_profile

FACTOR_LABELS = {
    "low_mileage": "Low mileage",
    "good_condition": "Good condition",
    "low_interest": "Low interest rates",
    "low_gas": "Low gas prices",
}


def render_factor_inputs() -> DepreciationFactors:
    saved = st.session_state.get("depreciation_factors", {})
    cols = st.columns(len(FACTOR_LABELS))
    flags = {
        name: cols[i].checkbox(label, value=bool(saved.get(name, False)), key=f"dep_{name}")
        for i, (name, label) in enumerate(FACTOR_LABELS.items())
    }
    st.session_state["depreciation_factors"] = flags
    save_state()
    return DepreciationFactors(**flags)


def render_depreciation():
    """Base-curve forecast, resale lookup and the ten year path."""
    st.header("Depreciation")
    catalog = load_catalog()
    ids = [v.id for v in catalog]
    vehicle_id = st.selectbox(
        "Vehicle", ids, format_func=lambda i: get_vehicle_by_id(i).display_name, key="dep_vehicle"
    )
    vehicle = get_vehicle_by_id(vehicle_id)
    price = st.number_input(
        "Purchase price", min_value=0.0, value=float(vehicle.msrp), step=500.0, key=f"dep_price_{vehicle_id}"
    )
    factors = render_factor_inputs()

    try:
        req = DepreciationRequest(vehicle_price=price, factors=factors)
    except ValidationError as e:
        render_validation_error(e)
        return None

    forecast = generate_depreciation_forecast(req.vehicle_price, req.factors)
    df = pd.DataFrame([p.model_dump() for p in forecast]).set_index("year")
    st.subheader("Value retention (%)")
    st.line_chart(df[["lower", "value", "upper"]])
    st.dataframe(df, use_container_width=True)

    st.subheader("Resale estimate")
    years = st.number_input("Years owned", min_value=0.5, max_value=10.0, value=3.0, step=0.5, key="dep_years")
    try:
        resale_req = ResaleRequest(vehicle_price=req.vehicle_price, years=years, factors=req.factors)
    except ValidationError as e:
        render_validation_error(e)
        return None
    resale = calculate_resale_value(**resale_req.model_dump(exclude={"factors"}), factors=resale_req.factors)
    cols = st.columns(3)
    cols[0].metric("Estimated value", money(resale.estimated_value))
    cols[1].metric("Range", f"{money(resale.lower_bound)} - {money(resale.upper_bound)}")
    cols[2].metric("Confidence", resale.confidence)

    st.subheader("Ten year path")
    mileage = st.number_input(
        "Annual mileage",
        min_value=0,
        value=current_user_profile().estimated_annual_mileage,
        step=1000,
        key="dep_mileage",
    )
    path = depreciation_path(req.vehicle_price, mileage, model_year=vehicle.year)
    path_df = pd.DataFrame([p.model_dump() for p in path]).set_index("year")
    st.line_chart(path_df[["lower_bound", "value", "upper_bound"]])
    return resale
