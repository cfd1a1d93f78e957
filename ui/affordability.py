import pandas as pd
import streamlit as st
from pydantic import ValidationError

from core.utils import money
from drivewise.calculators import calculate_affordable_car_price
from drivewise.catalog import get_vehicle_by_id, load_catalog
from drivewise.matching import calculate_affordability
from drivewise.models import AffordabilityRequest
from ui.advisories import render_rule_results, render_validation_error
from ui.profile import current_profile


def render_affordability():
    """Quick calculator: one vehicle against the shopper's profile."""
    st.header("Affordability")
    profile = current_profile()
    catalog = load_catalog()
    ids = [v.id for v in catalog]
    vehicle_id = st.selectbox(
        "Vehicle",
        ids,
        format_func=lambda i: get_vehicle_by_id(i).display_name,
        key="aff_vehicle",
    )
    vehicle = get_vehicle_by_id(vehicle_id)

    c1, c2 = st.columns(2)
    price = c1.number_input(
        "Vehicle price", min_value=0.0, value=float(vehicle.msrp), step=500.0, key=f"aff_price_{vehicle_id}"
    )
    down = c2.number_input(
        "Down payment", min_value=0.0, value=round(vehicle.msrp * 0.1, 0), step=500.0, key=f"aff_down_{vehicle_id}"
    )

    try:
        req = AffordabilityRequest(
            annual_income=profile["annual_income"],
            credit_score=profile["credit_score"],
            employment_subsidy=profile.get("employment_subsidy", 0.0),
            vehicle_price=price,
            down_payment=down,
            lease_term=profile["lease_term"],
            mpg_combined=vehicle.mpg_combined,
            reliability=vehicle.reliability,
        )
    except ValidationError as e:
        render_validation_error(e)
        return None
    if req.down_payment > req.vehicle_price:
        st.error("Down payment cannot exceed the vehicle price.")
        return None

    result = calculate_affordability(**req.model_dump())
    max_price = calculate_affordable_car_price(req.annual_income, req.credit_score)

    cols = st.columns(4)
    cols[0].metric("Affordability score", f"{result.score}/100")
    cols[1].metric("Total monthly cost", money(result.total_monthly_cost))
    cols[2].metric("Monthly net income", money(result.monthly_net_income))
    cols[3].metric("APR", f"{result.apr:.1f}%")
    st.caption(f"Budget utilization: {result.budget_utilization:.1f}%")
    st.caption(f"Recommended maximum price: {money(max_price)}")
    if result.can_afford:
        st.success(result.recommendation)
    else:
        st.warning(result.recommendation)

    breakdown = pd.DataFrame([item.model_dump() for item in result.breakdown])
    st.dataframe(breakdown[["name", "value"]], use_container_width=True, hide_index=True)
    st.bar_chart(breakdown.set_index("name")["value"])

    st.subheader("Advisories")
    render_rule_results(
        {
            "annual_income": req.annual_income,
            "monthly_net_income": result.monthly_net_income,
            "budget_min": profile["budget_min"],
            "budget_max": profile["budget_max"],
            "vehicle_price": req.vehicle_price,
            "max_affordable_price": max_price,
            "total_monthly_cost": result.total_monthly_cost,
            "apr": result.apr,
            "term_months": req.lease_term,
            "down_payment": req.down_payment,
        }
    )
    st.session_state["affordability_result"] = result.model_dump()
    return result
