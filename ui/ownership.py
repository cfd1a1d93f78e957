import pandas as pd
import streamlit as st
from pydantic import ValidationError

from core.utils import money
from drivewise.calculators import (
    calculate_apr,
    estimate_fuel_cost,
    estimate_insurance,
    estimate_maintenance_cost,
    estimate_taxes_and_fees,
    monthly_payment,
)
from drivewise.catalog import get_vehicle_by_id, load_catalog
from drivewise.depreciation import calculate_tco, compare_buy_vs_lease
from drivewise.models import BuyVsLeaseRequest, DepreciationFactors, TCORequest
from ui.advisories import render_validation_error
from ui.profile import current_profile, current_user_profile


def tco_for(req: TCORequest):
    """Fill the recurring costs from the estimators and run the TCO."""
    apr = calculate_apr(req.credit_score)
    return calculate_tco(
        req.vehicle_price,
        req.down_payment,
        apr,
        req.term_months,
        estimate_insurance(req.vehicle_price, req.credit_score),
        estimate_fuel_cost(req.mpg_combined, req.annual_mileage),
        estimate_maintenance_cost(req.vehicle_price, req.reliability),
        estimate_taxes_and_fees(req.vehicle_price),
        req.factors,
    )


def render_ownership():
    """Total cost of ownership and buy vs lease."""
    st.header("Ownership Cost")
    profile = current_profile()
    catalog = load_catalog()
    ids = [v.id for v in catalog]
    vehicle_id = st.selectbox(
        "Vehicle", ids, format_func=lambda i: get_vehicle_by_id(i).display_name, key="own_vehicle"
    )
    vehicle = get_vehicle_by_id(vehicle_id)
    c1, c2, c3 = st.columns(3)
    down = c1.number_input(
        "Down payment", min_value=0.0, value=round(vehicle.msrp * 0.1, 0), step=500.0, key=f"own_down_{vehicle_id}"
    )
    term = c2.number_input(
        "Term (months)", min_value=1, value=int(profile["lease_term"]), step=12, key="own_term"
    )
    mileage = c3.number_input(
        "Annual mileage",
        min_value=0,
        value=current_user_profile().estimated_annual_mileage,
        step=1000,
        key="own_mileage",
    )

    try:
        req = TCORequest(
            vehicle_price=vehicle.msrp,
            down_payment=down,
            term_months=term,
            credit_score=profile["credit_score"],
            mpg_combined=vehicle.mpg_combined,
            reliability=vehicle.reliability,
            annual_mileage=mileage,
            factors=DepreciationFactors(**st.session_state.get("depreciation_factors", {})),
        )
    except ValidationError as e:
        render_validation_error(e)
        return None
    if req.down_payment > req.vehicle_price:
        st.error("Down payment cannot exceed the vehicle price.")
        return None

    tco = tco_for(req)
    cols = st.columns(4)
    cols[0].metric("Total paid", money(tco.total_paid))
    cols[1].metric("Depreciation", money(tco.depreciation))
    cols[2].metric("Net cost", money(tco.net_cost))
    cols[3].metric("Monthly equivalent", money(tco.monthly_equivalent))
    breakdown = pd.Series(tco.breakdown.model_dump(), name="amount")
    st.bar_chart(breakdown)

    st.subheader("Buy vs lease")
    apr = calculate_apr(req.credit_score)
    l1, l2, l3 = st.columns(3)
    loan_term = l1.number_input("Loan term (months)", min_value=1, value=60, step=12, key="bvl_loan_term")
    lease_down = l2.number_input("Lease down payment", min_value=0.0, value=2000.0, step=500.0, key="bvl_lease_down")
    lease_term = l3.number_input("Lease term (months)", min_value=1, value=36, step=12, key="bvl_lease_term")
    suggested_lease = monthly_payment(vehicle.msrp * 0.45, apr, int(lease_term))
    monthly_lease = st.number_input(
        "Monthly lease payment",
        min_value=0.0,
        value=float(suggested_lease),
        step=10.0,
        key=f"bvl_lease_pmt_{vehicle_id}",
    )
    try:
        bvl_req = BuyVsLeaseRequest(
            vehicle_price=vehicle.msrp,
            down_payment=req.down_payment,
            loan_term=loan_term,
            apr=apr,
            lease_down_payment=lease_down,
            monthly_lease_payment=monthly_lease,
            lease_term=lease_term,
        )
    except ValidationError as e:
        render_validation_error(e)
        return tco
    result = compare_buy_vs_lease(**bvl_req.model_dump())
    frame = pd.DataFrame(
        [
            {"Option": "Buy", "Monthly": result.buy.monthly_payment, "Total": result.buy.total_cost, "Net": result.buy.net_cost},
            {"Option": "Lease", "Monthly": result.lease.monthly_payment, "Total": result.lease.total_cost, "Net": result.lease.total_cost},
        ]
    )
    st.dataframe(frame.round(2), use_container_width=True, hide_index=True)
    st.success(f"{result.recommendation.title()} saves about {money(result.savings)}.")
    return tco
