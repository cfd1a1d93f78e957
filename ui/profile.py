import streamlit as st
from pydantic import ValidationError

from core.state import save_state
from core.utils import credit_tier
from drivewise.models import FinancialProfile, UserProfile

DEFAULT_PROFILE = {
    "annual_income": 75000.0,
    "credit_score": 720,
    "employment_subsidy": 0.0,
    "budget_min": 25000.0,
    "budget_max": 35000.0,
    "lease_term": 48,
}

LEASE_TERMS = [24, 36, 48, 60, 72]


def current_profile() -> dict:
    """The shopper profile in session state, seeded with defaults."""
    return st.session_state.setdefault("financial_profile", DEFAULT_PROFILE.copy())


def render_profile_sidebar():
    """Sidebar inputs for the shopper's income, credit and budget."""
    p = current_profile()
    sb = st.sidebar
    sb.header("Your profile")
    income = sb.number_input(
        "Annual income", min_value=0.0, value=float(p["annual_income"]), step=1000.0, key="fp_income"
    )
    score = sb.slider("Credit score", 300, 850, int(p["credit_score"]), key="fp_score")
    sb.caption(f"Credit tier: {credit_tier(score)}")
    subsidy = sb.number_input(
        "Employment subsidy (annual)",
        min_value=0.0,
        value=float(p.get("employment_subsidy", 0.0)),
        step=500.0,
        key="fp_subsidy",
    )
    bmin = sb.number_input(
        "Budget min", min_value=0.0, value=float(p["budget_min"]), step=1000.0, key="fp_bmin"
    )
    bmax = sb.number_input(
        "Budget max", min_value=0.0, value=float(p["budget_max"]), step=1000.0, key="fp_bmax"
    )
    term = int(p["lease_term"])
    term = sb.selectbox(
        "Term (months)",
        LEASE_TERMS,
        index=LEASE_TERMS.index(term) if term in LEASE_TERMS else 2,
        key="fp_term",
    )

    candidate = {
        "annual_income": income,
        "credit_score": score,
        "employment_subsidy": subsidy,
        "budget_min": bmin,
        "budget_max": bmax,
        "lease_term": term,
    }
    try:
        FinancialProfile(**candidate)
    except ValidationError as e:
        for err in e.errors():
            sb.error(err["msg"])
        return p
    st.session_state["financial_profile"] = candidate
    save_state()
    return candidate


def current_user_profile() -> UserProfile:
    """Driving habits from session state; invalid saved data falls back to defaults."""
    saved = st.session_state.setdefault("user_profile", {})
    try:
        return UserProfile(**saved)
    except ValidationError:
        return UserProfile()


def render_driving_sidebar():
    """Sidebar inputs for commute and yearly mileage."""
    u = current_user_profile()
    sb = st.sidebar
    sb.header("Driving habits")
    commute = sb.number_input(
        "Daily commute, one way (miles)", min_value=0, max_value=200, value=u.daily_commute_one_way, key="up_commute"
    )
    weekend = sb.number_input(
        "Weekend driving per week (miles)", min_value=0, max_value=500, value=u.weekend_driving_per_week, key="up_weekend"
    )
    mileage = sb.number_input(
        "Estimated annual mileage",
        min_value=0,
        max_value=50000,
        value=u.estimated_annual_mileage,
        step=1000,
        key="up_mileage",
    )
    updated = u.model_copy(
        update={
            "daily_commute_one_way": commute,
            "weekend_driving_per_week": weekend,
            "estimated_annual_mileage": mileage,
        }
    )
    st.session_state["user_profile"] = updated.model_dump()
    save_state()
    return updated
