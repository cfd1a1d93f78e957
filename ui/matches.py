import pandas as pd
import streamlit as st
from pydantic import ValidationError

from core.state import save_state
from core.utils import money
from drivewise.matching import get_matched_vehicles, select_comparison
from drivewise.models import MatchRequest
from drivewise.presets import DEFAULT_MATCH_LIMIT, LOOKUP_MATCH_LIMIT
from drivewise.recommendations import (
    RecommendationProfile,
    RecommendationRequest,
    get_recommender,
)
from ui.advisories import render_validation_error
from ui.profile import current_profile


def matches_frame(matches) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Vehicle": m.vehicle.display_name,
                "Category": m.vehicle.category,
                "MSRP": m.vehicle.msrp,
                "Match %": m.match_percentage,
                "Payment": m.monthly_payment,
                "Total / mo": m.total_monthly_cost.total,
                "Affordability": m.affordability_score,
                "Salary fit": m.salary_fit,
                "Reliability": m.reliability_score,
            }
            for m in matches
        ]
    )


def render_matches():
    """Ranked vehicles, recommendation text and side-by-side comparison."""
    st.header("Matches")
    profile = current_profile()
    limit = st.slider("Show top", 1, LOOKUP_MATCH_LIMIT, DEFAULT_MATCH_LIMIT, key="match_limit")
    try:
        req = MatchRequest(
            annual_income=profile["annual_income"],
            credit_score=profile["credit_score"],
            employment_subsidy=profile.get("employment_subsidy", 0.0),
            budget_min=profile["budget_min"],
            budget_max=profile["budget_max"],
            lease_term=profile["lease_term"],
            limit=limit,
        )
    except ValidationError as e:
        render_validation_error(e)
        return []

    args = req.model_dump(exclude={"limit"})
    matches = get_matched_vehicles(**args, limit=req.limit)
    st.dataframe(matches_frame(matches), use_container_width=True, hide_index=True)

    rec_profile = RecommendationProfile(
        annual_income=req.annual_income,
        credit_score=req.credit_score,
        lease_term=req.lease_term,
        budget_min=req.budget_min,
        budget_max=req.budget_max,
    )
    recommender = get_recommender()

    by_id = {m.vehicle.id: m for m in matches}
    st.subheader("Why this vehicle?")
    chosen = st.selectbox(
        "Vehicle", list(by_id), format_func=lambda i: by_id[i].vehicle.display_name, key="rec_vehicle"
    )
    if chosen:
        rec = recommender.generate_recommendation(
            RecommendationRequest(vehicle_match=by_id[chosen], user_profile=rec_profile)
        )
        st.write(rec.summary)
        for point in rec.key_points:
            st.markdown(f"- {point}")
        st.caption(rec.financial_insight)
        st.caption(rec.reliability_insight)
        st.caption(rec.value_insight)

        favorites = st.session_state.setdefault("favorites", [])
        if chosen not in favorites and st.button("Add to favorites", key="add_favorite"):
            favorites.append(chosen)
            save_state()

    st.subheader("Compare")
    saved = [i for i in st.session_state.get("compare_ids", []) if i in by_id]
    compare_ids = st.multiselect(
        "Pick 2 to 5 vehicles",
        list(by_id),
        default=saved,
        format_func=lambda i: by_id[i].vehicle.display_name,
        max_selections=5,
        key="compare_pick",
    )
    st.session_state["compare_ids"] = compare_ids
    save_state()
    if len(compare_ids) < 2:
        st.caption(recommender.generate_comparison([by_id[i] for i in compare_ids], rec_profile))
        return matches
    selected = select_comparison(compare_ids, **args)
    st.dataframe(matches_frame(selected), use_container_width=True, hide_index=True)
    st.write(recommender.generate_comparison(selected, rec_profile))
    st.caption(f"Lowest total monthly cost: {money(min(m.total_monthly_cost.total for m in selected))}")
    return matches
