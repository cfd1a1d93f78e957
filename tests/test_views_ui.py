import os
import sys

import pytest
from pydantic import ValidationError
from streamlit.testing.v1 import AppTest

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from core import state
from drivewise.config import get_settings
from drivewise.matching import calculate_affordability
from drivewise.models import UserProfile

PROFILE = {
    "annual_income": 75000.0,
    "credit_score": 720,
    "employment_subsidy": 0.0,
    "budget_min": 25000.0,
    "budget_max": 35000.0,
    "lease_term": 48,
}


@pytest.fixture(autouse=True)
def offline(tmp_path, monkeypatch):
    monkeypatch.setattr(state, "SESSION_FILE", str(tmp_path / "session.json"))
    monkeypatch.setenv("DRIVEWISE_LLM_API_KEY", "")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def affordability_app():
    from ui.affordability import render_affordability

    render_affordability()


def matches_app():
    from ui.matches import render_matches

    render_matches()


def depreciation_app():
    from ui.depreciation import render_depreciation

    render_depreciation()


def ownership_app():
    from ui.ownership import render_ownership

    render_ownership()


def driving_app():
    from ui.ownership import render_ownership
    from ui.profile import render_driving_sidebar

    render_driving_sidebar()
    render_ownership()


def _metric(at, label):
    return next(m.value for m in at.metric if m.label == label)


def test_affordability_view_matches_engine():
    at = AppTest.from_function(affordability_app)
    at.session_state["financial_profile"] = dict(PROFILE)
    at.run(timeout=30)
    assert not at.exception
    expected = calculate_affordability(75000.0, 720, 0.0, 28400.0, 2840.0, 48, 32, 4.8)
    assert _metric(at, "Affordability score") == f"{expected.score}/100"
    assert _metric(at, "APR") == "4.5%"

    at.selectbox(key="aff_vehicle").set_value("tacoma-trd-pro").run(timeout=30)
    assert not at.exception
    assert any("[PRICE_OVER_MAX]" in w.value for w in at.warning)


def test_matches_view_compares_vehicles():
    at = AppTest.from_function(matches_app)
    at.session_state["financial_profile"] = dict(PROFILE)
    at.run(timeout=30)
    assert not at.exception
    assert len(at.dataframe) == 1

    at.multiselect(key="compare_pick").set_value(["camry-le", "corolla-le"]).run(timeout=30)
    assert not at.exception
    assert any("offers the best overall value" in m.value for m in at.markdown)
    assert at.session_state["compare_ids"] == ["camry-le", "corolla-le"]


def test_depreciation_view_shows_resale():
    at = AppTest.from_function(depreciation_app)
    at.run(timeout=30)
    assert not at.exception
    assert _metric(at, "Confidence") == "High (87%+)"
    assert _metric(at, "Estimated value") == "$17,892"


def test_ownership_view_runs():
    at = AppTest.from_function(ownership_app)
    at.session_state["financial_profile"] = dict(PROFILE)
    at.run(timeout=30)
    assert not at.exception
    assert any("saves about" in s.value for s in at.success)


def test_app_navigation():
    at = AppTest.from_file("../app.py")
    at.run(timeout=30)
    assert not at.exception
    at.sidebar.radio[0].set_value("Depreciation").run(timeout=30)
    assert not at.exception
    assert at.session_state["view"] == "Depreciation"


def test_user_profile_bounds():
    assert UserProfile().estimated_annual_mileage == 12000
    with pytest.raises(ValidationError):
        UserProfile(estimated_annual_mileage=60000)
    with pytest.raises(ValidationError):
        UserProfile(daily_commute_one_way=-1)


def test_saved_mileage_seeds_depreciation_path():
    at = AppTest.from_function(depreciation_app)
    at.session_state["user_profile"] = {"estimated_annual_mileage": 15000}
    at.run(timeout=30)
    assert not at.exception
    assert at.number_input(key="dep_mileage").value == 15000


def test_invalid_saved_mileage_falls_back_to_default():
    at = AppTest.from_function(depreciation_app)
    at.session_state["user_profile"] = {"estimated_annual_mileage": 90000}
    at.run(timeout=30)
    assert not at.exception
    assert at.number_input(key="dep_mileage").value == 12000


def test_driving_sidebar_saves_mileage():
    at = AppTest.from_function(driving_app)
    at.session_state["financial_profile"] = dict(PROFILE)
    at.run(timeout=30)
    assert at.number_input(key="own_mileage").value == 12000
    at.number_input(key="up_mileage").set_value(18000).run(timeout=30)
    assert not at.exception
    assert at.session_state["user_profile"]["estimated_annual_mileage"] == 18000
