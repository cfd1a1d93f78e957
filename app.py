import streamlit as st

from core.state import load_state, save_state
from core.version import __version__
from drivewise.config import configure_logging
from ui.affordability import render_affordability
from ui.depreciation import render_depreciation
from ui.matches import render_matches
from ui.ownership import render_ownership
from ui.profile import render_driving_sidebar, render_profile_sidebar

VIEWS = {
    "Affordability": render_affordability,
    "Matches": render_matches,
    "Depreciation": render_depreciation,
    "Ownership Cost": render_ownership,
}


def init_state():
    ss = st.session_state
    load_state()
    ss.setdefault("view", "Affordability")
    ss.setdefault("favorites", [])
    ss.setdefault("compare_ids", [])
    ss.setdefault("depreciation_factors", {})


configure_logging()
st.set_page_config(page_title="DriveWise", layout="wide")
init_state()

render_profile_sidebar()
render_driving_sidebar()
views = list(VIEWS)
nav = st.sidebar.radio(
    "Navigate",
    views,
    index=views.index(st.session_state.view) if st.session_state.view in views else 0,
)
st.session_state.view = nav
save_state()

st.title("DriveWise vehicle financing")
st.caption(f"Affordability • Matching • Depreciation • Ownership cost  ·  v{__version__}")

VIEWS[nav]()
