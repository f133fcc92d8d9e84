import logging

import streamlit as st

from tracker import auth, config
from tracker.logging_config import configure_logging
from tracker.router import render_router


configure_logging()
config.configure(auth.get_secret)
logging.getLogger("tracker.app").debug("API base URL: %s", config.api_base_url())

st.set_page_config(page_title="Happy Habits", layout="centered")

st.markdown(
    """
    <style>
    .section-title { font-size: 22px; font-weight: 700; margin: 8px 0 12px; }
    .small-label { font-size: 12px; text-transform: uppercase; opacity: 0.7; margin: 8px 0 4px; }
    .calendar { display: flex; flex-direction: column; gap: 6px; }
    .calendar-week { display: grid; grid-template-columns: repeat(7, 1fr); gap: 6px; }
    .calendar-head { text-align: center; font-size: 12px; opacity: 0.7; }
    .calendar-day { border: 1px solid rgba(128,128,128,0.3); border-radius: 8px; padding: 4px; }
    .calendar-day.today { border-color: #2196F3; }
    .day-number { font-size: 11px; opacity: 0.8; }
    .habit-grid { display: flex; flex-direction: column; gap: 2px; align-items: center; }
    .habit-row { display: flex; gap: 2px; }
    .habit-dot { width: 10px; height: 10px; border-radius: 50%; display: inline-block; }
    .habit-dot.empty { border: none; }
    .legend { display: flex; flex-wrap: wrap; gap: 10px; margin-top: 10px; font-size: 13px; }
    .legend-dot { width: 10px; height: 10px; border-radius: 50%; display: inline-block; margin-right: 4px; }
    </style>
    """,
    unsafe_allow_html=True,
)

session_manager = auth.enforce_login()
profile = auth.current_profile()
if not profile or not profile.get("id"):
    st.error("User profile not found. Please contact support or try logging out and back in.")
    if st.button("Log out", key="logout_missing_profile"):
        auth.logout()
        st.rerun()
    st.stop()

ctx = {
    "session_manager": session_manager,
    "repository": auth.get_repository(),
    "cache": auth.get_cache(),
    "profile": profile,
    "user_id": profile["id"],
}

render_router(ctx)
