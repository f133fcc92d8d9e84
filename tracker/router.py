import streamlit as st

from tracker.tabs.account_tab import render_account_tab
from tracker.tabs.calendar_tab import render_calendar_tab
from tracker.tabs.create_habit_tab import render_create_habit_tab
from tracker.tabs.track_tab import render_track_tab
from tracker.state import session_slices


TAB_OPTIONS = [
    "Calendar",
    "Track Today",
    "New Habit",
    "Account",
]


def _focus_changed(active):
    previous = session_slices.get_value("ui", "last_tab")
    session_slices.set_value("ui", "last_tab", active)
    return previous != active


def render_router(ctx):
    active = st.session_state.get("ui.active_tab", TAB_OPTIONS[0])
    active = st.segmented_control(
        "Screens",
        TAB_OPTIONS,
        key="ui.active_tab",
        default=active,
    ) or TAB_OPTIONS[0]
    if _focus_changed(active):
        session_slices.set_value("focus", active, True)

    if active == "Calendar":
        return _render_calendar(ctx)

    if active == "Track Today":
        return _render_track(ctx)

    if active == "New Habit":
        return _render_create(ctx)

    return _render_account(ctx)


@st.fragment
def _render_calendar(ctx):
    render_calendar_tab(ctx)


@st.fragment
def _render_track(ctx):
    render_track_tab(ctx)


@st.fragment
def _render_create(ctx):
    render_create_habit_tab(ctx)


@st.fragment
def _render_account(ctx):
    render_account_tab(ctx)
