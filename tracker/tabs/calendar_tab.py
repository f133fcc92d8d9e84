import html
from datetime import date

import streamlit as st

from tracker.constants import DAY_ABBREVIATIONS
from tracker.data.loaders import CalendarLoader
from tracker.grid import grid_rows, legend
from tracker.state import session_slices


def _get_loader(ctx):
    def factory():
        loader = CalendarLoader(ctx["repository"], ctx["user_id"], cache=ctx["cache"])
        loader.mount()
        return loader

    return session_slices.get_resource("user.calendar_loader", factory)


def _cell_markup(cell):
    if cell is None:
        return "<span class='habit-dot empty'></span>"
    color = cell["color"]
    fill = color if cell["complete"] else "transparent"
    title = html.escape(cell["habit"].get("name") or "")
    return (
        f"<span class='habit-dot' title='{title}' "
        f"style='border:2px solid {color};background:{fill};'></span>"
    )


def _day_markup(loader, day, today):
    cells = loader.day_cell(day)
    rows = []
    for row in grid_rows(cells):
        rows.append("<div class='habit-row'>" + "".join(_cell_markup(cell) for cell in row) + "</div>")
    css_class = "calendar-day today" if day == today else "calendar-day"
    return (
        f"<div class='{css_class}'>"
        f"<div class='day-number'>{day.day}</div>"
        f"<div class='habit-grid'>{''.join(rows)}</div>"
        "</div>"
    )


def _render_legend(habits):
    items = []
    for habit, color in legend(habits):
        name = html.escape(habit.get("name") or "")
        items.append(f"<span class='legend-item'><span class='legend-dot' style='background:{color};'></span>{name}</span>")
    st.markdown("<div class='legend'>" + "".join(items) + "</div>", unsafe_allow_html=True)


def render_calendar_tab(ctx):
    loader = _get_loader(ctx)
    if session_slices.get_slice("focus").pop("Calendar", False):
        loader.on_focus()

    st.markdown("<div class='section-title'>Progress</div>", unsafe_allow_html=True)
    if loader.loading:
        st.caption("Loading calendar…")
        return
    if not loader.habits:
        st.info("No habits yet. Create one from the New Habit screen.")
        return

    head_cols = st.columns([4, 1])
    with head_cols[1]:
        if st.button(loader.view.toggle_label(), key="calendar.toggle_view", use_container_width=True):
            loader.toggle_view()
            # Streamlit has no shrink animation to wait on.
            loader.view.finish_collapse()
            st.rerun(scope="fragment")

    today = date.today()
    header = "".join(f"<div class='calendar-head'>{label}</div>" for label in DAY_ABBREVIATIONS)
    weeks_markup = []
    for week in loader.visible_weeks():
        weeks_markup.append(
            "<div class='calendar-week'>" + "".join(_day_markup(loader, day, today) for day in week) + "</div>"
        )
    st.markdown(
        f"<div class='calendar'><div class='calendar-week'>{header}</div>{''.join(weeks_markup)}</div>",
        unsafe_allow_html=True,
    )
    _render_legend(loader.habits)

    if st.button("Refresh", key="calendar.refresh", type="tertiary"):
        loader.fetch(force_refresh=True)
        st.rerun(scope="fragment")
