import streamlit as st

from tracker.data.loaders import TodayTracker
from tracker.data.repositories import category_label
from tracker.errors import ApiError
from tracker.state import session_slices


def _get_tracker(ctx):
    def factory():
        tracker = TodayTracker(ctx["repository"], ctx["user_id"], cache=ctx["cache"])
        tracker.load()
        return tracker

    return session_slices.get_resource("user.today_tracker", factory)


def _load_categories(repository):
    try:
        return repository.list_categories()
    except ApiError:
        # Labels fall back to "Uncategorized".
        return []


def _archive(ctx, tracker, habit):
    try:
        ctx["repository"].archive_habit(habit["id"])
    except ApiError as exc:
        st.error(exc.message)
        return False
    ctx["cache"].invalidate_all()
    tracker.load()
    return True


def _run_action(action, habit, failure_message):
    try:
        action(habit)
    except ApiError as exc:
        st.error(exc.message or failure_message)
        return False
    return True


def render_track_tab(ctx):
    tracker = _get_tracker(ctx)
    if session_slices.get_slice("focus").pop("Track Today", False):
        tracker.on_focus()

    st.markdown("<div class='section-title'>Today</div>", unsafe_allow_html=True)
    if not tracker.habits:
        st.info("No active habits.")
        return

    categories = _load_categories(ctx["repository"])
    for habit in tracker.habits:
        count, target = tracker.progress(habit)
        done = tracker.is_complete(habit)
        row = st.columns([5, 1.2, 1.2, 1.2])
        with row[0]:
            label = f"~~{habit['name']}~~" if done else f"**{habit['name']}**"
            st.markdown(label)
            st.caption(f"{category_label(categories, habit.get('category_id'))} • {count} / {target} completed today")
            if target > 1 and not done:
                st.progress(min(count / target, 1.0))
        with row[1]:
            log_label = "Log +1" if target > 1 else "Log"
            if st.button(log_label, key=f"track.log.{habit['id']}", disabled=done):
                if _run_action(tracker.log_once, habit, "Failed to log habit"):
                    st.rerun(scope="fragment")
        with row[2]:
            if st.button("Undo", key=f"track.undo.{habit['id']}", disabled=count == 0):
                if _run_action(tracker.undo_last, habit, "Failed to undo log"):
                    st.rerun(scope="fragment")
        with row[3]:
            if st.button("Archive", key=f"track.archive.{habit['id']}", type="tertiary"):
                if _archive(ctx, tracker, habit):
                    st.rerun(scope="fragment")
