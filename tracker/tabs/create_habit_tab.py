import streamlit as st

from tracker.constants import MAX_TIMES_PER_DAY, UNCATEGORIZED_LABEL
from tracker.data.repositories import category_label
from tracker.dates import today_key
from tracker.errors import ApiError


NEW_CATEGORY_OPTION = "+ New category"


def _safe_list(loader, fallback_message):
    try:
        return loader()
    except ApiError as exc:
        st.warning(f"{fallback_message}: {exc.message}")
        return []


def _habit_created(ctx, habit):
    ctx["cache"].invalidate_all()
    st.success(f"Habit '{habit.get('name')}' created.")


def _render_from_template(ctx, repository):
    templates = _safe_list(repository.list_templates, "Failed to load templates")
    if not templates:
        st.caption("No templates available.")
        return
    for template in templates:
        category = template.get("category") or {}
        with st.container(border=True):
            st.markdown(f"**{template.get('name')}**")
            st.caption(f"{category.get('name') or UNCATEGORIZED_LABEL} • {template.get('times_per_day')}x per day")
            if template.get("description"):
                st.write(template["description"])
            if st.button("Add", key=f"create.template.{template['id']}"):
                try:
                    habit = repository.create_habit(
                        ctx["user_id"],
                        template.get("name"),
                        template.get("description") or template.get("name"),
                        category_id=template.get("category_id"),
                        template_id=template["id"],
                        times_per_day=template.get("times_per_day"),
                    )
                except ApiError as exc:
                    st.error(exc.message)
                else:
                    _habit_created(ctx, habit)


def _resolve_category(repository, user_id, choice, categories, new_name):
    if choice == NEW_CATEGORY_OPTION:
        category = repository.create_category(new_name, user_id)
        return category.get("id") if category else None
    for category in categories:
        if category.get("name") == choice:
            return category.get("id")
    return None


def _render_custom(ctx, repository):
    categories = _safe_list(repository.list_categories, "Failed to load categories")
    options = [category.get("name") for category in categories] + [NEW_CATEGORY_OPTION]
    with st.form("create.custom_form", clear_on_submit=True):
        name = st.text_input("Name")
        description = st.text_area("Description")
        choice = st.selectbox("Category", options)
        new_category = st.text_input("New category name", help="Used when '+ New category' is selected")
        times = st.number_input("Times per day", min_value=1, max_value=MAX_TIMES_PER_DAY, value=1, step=1)
        submitted = st.form_submit_button("Create habit", use_container_width=True)
    if not submitted:
        return
    try:
        category_id = _resolve_category(repository, ctx["user_id"], choice, categories, new_category)
        habit = repository.create_habit(
            ctx["user_id"],
            name,
            description,
            category_id=category_id,
            times_per_day=int(times),
        )
    except ApiError as exc:
        st.error(exc.message)
        return
    _habit_created(ctx, habit)


def _render_edit(ctx, repository):
    habits = _safe_list(lambda: repository.list_habits(ctx["user_id"]), "Failed to load habits")
    if not habits:
        return
    categories = _safe_list(repository.list_categories, "Failed to load categories")
    by_label = {f"{habit['name']} ({habit['id']})": habit for habit in habits}
    selected = st.selectbox("Habit", list(by_label.keys()), key="edit.habit")
    habit = by_label[selected]
    names = [category.get("name") for category in categories]
    current = category_label(categories, habit.get("category_id"))
    with st.form(f"edit.form.{habit['id']}"):
        name = st.text_input("Name", value=habit.get("name") or "")
        description = st.text_area("Description", value=habit.get("description") or "")
        choice = st.selectbox("Category", names, index=names.index(current) if current in names else 0) if names else None
        times = st.number_input("Times per day", min_value=1, max_value=MAX_TIMES_PER_DAY, value=habit["times_per_day"], step=1)
        submitted = st.form_submit_button("Save changes")
    if submitted:
        if not description.strip():
            st.error("Description is required")
            return
        category_id = _resolve_category(repository, ctx["user_id"], choice, categories, "") if choice else None
        try:
            repository.update_habit(
                habit["id"],
                {"name": name, "description": description, "category_id": category_id, "times_per_day": int(times)},
            )
        except ApiError as exc:
            st.error(exc.message)
            return
        ctx["cache"].invalidate_all()
        st.success("Habit updated.")

    st.markdown("<div class='small-label'>Today's log entries</div>", unsafe_allow_html=True)
    logs = _safe_list(lambda: repository.list_today_logs(habit["id"], today_key()), "Failed to load logs")
    for log in logs:
        cols = st.columns([5, 1])
        with cols[0]:
            st.caption(f"{log.get('time_completed') or log.get('date')} {log.get('notes') or ''}")
        with cols[1]:
            if st.button("Remove", key=f"edit.remove_log.{log['id']}", type="tertiary"):
                try:
                    repository.delete_log(log["id"])
                except ApiError as exc:
                    st.error(exc.message)
                else:
                    ctx["cache"].invalidate_all()
                    st.rerun(scope="fragment")


def render_create_habit_tab(ctx):
    repository = ctx["repository"]
    st.markdown("<div class='section-title'>New Habit</div>", unsafe_allow_html=True)
    mode = st.radio("Start from", ["Template", "Custom"], horizontal=True, key="create.mode")
    if mode == "Template":
        _render_from_template(ctx, repository)
    else:
        _render_custom(ctx, repository)

    with st.expander("Edit an existing habit"):
        _render_edit(ctx, repository)
