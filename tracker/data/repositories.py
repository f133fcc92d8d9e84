from __future__ import annotations

from datetime import datetime, timezone

from tracker.constants import DEFAULT_TIMES_PER_DAY, UNCATEGORIZED_LABEL
from tracker.dates import format_date_key
from tracker.errors import ValidationError


def _clean_text(value):
    return " ".join(str(value or "").split()).strip()


def _times_per_day(value):
    try:
        times = int(value or DEFAULT_TIMES_PER_DAY)
    except (TypeError, ValueError):
        times = DEFAULT_TIMES_PER_DAY
    return max(1, times)


def normalize_category(raw):
    if not isinstance(raw, dict):
        return None
    return {"id": raw.get("id"), "name": raw.get("name") or UNCATEGORIZED_LABEL, "user_id": raw.get("user_id")}


def normalize_template(raw: dict) -> dict:
    """Map either join shape (``Categories`` or ``category``) onto ``category``."""
    payload = dict(raw or {})
    joined = payload.pop("Categories", None)
    if joined is None:
        joined = payload.get("category")
    category = normalize_category(joined)
    payload["category"] = category
    payload["category_id"] = payload.get("category_id") or (category or {}).get("id")
    payload["times_per_day"] = _times_per_day(payload.get("times_per_day"))
    return payload


def normalize_habit(raw: dict) -> dict:
    payload = dict(raw or {})
    payload["times_per_day"] = _times_per_day(payload.get("times_per_day"))
    payload["is_active"] = bool(payload.get("is_active", True))
    created = payload.get("create_date") or payload.get("created_at")
    payload["create_date"] = format_date_key(created)
    return payload


def normalize_log(raw: dict) -> dict:
    payload = dict(raw or {})
    payload["date"] = format_date_key(payload.get("date"))
    return payload


def category_label(categories, category_id) -> str:
    if not category_id:
        return UNCATEGORIZED_LABEL
    for category in categories or []:
        if str(category.get("id")) == str(category_id):
            return category.get("name") or UNCATEGORIZED_LABEL
    return UNCATEGORIZED_LABEL


def validate_new_habit(name, description, category_id=None, template_id=None):
    if not _clean_text(name):
        raise ValidationError("Name is required")
    if not _clean_text(description):
        raise ValidationError("Description is required")
    if not template_id and not category_id:
        raise ValidationError("Category is required for custom habits")


class HabitRepository:
    """Typed wrappers over the REST resources; shapes are normalized on the way in."""

    def __init__(self, client):
        self.client = client

    # users
    def get_current_user(self):
        return self.client.get("/api/users/me")

    def get_user(self, user_id):
        return self.client.get(f"/api/users/{user_id}")

    def update_user(self, user_id, updates: dict):
        return self.client.patch(f"/api/users/{user_id}", json=updates)

    def delete_user(self, user_id):
        return self.client.delete(f"/api/users/{user_id}")

    # templates
    def list_templates(self):
        return [normalize_template(item) for item in (self.client.get("/api/habit-templates") or [])]

    def get_template(self, template_id):
        return normalize_template(self.client.get(f"/api/habit-templates/{template_id}"))

    # categories
    def list_categories(self):
        return [normalize_category(item) for item in (self.client.get("/api/categories/me") or [])]

    def create_category(self, name, user_id):
        clean = _clean_text(name)
        if not clean:
            raise ValidationError("Category name is required")
        return normalize_category(self.client.post("/api/categories", json={"name": clean, "user_id": user_id}))

    # habits
    def list_habits(self, user_id):
        return [normalize_habit(item) for item in (self.client.get(f"/api/users/{user_id}/habits") or [])]

    def create_habit(self, user_id, name, description, category_id=None, template_id=None, times_per_day=DEFAULT_TIMES_PER_DAY):
        validate_new_habit(name, description, category_id, template_id)
        payload = {
            "template_id": template_id,
            "name": _clean_text(name),
            "description": _clean_text(description),
            "category_id": category_id,
            "times_per_day": _times_per_day(times_per_day),
        }
        return normalize_habit(self.client.post(f"/api/users/{user_id}/habits", json=payload))

    def update_habit(self, habit_id, updates: dict):
        clean = dict(updates or {})
        if "name" in clean and not _clean_text(clean["name"]):
            raise ValidationError("Name is required")
        if "times_per_day" in clean:
            clean["times_per_day"] = _times_per_day(clean["times_per_day"])
        return normalize_habit(self.client.patch(f"/api/user-habits/{habit_id}", json=clean))

    def archive_habit(self, habit_id):
        return normalize_habit(self.client.patch(f"/api/user-habits/{habit_id}/archive"))

    def delete_habit(self, habit_id):
        return self.client.delete(f"/api/user-habits/{habit_id}")

    # logs
    def list_habit_logs(self, habit_id):
        return [normalize_log(item) for item in (self.client.get(f"/api/user-habits/{habit_id}/logs") or [])]

    def list_today_logs(self, habit_id, day=None):
        params = {"date": format_date_key(day)} if day else None
        items = self.client.get(f"/api/user-habits/{habit_id}/logs/today", params=params) or []
        return [normalize_log(item) for item in items]

    def create_log(self, habit_id, day, notes=None, time_completed=None):
        completed = time_completed or datetime.now(timezone.utc).isoformat()
        payload = {"date": format_date_key(day), "time_completed": completed, "notes": notes}
        return normalize_log(self.client.post(f"/api/user-habits/{habit_id}/logs", json=payload))

    def update_log(self, log_id, updates: dict):
        return normalize_log(self.client.patch(f"/api/habit-logs/{log_id}", json=updates))

    def delete_log(self, log_id):
        return self.client.delete(f"/api/habit-logs/{log_id}")

    def list_logs_for_range(self, user_id, start, end):
        params = {"start_date": format_date_key(start), "end_date": format_date_key(end)}
        items = self.client.get(f"/api/users/{user_id}/logs/range", params=params) or []
        return [normalize_log(item) for item in items]
