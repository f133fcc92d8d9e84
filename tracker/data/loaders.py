from __future__ import annotations

import logging
from datetime import date

from tracker.completion import is_complete, logs_on_date, progress
from tracker.data.cache import HABITS_KEY, MISS, TTLCache, logs_range_key
from tracker.dates import format_date_key, trailing_window
from tracker.errors import ApiError
from tracker.grid import build_habit_grid
from tracker.state.view_mode import ViewModeController

logger = logging.getLogger(__name__)


class CalendarLoader:
    """Data behind the calendar screen.

    Always loads the full five-week log window so the week/month toggle never
    needs a round-trip. Returning to the screen after the first mount forces a
    refresh, since habits or logs may have changed on another screen.
    """

    def __init__(self, repository, user_id, cache: TTLCache | None = None, today_getter=date.today):
        self.repository = repository
        self.user_id = user_id
        self.cache = cache if cache is not None else TTLCache()
        self.today_getter = today_getter
        self.view = ViewModeController()
        self.habits: list = []
        self.logs: list = []
        self.loading = True
        self.mounted = False
        self._initial_mount = True

    @property
    def has_full_month_data(self) -> bool:
        return self.view.has_full_month_data

    def mount(self):
        self.mounted = True
        self.fetch(force_refresh=False)

    def unmount(self):
        self.mounted = False

    def on_focus(self):
        if self._initial_mount:
            self._initial_mount = False
            return False
        self.fetch(force_refresh=True)
        return True

    def fetch(self, force_refresh: bool = False):
        if not self.user_id:
            logger.debug("No user id; skipping calendar fetch")
            self.loading = False
            return
        start, end = trailing_window(self.today_getter())
        logs_key = logs_range_key(start, end)
        if force_refresh:
            self.cache.invalidate(HABITS_KEY)
            self.cache.invalidate(logs_key)
        try:
            habits = self.cache.get(HABITS_KEY)
            if habits is MISS:
                if not self.habits:
                    self.loading = True
                habits = self.repository.list_habits(self.user_id) or []
                self.cache.put(HABITS_KEY, habits)
            if not self.mounted:
                return
            self.habits = habits
            self.view.set_has_habits(bool(habits))

            logs = self.cache.get(logs_key)
            if logs is MISS:
                logs = self.repository.list_logs_for_range(self.user_id, start, end) or []
                self.cache.put(logs_key, logs)
            if not self.mounted:
                return
            self.logs = logs
            self.view.set_month_data_ready(True)
        except ApiError as exc:
            # Calendar is optional; keep whatever was already on screen.
            logger.warning("Calendar fetch failed: %s", exc)
        finally:
            self.loading = False

    def toggle_view(self):
        return self.view.toggle()

    def visible_weeks(self):
        return self.view.visible_weeks(self.today_getter())

    def visible_logs(self):
        """Logs limited to the current week in week view, the whole window otherwise."""
        weeks = self.visible_weeks()
        first = weeks[0][0].isoformat()
        last = weeks[-1][-1].isoformat()
        return [log for log in self.logs if first <= (format_date_key(log.get("date")) or "") <= last]

    def day_cell(self, day):
        date_key = format_date_key(day)
        logs = self.visible_logs()
        cells = []
        for slot in build_habit_grid(self.habits, date_key):
            if slot is None:
                cells.append(None)
                continue
            cells.append(
                {
                    "habit": slot.habit,
                    "color": slot.color,
                    "complete": is_complete(slot.habit, logs_on_date(slot.habit, logs, date_key)),
                }
            )
        return cells


class TodayTracker:
    """Log +1 / undo for today's habits."""

    def __init__(self, repository, user_id, cache: TTLCache | None = None, today_getter=date.today):
        self.repository = repository
        self.user_id = user_id
        self.cache = cache
        self.today_getter = today_getter
        self.habits: list = []
        self.logs_by_habit: dict = {}
        self._initial_mount = True

    def on_focus(self):
        """Reload when the screen regains focus; the first focus follows the mount load."""
        if self._initial_mount:
            self._initial_mount = False
            return False
        self.load()
        return True

    def today_key(self):
        return format_date_key(self.today_getter())

    def load(self):
        try:
            self.habits = self.repository.list_habits(self.user_id) or []
        except ApiError as exc:
            logger.warning("Failed to load habits: %s", exc)
            return self.habits
        for habit in self.habits:
            self._reload_logs(habit)
        return self.habits

    def _reload_logs(self, habit):
        try:
            logs = self.repository.list_today_logs(habit["id"], self.today_key()) or []
        except ApiError as exc:
            logger.warning("Failed to load today's logs for habit %s: %s", habit.get("id"), exc)
            logs = self.logs_by_habit.get(habit["id"], [])
        # Newest first, matching the server ordering.
        logs = sorted(logs, key=lambda item: str(item.get("time_completed") or ""), reverse=True)
        self.logs_by_habit[habit["id"]] = logs
        return logs

    def _invalidate(self):
        if self.cache is not None:
            self.cache.invalidate_all()

    def logs_for(self, habit):
        return self.logs_by_habit.get(habit["id"], [])

    def progress(self, habit):
        return progress(habit, self.logs_for(habit))

    def is_complete(self, habit):
        return is_complete(habit, self.logs_for(habit))

    def log_once(self, habit, notes=None):
        self.repository.create_log(habit["id"], self.today_key(), notes=notes)
        self._invalidate()
        return self._reload_logs(habit)

    def undo_last(self, habit):
        logs = self.logs_for(habit)
        if not logs:
            return logs
        self.repository.delete_log(logs[0]["id"])
        self._invalidate()
        return self._reload_logs(habit)
