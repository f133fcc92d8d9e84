from __future__ import annotations

from tracker.constants import DEFAULT_TIMES_PER_DAY
from tracker.dates import format_date_key


def daily_target(habit) -> int:
    try:
        target = int(habit.get("times_per_day") or DEFAULT_TIMES_PER_DAY)
    except (TypeError, ValueError):
        target = DEFAULT_TIMES_PER_DAY
    return max(1, target)


def log_date_key(log):
    return format_date_key(log.get("date"))


def logs_on_date(habit, logs, date_key) -> list:
    if not date_key:
        return []
    habit_id = str(habit.get("id"))
    return [
        log
        for log in (logs or [])
        if str(log.get("user_habit_id")) == habit_id and log_date_key(log) == date_key
    ]


def progress(habit, logs_for_date) -> tuple[int, int]:
    return len(logs_for_date or []), daily_target(habit)


def is_complete(habit, logs_for_date) -> bool:
    count, target = progress(habit, logs_for_date)
    return count >= target


def progress_label(habit, logs_for_date) -> str:
    count, target = progress(habit, logs_for_date)
    return f"{count}/{target}"


def completion_by_date(habits, logs, date_keys) -> dict:
    by_date = {}
    for date_key in date_keys:
        by_date[date_key] = {
            habit.get("id"): is_complete(habit, logs_on_date(habit, logs, date_key))
            for habit in (habits or [])
        }
    return by_date
