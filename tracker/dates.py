from __future__ import annotations

from datetime import date, datetime, timedelta

from tracker.constants import TRAILING_WEEKS


def _as_local_date(value) -> date:
    if value is None:
        return date.today()
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    return value


def week_start(day=None) -> date:
    """Sunday on or before ``day`` (local time)."""
    current = _as_local_date(day)
    # date.weekday(): Monday=0 .. Sunday=6
    return current - timedelta(days=(current.weekday() + 1) % 7)


def week_days(start: date) -> list[date]:
    return [start + timedelta(days=offset) for offset in range(7)]


def trailing_five_weeks(today=None) -> list[list[date]]:
    current_start = week_start(today)
    weeks = []
    for weeks_back in range(TRAILING_WEEKS - 1, -1, -1):
        weeks.append(week_days(current_start - timedelta(days=7 * weeks_back)))
    return weeks


def trailing_window(today=None) -> tuple[date, date]:
    current_start = week_start(today)
    first = current_start - timedelta(days=7 * (TRAILING_WEEKS - 1))
    last = current_start + timedelta(days=6)
    return first, last


def format_date_key(value) -> str | None:
    """Canonical ``YYYY-MM-DD`` key for a date, datetime or date/timestamp string.

    Strings are cut at the date portion without timezone conversion, which is
    how the API returns both ``date`` columns and ISO timestamps.
    """
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return _as_local_date(value).isoformat()
    raw = str(value).strip()
    if not raw:
        return None
    day_part = raw.split("T", 1)[0].split(" ", 1)[0]
    try:
        return date.fromisoformat(day_part).isoformat()
    except ValueError:
        return None


def parse_date_key(key) -> date | None:
    normalized = format_date_key(key)
    if normalized is None:
        return None
    return date.fromisoformat(normalized)


def today_key() -> str:
    return date.today().isoformat()
