from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from tracker.dates import trailing_five_weeks, week_days, week_start


class ViewMode(str, Enum):
    WEEK = "week"
    MONTH = "month"


@dataclass
class ViewModeController:
    """Week/month toggle for the calendar.

    ``collapsing`` keeps the month layout on screen while it shrinks back to a
    single week; the UI calls ``finish_collapse`` once that is done.
    """

    mode: ViewMode = ViewMode.WEEK
    has_full_month_data: bool = False
    has_habits: bool = True
    collapsing: bool = False

    @property
    def effective_mode(self) -> ViewMode:
        if self.mode == ViewMode.MONTH and not (self.has_full_month_data and self.has_habits):
            return ViewMode.WEEK
        if self.mode == ViewMode.WEEK and self.collapsing:
            return ViewMode.MONTH
        return self.mode

    def show_month(self) -> ViewMode:
        self.mode = ViewMode.MONTH
        self.collapsing = False
        return self.effective_mode

    def show_week(self) -> ViewMode:
        month_on_screen = self.effective_mode == ViewMode.MONTH
        self.mode = ViewMode.WEEK
        self.collapsing = month_on_screen
        return self.effective_mode

    def toggle(self) -> ViewMode:
        if self.mode == ViewMode.WEEK:
            return self.show_month()
        return self.show_week()

    def finish_collapse(self) -> ViewMode:
        self.collapsing = False
        return self.effective_mode

    def set_month_data_ready(self, ready: bool) -> ViewMode:
        self.has_full_month_data = bool(ready)
        if not self.has_full_month_data:
            self.collapsing = False
        return self.effective_mode

    def set_has_habits(self, has_habits: bool) -> ViewMode:
        self.has_habits = bool(has_habits)
        return self.effective_mode

    def visible_weeks(self, today=None) -> list:
        if self.effective_mode == ViewMode.MONTH:
            return trailing_five_weeks(today)
        return [week_days(week_start(today))]

    def toggle_label(self) -> str:
        return "Show Month" if self.mode == ViewMode.WEEK else "Show Week"
