"""Placement of a user's habits into the 3x3 cell drawn for each calendar day.

Grid positions are 1-based, row-major::

    1 2 3
    4 5 6
    7 8 9

A lone habit sits in the centre. With two or more, the first habit takes the
top-left cell and the rest follow in row order. Only nine habits fit; the
rest are not drawn.
"""
from __future__ import annotations

import zlib
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from tracker.constants import CENTER_POSITION, GRID_SIZE, HABIT_COLORS, RESERVED_HABIT_COLOR
from tracker.dates import format_date_key


@dataclass(frozen=True)
class GridSlot:
    habit: Dict[str, Any]
    original_index: int

    @property
    def color(self) -> str:
        return habit_color(self.habit.get("id"), self.original_index)


def habit_created_key(habit) -> Optional[str]:
    return format_date_key(habit.get("create_date") or habit.get("created_at"))


def habits_for_date(habits, date_key) -> list:
    if not date_key or not habits:
        return []
    visible = []
    for habit in habits:
        created_key = habit_created_key(habit)
        # Habits saved before create_date existed are always shown.
        if created_key is None or created_key <= date_key:
            visible.append(habit)
    return visible


def grid_position(index: int, total: int) -> Optional[int]:
    if total <= 0:
        return None
    if total == 1:
        return CENTER_POSITION
    if 0 <= index < GRID_SIZE:
        return index + 1
    return None


def build_habit_grid(habits, date_key) -> List[Optional[GridSlot]]:
    grid: List[Optional[GridSlot]] = [None] * GRID_SIZE
    habits = list(habits or [])
    original_index = {id(habit): idx for idx, habit in enumerate(habits)}
    visible = habits_for_date(habits, date_key)
    for index, habit in enumerate(visible):
        position = grid_position(index, len(visible))
        if position is None:
            break
        grid[position - 1] = GridSlot(habit=habit, original_index=original_index[id(habit)])
    return grid


def grid_rows(grid) -> List[list]:
    return [grid[row * 3 : row * 3 + 3] for row in range(3)]


def _numeric_id(habit_id) -> int:
    try:
        return int(habit_id)
    except (TypeError, ValueError):
        return zlib.crc32(str(habit_id).encode("utf-8"))


def habit_color(habit_id, original_index=None) -> str:
    if original_index == 0:
        return RESERVED_HABIT_COLOR
    return HABIT_COLORS[_numeric_id(habit_id) % len(HABIT_COLORS)]


def legend(habits) -> list:
    return [(habit, habit_color(habit.get("id"), idx)) for idx, habit in enumerate(habits or [])]
