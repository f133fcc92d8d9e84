import unittest

from tracker.constants import HABIT_COLORS, RESERVED_HABIT_COLOR
from tracker.grid import (
    build_habit_grid,
    grid_position,
    grid_rows,
    habit_color,
    habits_for_date,
    legend,
)


def _habit(habit_id, created="2024-01-01", **extra):
    payload = {"id": habit_id, "name": f"Habit {habit_id}", "create_date": created, "times_per_day": 1}
    payload.update(extra)
    return payload


class TestGridPosition(unittest.TestCase):
    def test_no_habits(self) -> None:
        self.assertIsNone(grid_position(0, 0))

    def test_single_habit_is_centred(self) -> None:
        self.assertEqual(grid_position(0, 1), 5)

    def test_multiple_habits_fill_row_major(self) -> None:
        self.assertEqual([grid_position(i, 9) for i in range(9)], list(range(1, 10)))

    def test_overflow_is_dropped(self) -> None:
        self.assertIsNone(grid_position(9, 15))


class TestBuildHabitGrid(unittest.TestCase):
    def _occupied(self, grid):
        return [index + 1 for index, slot in enumerate(grid) if slot is not None]

    def test_slot_counts(self) -> None:
        expected = {0: [], 1: [5], 2: [1, 2], 9: list(range(1, 10)), 15: list(range(1, 10))}
        for count, positions in expected.items():
            habits = [_habit(i + 1) for i in range(count)]
            grid = build_habit_grid(habits, "2024-02-01")
            self.assertEqual(len(grid), 9)
            self.assertEqual(self._occupied(grid), positions, count)

    def test_habit_hidden_before_creation_date(self) -> None:
        habits = [_habit(1, "2024-03-01"), _habit(2, "2024-03-05")]
        self.assertEqual([h["id"] for h in habits_for_date(habits, "2024-03-04")], [1])
        self.assertEqual([h["id"] for h in habits_for_date(habits, "2024-03-05")], [1, 2])
        self.assertEqual(habits_for_date(habits, "2024-02-28"), [])

    def test_missing_creation_date_is_always_shown(self) -> None:
        habits = [{"id": 1, "name": "Legacy"}]
        self.assertEqual(len(habits_for_date(habits, "2000-01-01")), 1)

    def test_created_at_timestamp_is_accepted(self) -> None:
        habits = [{"id": 1, "created_at": "2024-03-05T22:00:00Z"}]
        self.assertEqual(habits_for_date(habits, "2024-03-04"), [])
        self.assertEqual(len(habits_for_date(habits, "2024-03-05")), 1)

    def test_three_habits_day_seven(self) -> None:
        habits = [_habit(1, "2024-03-01"), _habit(2, "2024-03-05"), _habit(3, "2024-03-10")]
        grid = build_habit_grid(habits, "2024-03-07")
        self.assertEqual(self._occupied(grid), [1, 2])
        self.assertEqual(grid[0].habit["id"], 1)
        self.assertEqual(grid[1].habit["id"], 2)
        self.assertEqual(grid[0].color, RESERVED_HABIT_COLOR)
        self.assertNotEqual(grid[1].color, RESERVED_HABIT_COLOR)

    def test_lone_visible_habit_keeps_its_original_colour(self) -> None:
        habits = [_habit(1, "2024-03-10"), _habit(4, "2024-03-01")]
        grid = build_habit_grid(habits, "2024-03-05")
        self.assertEqual(self._occupied(grid), [5])
        self.assertEqual(grid[4].original_index, 1)
        self.assertEqual(grid[4].color, habit_color(4, 1))

    def test_grid_rows(self) -> None:
        rows = grid_rows(list(range(9)))
        self.assertEqual(rows, [[0, 1, 2], [3, 4, 5], [6, 7, 8]])


class TestHabitColor(unittest.TestCase):
    def test_first_habit_gets_reserved_colour(self) -> None:
        self.assertEqual(habit_color(42, 0), RESERVED_HABIT_COLOR)

    def test_numeric_ids_index_the_palette(self) -> None:
        self.assertEqual(habit_color(3, 2), HABIT_COLORS[3 % len(HABIT_COLORS)])

    def test_string_ids_are_stable(self) -> None:
        first = habit_color("a1b2c3", 1)
        self.assertIn(first, HABIT_COLORS)
        self.assertEqual(first, habit_color("a1b2c3", 5))

    def test_legend_follows_list_order(self) -> None:
        habits = [_habit(7), _habit(8)]
        entries = legend(habits)
        self.assertEqual([habit["id"] for habit, _ in entries], [7, 8])
        self.assertEqual(entries[0][1], RESERVED_HABIT_COLOR)


if __name__ == "__main__":
    unittest.main(verbosity=2)
