import unittest
from datetime import date
from unittest import mock

from tracker.constants import RESERVED_HABIT_COLOR
from tracker.data.cache import HABITS_KEY, TTLCache
from tracker.data.loaders import CalendarLoader, TodayTracker
from tracker.errors import NetworkError
from tracker.state.view_mode import ViewMode

TODAY = date(2024, 3, 13)


def _repository(habits=None, logs=None):
    repository = mock.Mock()
    repository.list_habits.return_value = habits if habits is not None else [
        {"id": "h1", "times_per_day": 1, "create_date": "2024-03-01"},
        {"id": "h2", "times_per_day": 2, "create_date": "2024-03-01"},
    ]
    repository.list_logs_for_range.return_value = logs if logs is not None else [
        {"id": "l1", "user_habit_id": "h1", "date": "2024-03-11"},
        {"id": "l2", "user_habit_id": "h2", "date": "2024-03-11"},
        {"id": "l3", "user_habit_id": "h1", "date": "2024-02-20"},
    ]
    return repository


class TestCalendarLoader(unittest.TestCase):
    def setUp(self) -> None:
        self.repository = _repository()
        self.cache = TTLCache()
        self.loader = CalendarLoader(self.repository, "u1", cache=self.cache, today_getter=lambda: TODAY)

    def test_mount_loads_full_window(self) -> None:
        self.loader.mount()
        self.repository.list_logs_for_range.assert_called_once_with("u1", date(2024, 2, 11), date(2024, 3, 16))
        self.assertFalse(self.loader.loading)
        self.assertTrue(self.loader.has_full_month_data)

    def test_cached_data_avoids_requests(self) -> None:
        self.loader.mount()
        other = CalendarLoader(self.repository, "u1", cache=self.cache, today_getter=lambda: TODAY)
        other.mount()
        self.assertEqual(self.repository.list_habits.call_count, 1)
        self.assertEqual(self.repository.list_logs_for_range.call_count, 1)
        self.assertEqual(len(other.habits), 2)

    def test_first_focus_is_skipped_then_refreshes(self) -> None:
        self.loader.mount()
        self.assertFalse(self.loader.on_focus())
        self.assertEqual(self.repository.list_habits.call_count, 1)
        self.assertTrue(self.loader.on_focus())
        self.assertEqual(self.repository.list_habits.call_count, 2)
        self.assertEqual(self.repository.list_logs_for_range.call_count, 2)

    def test_results_after_unmount_are_discarded(self) -> None:
        def list_habits(_user_id):
            self.loader.unmount()
            return [{"id": "late"}]

        self.repository.list_habits.side_effect = list_habits
        self.loader.mount()
        self.assertEqual(self.loader.habits, [])
        self.assertFalse(self.loader.loading)

    def test_failures_degrade_to_empty_calendar(self) -> None:
        self.repository.list_habits.side_effect = NetworkError("offline")
        self.loader.mount()
        self.assertEqual(self.loader.habits, [])
        self.assertFalse(self.loader.loading)
        self.assertFalse(self.loader.has_full_month_data)
        self.assertIsNone(self.cache.get(HABITS_KEY, default=None))

    def test_no_user_skips_fetch(self) -> None:
        loader = CalendarLoader(self.repository, None, cache=self.cache, today_getter=lambda: TODAY)
        loader.mount()
        self.repository.list_habits.assert_not_called()
        self.assertFalse(loader.loading)

    def test_no_habits_blocks_month_view(self) -> None:
        self.repository.list_habits.return_value = []
        self.loader.mount()
        self.assertEqual(self.loader.toggle_view(), ViewMode.WEEK)

    def test_week_view_shows_current_week_logs_only(self) -> None:
        self.loader.mount()
        self.assertEqual([log["id"] for log in self.loader.visible_logs()], ["l1", "l2"])
        self.assertEqual(self.loader.toggle_view(), ViewMode.MONTH)
        self.assertEqual(len(self.loader.visible_logs()), 3)

    def test_day_cell(self) -> None:
        self.loader.mount()
        cells = self.loader.day_cell(date(2024, 3, 11))
        self.assertEqual(len(cells), 9)
        self.assertEqual(cells[0]["habit"]["id"], "h1")
        self.assertEqual(cells[0]["color"], RESERVED_HABIT_COLOR)
        self.assertTrue(cells[0]["complete"])
        self.assertFalse(cells[1]["complete"])
        self.assertTrue(all(cell is None for cell in cells[2:]))


class TestTodayTracker(unittest.TestCase):
    def setUp(self) -> None:
        self.repository = mock.Mock()
        self.habit = {"id": "h1", "times_per_day": 3}
        self.repository.list_habits.return_value = [self.habit]
        self.logs = [
            {"id": "l1", "user_habit_id": "h1", "time_completed": "2024-03-13T08:00:00+00:00"},
            {"id": "l2", "user_habit_id": "h1", "time_completed": "2024-03-13T12:00:00+00:00"},
        ]
        self.repository.list_today_logs.side_effect = lambda habit_id, day: list(self.logs)
        self.cache = TTLCache()
        self.tracker = TodayTracker(self.repository, "u1", cache=self.cache, today_getter=lambda: TODAY)

    def test_load_orders_newest_first(self) -> None:
        self.tracker.load()
        self.assertEqual([log["id"] for log in self.tracker.logs_for(self.habit)], ["l2", "l1"])
        self.assertEqual(self.tracker.progress(self.habit), (2, 3))
        self.repository.list_today_logs.assert_called_with("h1", "2024-03-13")

    def test_log_once_completes_and_invalidates(self) -> None:
        self.cache.put(HABITS_KEY, [self.habit])
        self.tracker.load()

        def create_log(habit_id, day, notes=None):
            self.logs.append({"id": "l3", "user_habit_id": habit_id, "time_completed": "2024-03-13T18:00:00+00:00"})

        self.repository.create_log.side_effect = create_log
        self.tracker.log_once(self.habit)
        self.assertTrue(self.tracker.is_complete(self.habit))
        self.assertEqual(len(self.cache), 0)

    def test_undo_deletes_newest(self) -> None:
        self.tracker.load()
        self.tracker.undo_last(self.habit)
        self.repository.delete_log.assert_called_once_with("l2")

    def test_undo_with_no_logs(self) -> None:
        self.logs.clear()
        self.tracker.load()
        self.assertEqual(self.tracker.undo_last(self.habit), [])
        self.repository.delete_log.assert_not_called()

    def test_first_focus_after_mount_does_not_reload(self) -> None:
        self.tracker.load()
        self.assertFalse(self.tracker.on_focus())
        self.assertEqual(self.repository.list_habits.call_count, 1)

        self.assertTrue(self.tracker.on_focus())
        self.assertEqual(self.repository.list_habits.call_count, 2)


if __name__ == "__main__":
    unittest.main(verbosity=2)
