import unittest
from datetime import date
from unittest import mock

from tracker.data.repositories import (
    HabitRepository,
    category_label,
    normalize_habit,
    normalize_template,
    validate_new_habit,
)
from tracker.errors import ValidationError


class TestNormalization(unittest.TestCase):
    def test_template_with_capitalised_join(self) -> None:
        template = normalize_template(
            {"id": "t1", "name": "Read", "times_per_day": None, "Categories": {"id": "c1", "name": "Mind"}}
        )
        self.assertNotIn("Categories", template)
        self.assertEqual(template["category"], {"id": "c1", "name": "Mind", "user_id": None})
        self.assertEqual(template["category_id"], "c1")
        self.assertEqual(template["times_per_day"], 1)

    def test_template_with_lowercase_join(self) -> None:
        template = normalize_template({"id": "t1", "category_id": "c2", "category": {"id": "c2", "name": "Body"}})
        self.assertEqual(template["category"]["name"], "Body")

    def test_template_without_category(self) -> None:
        template = normalize_template({"id": "t1"})
        self.assertIsNone(template["category"])
        self.assertIsNone(template["category_id"])

    def test_habit_defaults(self) -> None:
        habit = normalize_habit({"id": "h1", "times_per_day": 0, "created_at": "2024-03-05T10:00:00Z"})
        self.assertEqual(habit["times_per_day"], 1)
        self.assertTrue(habit["is_active"])
        self.assertEqual(habit["create_date"], "2024-03-05")

    def test_category_label_falls_back(self) -> None:
        categories = [{"id": "c1", "name": "Health"}]
        self.assertEqual(category_label(categories, "c1"), "Health")
        self.assertEqual(category_label(categories, "missing"), "Uncategorized")
        self.assertEqual(category_label(categories, None), "Uncategorized")


class TestValidation(unittest.TestCase):
    def test_name_required(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            validate_new_habit("  ", "desc", "c1")
        self.assertEqual(ctx.exception.message, "Name is required")

    def test_description_required(self) -> None:
        with self.assertRaises(ValidationError):
            validate_new_habit("Run", "", "c1")

    def test_custom_habit_needs_category(self) -> None:
        with self.assertRaises(ValidationError) as ctx:
            validate_new_habit("Run", "Every morning")
        self.assertEqual(ctx.exception.message, "Category is required for custom habits")

    def test_template_habit_may_omit_category(self) -> None:
        validate_new_habit("Run", "Every morning", template_id="t1")


class TestHabitRepository(unittest.TestCase):
    def setUp(self) -> None:
        self.client = mock.Mock()
        self.repo = HabitRepository(self.client)

    def test_create_habit_posts_clean_payload(self) -> None:
        self.client.post.return_value = {"id": "h1", "name": "Run", "times_per_day": 2, "create_date": "2024-03-07"}
        habit = self.repo.create_habit("u1", "  Run ", "Every  morning", category_id="c1", times_per_day=2)
        self.client.post.assert_called_once_with(
            "/api/users/u1/habits",
            json={
                "template_id": None,
                "name": "Run",
                "description": "Every morning",
                "category_id": "c1",
                "times_per_day": 2,
            },
        )
        self.assertEqual(habit["times_per_day"], 2)

    def test_invalid_habit_is_not_sent(self) -> None:
        with self.assertRaises(ValidationError):
            self.repo.create_habit("u1", "", "desc", category_id="c1")
        self.client.post.assert_not_called()

    def test_range_query_uses_date_keys(self) -> None:
        self.client.get.return_value = [{"id": "l1", "date": "2024-03-07T00:00:00Z"}]
        logs = self.repo.list_logs_for_range("u1", date(2024, 2, 11), date(2024, 3, 16))
        self.client.get.assert_called_once_with(
            "/api/users/u1/logs/range",
            params={"start_date": "2024-02-11", "end_date": "2024-03-16"},
        )
        self.assertEqual(logs[0]["date"], "2024-03-07")

    def test_create_log_payload(self) -> None:
        self.client.post.return_value = {"id": "l1", "date": "2024-03-07"}
        self.repo.create_log("h1", "2024-03-07", notes="ok", time_completed="2024-03-07T08:00:00+00:00")
        self.client.post.assert_called_once_with(
            "/api/user-habits/h1/logs",
            json={"date": "2024-03-07", "time_completed": "2024-03-07T08:00:00+00:00", "notes": "ok"},
        )

    def test_today_logs_pass_date_param(self) -> None:
        self.client.get.return_value = None
        self.assertEqual(self.repo.list_today_logs("h1", "2024-03-07"), [])
        self.client.get.assert_called_once_with("/api/user-habits/h1/logs/today", params={"date": "2024-03-07"})

    def test_create_category_requires_name(self) -> None:
        with self.assertRaises(ValidationError):
            self.repo.create_category("   ", "u1")


if __name__ == "__main__":
    unittest.main(verbosity=2)
