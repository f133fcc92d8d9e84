import unittest
from datetime import date

from tracker.data.cache import HABITS_KEY, MISS, TTLCache, logs_range_key


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestTTLCache(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = FakeClock()
        self.cache = TTLCache(ttl_seconds=300, clock=self.clock)

    def test_miss_before_put(self) -> None:
        self.assertIs(self.cache.get(HABITS_KEY), MISS)
        self.assertFalse(MISS)
        self.assertEqual(self.cache.get(HABITS_KEY, default=[]), [])

    def test_fresh_entry_is_returned(self) -> None:
        self.cache.put(HABITS_KEY, [{"id": 1}])
        self.clock.now += 299
        self.assertEqual(self.cache.get(HABITS_KEY), [{"id": 1}])
        self.assertIn(HABITS_KEY, self.cache)

    def test_entry_expires_at_ttl(self) -> None:
        self.cache.put(HABITS_KEY, [])
        self.clock.now += 300
        self.assertIs(self.cache.get(HABITS_KEY), MISS)
        self.assertEqual(len(self.cache), 0)

    def test_falsy_values_are_cached(self) -> None:
        self.cache.put(HABITS_KEY, [])
        self.assertEqual(self.cache.get(HABITS_KEY), [])
        self.assertIsNot(self.cache.get(HABITS_KEY), MISS)

    def test_invalidate_single_key(self) -> None:
        self.cache.put("a", 1)
        self.cache.put("b", 2)
        self.cache.invalidate("a")
        self.cache.invalidate("missing")
        self.assertIs(self.cache.get("a"), MISS)
        self.assertEqual(self.cache.get("b"), 2)

    def test_invalidate_all(self) -> None:
        self.cache.put("a", 1)
        self.cache.put("b", 2)
        self.cache.invalidate_all()
        self.assertEqual(len(self.cache), 0)

    def test_put_restarts_the_clock(self) -> None:
        self.cache.put("a", 1)
        self.clock.now += 200
        self.cache.put("a", 2)
        self.clock.now += 200
        self.assertEqual(self.cache.get("a"), 2)

    def test_logs_range_key(self) -> None:
        self.assertEqual(logs_range_key(date(2024, 2, 11), date(2024, 3, 16)), "logs_2024-02-11_2024-03-16")
        self.assertEqual(logs_range_key("2024-02-11", "2024-03-16"), "logs_2024-02-11_2024-03-16")


if __name__ == "__main__":
    unittest.main(verbosity=2)
