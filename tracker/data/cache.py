from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable

from tracker.constants import CACHE_TTL_SECONDS

logger = logging.getLogger(__name__)

HABITS_KEY = "habits"


class _Miss:
    def __repr__(self):
        return "MISS"

    def __bool__(self):
        return False


MISS = _Miss()


@dataclass
class CacheEntry:
    value: Any
    fetched_at: float


def logs_range_key(start, end) -> str:
    start_key = start.isoformat() if hasattr(start, "isoformat") else str(start)
    end_key = end.isoformat() if hasattr(end, "isoformat") else str(end)
    return f"logs_{start_key}_{end_key}"


class TTLCache:
    """In-memory per-key cache; an entry is fresh while ``now - fetched_at < ttl``.

    Writers for the same key race last-write-wins. The lock only keeps the
    dict consistent when Streamlit runs reruns on separate threads.
    """

    def __init__(self, ttl_seconds: float = CACHE_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[Hashable, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key, default=MISS):
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                logger.debug("Cache miss for %s", key)
                return default
            if self._clock() - entry.fetched_at >= self.ttl_seconds:
                del self._entries[key]
                logger.debug("Cache entry expired for %s", key)
                return default
            logger.debug("Cache hit for %s", key)
            return entry.value

    def put(self, key, value) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(value=value, fetched_at=self._clock())

    def invalidate(self, key) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def invalidate_all(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key) -> bool:
        return self.get(key) is not MISS

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
