"""Simple in-memory TTL cache. No Redis needed.

Note: Each uvicorn worker has its own cache instance. With --workers 2,
run.events data may be fetched twice (once per worker). The cache is
disposable: a cold cache after restart only means the next request
re-fetches from upstream.
"""

import threading
import time
from collections.abc import Callable
from typing import Any, NamedTuple

DEFAULT_TTL_SECONDS = 5 * 60


class CacheEntry(NamedTuple):
    expires_at: float
    value: Any


class TTLCache:
    """Key-value store with per-entry expiry, checked lazily on read.

    A single lock guards the whole map. Entries are immutable tuples, so a
    ``get`` racing a ``set`` sees either the old or the new value.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._store: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            if self._clock() < entry.expires_at:
                return entry.value
            del self._store[key]
        return None

    def set(self, key: str, value: Any, ttl_seconds: float = DEFAULT_TTL_SECONDS) -> None:
        with self._lock:
            self._store[key] = CacheEntry(self._clock() + ttl_seconds, value)

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()


cache = TTLCache()
