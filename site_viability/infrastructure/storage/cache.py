"""In-process TTL result cache"""

import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple


class TTLCache:
    """
    Process-wide key/value store where each entry expires independently.

    Expired entries behave as a miss and are evicted on read. Safe to share
    across concurrent requests; last writer wins for a given key.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._store: Dict[str, Tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None

            value, expires_at = entry
            if self._clock() > expires_at:
                del self._store[key]
                return None

            return value

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        with self._lock:
            self._store[key] = (value, self._clock() + ttl_seconds)

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)
