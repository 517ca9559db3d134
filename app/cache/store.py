import threading
import time
from typing import Callable, Dict, Optional, Tuple

from app.cache import db as cache_db

class CacheStore:
    """Key/value store with per-entry expiry"""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def put(self, key: str, payload: str, ttl_seconds: float) -> None:
        raise NotImplementedError

class SqliteStore(CacheStore):
    """Store backed by the sqlite cache table in app.cache.db"""

    def get(self, key: str) -> Optional[str]:
        return cache_db.get(key)

    def put(self, key: str, payload: str, ttl_seconds: float) -> None:
        cache_db.set(key, payload, ttl_seconds)

class MemoryStore(CacheStore):
    """In-process store. Writes replace whole entries under a lock."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._entries: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            payload, expires_at = entry
            if expires_at <= self._clock():
                del self._entries[key]
                return None
            return payload

    def put(self, key: str, payload: str, ttl_seconds: float) -> None:
        with self._lock:
            self._entries[key] = (payload, self._clock() + ttl_seconds)

    def __len__(self) -> int:
        return len(self._entries)
