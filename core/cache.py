"""TTL key-value cache backends.

Connectors memoize idempotent read calls through the ``CacheBackend``
contract. Provided backends:
- InMemoryCache: For development/testing and single-process deployments
- (Future) RedisCache: For sharing cached reads across workers
"""

import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional


@dataclass
class CacheEntry:
    """Cached value with its absolute expiry (monotonic seconds)."""
    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class CacheBackend(ABC):
    """Abstract base class for cache storage."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None when absent or expired."""
        pass

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: float) -> bool:
        """Store a value for ``ttl_seconds``. Returns True when stored."""
        pass

    async def delete(self, key: str) -> bool:
        """Remove a key. Backends without deletion report False."""
        return False


class InMemoryCache(CacheBackend):
    """In-memory TTL cache.

    WARNING: Entries are per-process and lost on restart.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self._clock = clock or time.monotonic

    async def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                return None
            return entry.value

    async def set(self, key: str, value: Any, ttl_seconds: float) -> bool:
        if ttl_seconds <= 0:
            return False
        with self._lock:
            self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + ttl_seconds)
        return True

    async def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
