"""In-memory TTL cache for computed aggregates and rate tables."""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from portfolio_tracker.domain.models import CacheEntry

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 30 * 60


@dataclass
class CacheStats:
    """Snapshot of cache counters."""

    entries: int
    valid_entries: int
    expired_entries: int
    hits: int
    misses: int
    force_refresh_count: int
    last_refresh: Optional[float]


class ResultCache:
    """
    Key -> value store with per-entry expiry.

    - `get` never returns an expired entry; expired entries are evicted
      lazily on access or eagerly by `cleanup()`
    - the cache never invalidates on its own beyond TTL; writers call
      `clear`/`mark_global_refresh` after mutating data
    - `clock` returns epoch seconds and is injectable for tests
    """

    def __init__(
        self,
        default_ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self._default_ttl = default_ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry[Any]] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._force_refresh_count = 0
        self._last_refresh: Optional[float] = None

    @staticmethod
    def generate_key(data_type: str, *params: Any) -> str:
        """Build a deterministic composite key, e.g. ("analytics", "p1", "1Y") -> "analytics:p1:1Y"."""
        return ":".join([data_type, *(str(p) for p in params)])

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None when absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                self._misses += 1
                logger.debug("Cache entry expired: %s", key)
                return None
            self._hits += 1
            return entry.data

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        ttl = self._default_ttl if ttl_seconds is None else ttl_seconds
        now = self._clock()
        with self._lock:
            self._entries[key] = CacheEntry(data=value, timestamp=now, expires_at=now + ttl)

    def clear(self, key: str) -> bool:
        """Remove one entry; returns True if it existed."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear_prefix(self, data_type: str) -> int:
        """Remove every entry whose key starts with `data_type:`."""
        prefix = f"{data_type}:"
        with self._lock:
            doomed = [key for key in self._entries if key.startswith(prefix)]
            for key in doomed:
                del self._entries[key]
            return len(doomed)

    def clear_all(self) -> None:
        with self._lock:
            self._entries.clear()

    def mark_global_refresh(self) -> None:
        """Drop every entry and record the refresh; call after any data mutation."""
        with self._lock:
            self._entries.clear()
            self._force_refresh_count += 1
            self._last_refresh = self._clock()
        logger.debug("Result cache cleared by global refresh")

    def cleanup(self) -> int:
        """Evict all expired entries; returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug("Cache cleanup removed %d entries", len(expired))
        return len(expired)

    def get_cache_age(self, key: str) -> Optional[float]:
        """Seconds since the entry was stored, or None if absent or expired."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or entry.is_expired(now):
                return None
            return now - entry.timestamp

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._entries)

    def get_stats(self) -> CacheStats:
        now = self._clock()
        with self._lock:
            expired = sum(1 for entry in self._entries.values() if entry.is_expired(now))
            return CacheStats(
                entries=len(self._entries),
                valid_entries=len(self._entries) - expired,
                expired_entries=expired,
                hits=self._hits,
                misses=self._misses,
                force_refresh_count=self._force_refresh_count,
                last_refresh=self._last_refresh,
            )
