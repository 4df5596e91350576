"""In-memory cache with TTL support and glob-pattern invalidation."""

import fnmatch
import logging
import threading
import time
from collections.abc import Awaitable, Callable
from typing import Any

from helixintel.models.service_models import CacheStats


logger = logging.getLogger(__name__)


class InMemoryCache:
    """Thread-safe in-memory cache with TTL support.

    The cache owns no timer. Expired entries are dropped lazily on access and
    in bulk by ``cleanup_expired``, which the application scheduler calls.
    """

    def __init__(self, *, default_ttl_seconds: int = 300, time_func: Callable[[], float] = time.monotonic) -> None:
        """Initialize in-memory cache.

        Args:
            default_ttl_seconds: TTL applied when ``set`` is called without one
            time_func: Monotonic time source, injectable for tests
        """
        self._data: dict[str, Any] = {}
        self._expiry: dict[str, float] = {}
        self._lock = threading.Lock()
        self._default_ttl_seconds = default_ttl_seconds
        self._time = time_func
        self._closed = False
        # Bumped on every delete, invalidation and clear
        self._generation = 0

        # Health tracking
        self._hits = 0
        self._misses = 0

    @property
    def is_closed(self) -> bool:
        return self._closed

    def _is_expired(self, key: str, now: float) -> bool:
        expiry = self._expiry.get(key)
        return expiry is not None and expiry <= now

    def _drop(self, key: str) -> None:
        self._data.pop(key, None)
        self._expiry.pop(key, None)

    def _cleanup_expired(self, keys: list[str] | None = None) -> int:
        """Clean up expired entries.

        Args:
            keys: Specific keys to check. If None, checks all keys.

        Returns:
            Number of entries removed
        """
        now = self._time()
        keys_to_check = list(self._expiry.keys()) if keys is None else keys

        removed = 0
        for key in keys_to_check:
            if self._is_expired(key, now):
                self._drop(key)
                removed += 1
        return removed

    def get(self, key: str) -> Any | None:
        """Get value from cache.

        Args:
            key: Cache key

        Returns:
            Cached value or None if not found or expired
        """
        with self._lock:
            self._cleanup_expired([key])

            if key not in self._data:
                self._misses += 1
                return None

            self._hits += 1
            logger.debug("Cache hit for key: %s", key)
            return self._data[key]

    def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        """Set value in cache with TTL.

        Args:
            key: Cache key
            value: Value to cache
            ttl_seconds: Time-to-live in seconds; 0 or less keeps the entry until removed
        """
        with self._lock:
            self._store(key, value, ttl_seconds)

    def _store(self, key: str, value: Any, ttl_seconds: int | None) -> None:
        ttl = self._default_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._data[key] = value
        if ttl > 0:
            self._expiry[key] = self._time() + ttl
        else:
            self._expiry.pop(key, None)
        logger.debug("Cached key: %s (TTL: %ds)", key, ttl)

    def has(self, key: str) -> bool:
        """Check whether a key exists and has not expired."""
        with self._lock:
            self._cleanup_expired([key])
            return key in self._data

    def delete(self, *keys: str) -> int:
        """Delete one or more keys from cache.

        Returns:
            Number of keys that were present
        """
        with self._lock:
            self._generation += 1
            removed = 0
            for key in keys:
                if key in self._data:
                    removed += 1
                self._drop(key)
            return removed

    def keys(self, pattern: str = "*") -> list[str]:
        """Find live keys matching a glob pattern (e.g. 'schedules:*')."""
        with self._lock:
            self._cleanup_expired()
            return [key for key in self._data if fnmatch.fnmatchcase(key, pattern)]

    def invalidate_pattern(self, pattern: str) -> int:
        """Delete every key matching a glob pattern.

        Returns:
            Number of keys removed
        """
        with self._lock:
            self._generation += 1
            matching = [key for key in self._data if fnmatch.fnmatchcase(key, pattern)]
            for key in matching:
                self._drop(key)

        if matching:
            logger.debug("Invalidated %d cache key(s) for pattern %s", len(matching), pattern)
        return len(matching)

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            self._generation += 1
            self._data.clear()
            self._expiry.clear()

    def cleanup_expired(self) -> int:
        """Purge all expired entries.

        Returns:
            Number of entries removed
        """
        with self._lock:
            removed = self._cleanup_expired()

        if removed:
            logger.info("Cleaned up expired cache entries", extra={"removed": removed})
        return removed

    def get_stats(self) -> CacheStats:
        """Get cache statistics."""
        with self._lock:
            return CacheStats(
                size=len(self._data),
                keys=sorted(self._data),
                hits=self._hits,
                misses=self._misses,
            )

    async def get_or_fetch(
        self,
        key: str,
        fetcher: Callable[[], Awaitable[Any]],
        ttl_seconds: int | None = None,
    ) -> Any:
        """Return the cached value for key, or await fetcher and cache its result.

        None results are returned but not cached. Neither is a result fetched
        while any key was deleted or invalidated, since it may predate that change.
        """
        cached = self.get(key)
        if cached is not None:
            return cached

        logger.debug("Cache miss for key: %s", key)
        with self._lock:
            generation = self._generation
        value = await fetcher()
        if value is None:
            return value

        with self._lock:
            if generation == self._generation:
                self._store(key, value, ttl_seconds)
                return value

        logger.debug("Skipped caching key invalidated during fetch: %s", key)
        return value

    def close(self) -> None:
        """Drop all entries and mark the cache closed."""
        self.clear()
        self._closed = True
        logger.info("In-memory cache closed")
