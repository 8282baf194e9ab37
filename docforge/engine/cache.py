"""In-memory caching for composed output."""

import threading
import time
from typing import Any


class CacheConfig:
    """Cache configuration."""

    def __init__(
        self,
        default_ttl: int = 3600,
        max_entries: int = 512,
        prefix: str = "docforge:",
    ):
        self.default_ttl = default_ttl
        self.max_entries = max_entries
        self.prefix = prefix


class InMemoryCache:
    """Thread-safe in-memory cache with per-entry TTL.

    When ``max_entries`` is reached the entry closest to expiry is evicted.
    """

    def __init__(self, config: CacheConfig | None = None):
        self.config = config or CacheConfig()
        self._cache: dict[str, tuple[Any, float | None]] = {}
        self._prefix = self.config.prefix
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def _full_key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def get(self, key: str) -> Any | None:
        """Get value from cache."""
        full_key = self._full_key(key)
        with self._lock:
            if full_key not in self._cache:
                self.misses += 1
                return None

            value, expires_at = self._cache[full_key]
            if expires_at and time.time() > expires_at:
                del self._cache[full_key]
                self.misses += 1
                return None

            self.hits += 1
            return value

    def set(
        self,
        key: str,
        value: Any,
        ttl: int | None = None,
    ) -> bool:
        """Set value in cache."""
        full_key = self._full_key(key)
        ttl = ttl if ttl is not None else self.config.default_ttl
        expires_at = time.time() + ttl if ttl else None
        with self._lock:
            if full_key not in self._cache and len(self._cache) >= self.config.max_entries:
                self._evict_one()
            self._cache[full_key] = (value, expires_at)
        return True

    def delete(self, key: str) -> bool:
        """Delete value from cache."""
        full_key = self._full_key(key)
        with self._lock:
            if full_key in self._cache:
                del self._cache[full_key]
                return True
        return False

    def exists(self, key: str) -> bool:
        """Check if key exists."""
        return self.get(key) is not None

    def clear(self) -> bool:
        """Clear all cache entries."""
        with self._lock:
            self._cache.clear()
            self.hits = 0
            self.misses = 0
        return True

    def __len__(self) -> int:
        return len(self._cache)

    def _evict_one(self) -> None:
        victim = min(
            self._cache,
            key=lambda k: self._cache[k][1] if self._cache[k][1] is not None else float("inf"),
        )
        del self._cache[victim]
