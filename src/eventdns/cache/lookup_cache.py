from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Dict, Hashable, Optional

from cachetools import TTLCache

""" Thread-safe TTL + LRU cache for resolver results.

Brief:
  Bounded cache keyed by the raw (pre-resolution) field value. Entries older
  than the configured ttl read as misses; when capacity is exceeded the least
  recently used entry is evicted.

Notes:
  - One instance is owned by each filter for successful lookups (hit cache)
    and one for failed lookups (fail cache); nothing is shared globally.
  - cachetools caches are not thread-safe, so every access happens under an
    RLock.
"""


_logger = logging.getLogger(__name__)


class LookupCache:
    """Thread-safe in-memory cache with a shared TTL and LRU eviction.

    Brief:
        Thin synchronized wrapper around cachetools.TTLCache that also keeps
        best-effort counters for diagnostics.

    Inputs:
        - maxsize: Positive capacity bound.
        - ttl: Lifetime of every entry in seconds.
        - name: Label used in log messages (e.g. "hit" or "failed").
        - timer: Optional clock callable; defaults to time.monotonic.

    Outputs:
        LookupCache instance

    Example use:
        >>> cache = LookupCache(maxsize=2, ttl=60)
        >>> cache.set("example.com", "192.0.2.1")
        >>> cache.get("example.com")
        '192.0.2.1'
        >>> "missing.example" in cache
        False
    """

    def __init__(
        self,
        maxsize: int,
        ttl: float,
        *,
        name: str = "lookup",
        timer: Optional[Callable[[], float]] = None,
    ) -> None:
        if int(maxsize) <= 0:
            raise ValueError("LookupCache maxsize must be positive")
        if float(ttl) <= 0:
            raise ValueError("LookupCache ttl must be positive")

        self.name = str(name)
        self.maxsize = int(maxsize)
        self.ttl = float(ttl)
        self._lock = threading.RLock()
        self._store: TTLCache = TTLCache(
            maxsize=self.maxsize,
            ttl=self.ttl,
            timer=timer or time.monotonic,
        )

        self.calls_total: int = 0
        self.cache_hits: int = 0
        self.cache_misses: int = 0

    def get(self, key: Hashable) -> Any | None:
        """Brief: Return the cached value for key, or None when absent or expired.

        Inputs:
            key: Raw field value used as the cache key.

        Outputs:
            Cached value or None. A hit refreshes the entry's LRU position.
        """
        with self._lock:
            self.calls_total += 1
            value = self._store.get(key)
            if value is None:
                self.cache_misses += 1
                return None
            self.cache_hits += 1
            return value

    def set(self, key: Hashable, value: Any) -> None:
        """Brief: Store value under key, evicting the LRU entry when full.

        Inputs:
            key: Raw field value used as the cache key.
            value: Resolved value, or True for the failed-lookup sentinel.

        Outputs:
            None
        """
        with self._lock:
            self._store.expire()
            full = key not in self._store and len(self._store) >= self.maxsize
            self._store[key] = value
        if full:
            _logger.debug(
                "%s cache at capacity %d; evicted least recently used entry",
                self.name,
                self.maxsize,
            )

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._store

    def __len__(self) -> int:
        with self._lock:
            self._store.expire()
            return len(self._store)

    def stats(self) -> Dict[str, int]:
        """Brief: Snapshot of the counters and current size.

        Inputs:
            None
        Outputs:
            Dict with calls_total, cache_hits, cache_misses and size.
        """
        with self._lock:
            self._store.expire()
            return {
                "calls_total": self.calls_total,
                "cache_hits": self.cache_hits,
                "cache_misses": self.cache_misses,
                "size": len(self._store),
            }
