"""
Time-bounded in-process cache for aggregation results.

One TTLCache instance is constructed at application startup (see
renew_admin.main.lifespan), stored on ``app.state`` and injected into the
aggregation engine and the brand service. It is never a module-level
singleton.

Keys are colon-joined tuples of (category, *path components), for example
``b2Data:129 Zhongshan`` or ``b3Data:129 Zhongshan:Phones``. Surgical
invalidation after an override write removes the affected path and its
descendants, never sibling paths. A ``:`` inside a component is encoded as
``%3A`` (and ``%`` as ``%25``) so it cannot split or merge components.

Expiry is lazy: a lookup whose entry has reached its TTL treats it as absent
and removes it. There is no background sweep.

Usage:
    cache = TTLCache(default_ttl=300)
    key = TTLCache.make_key('b2Data', b1)
    rows = cache.get(key)
    if rows is None:
        rows = compute()
        cache.set(key, rows, ttl=120)

    cache.invalidate_path('b2Data', b1)
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional


logger = logging.getLogger(__name__)


# =============================================================================
# Cache Categories
# =============================================================================

B1_VALUES_CATEGORY = 'b1Values'
B2_DATA_CATEGORY = 'b2Data'
B3_DATA_CATEGORY = 'b3Data'
PHONE_BRANDS_CATEGORY = 'phoneBrands'

KEY_SEPARATOR = ':'


def escape_key_part(part: str) -> str:
    """Percent-encode ``%`` and the key separator in one path component."""
    return str(part).replace('%', '%25').replace(KEY_SEPARATOR, '%3A')


@dataclass
class CacheEntry:
    """
    A single cached value with its creation time and lifetime.

    Attributes:
        key: Colon-joined cache key.
        data: The cached payload.
        created_at: Clock reading (seconds) when the entry was stored.
        ttl: Lifetime in seconds.
    """
    key: str
    data: Any
    created_at: float
    ttl: float

    def is_stale(self, now: float) -> bool:
        return now - self.created_at >= self.ttl


class TTLCache:
    """
    Lock-protected map of CacheEntry objects with lazy expiry.

    All public operations hold an RLock so that ``set`` and
    ``invalidate_prefix`` are atomic with respect to a concurrent ``get``
    when handlers run in worker threads.

    Args:
        default_ttl: Lifetime in seconds used when ``set`` gets no ttl.
        clock: Monotonic seconds source; injectable for tests.
    """

    def __init__(
        self,
        default_ttl: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.RLock()

    @staticmethod
    def make_key(category: str, *parts: str) -> str:
        """
        Build ``category:part1:part2``; a bare category stays as-is.

        ``%`` and ``:`` inside a part are percent-encoded, so distinct paths
        never share a key and a part never looks like two components.
        """
        return KEY_SEPARATOR.join((category,) + tuple(escape_key_part(p) for p in parts))

    def get(self, key: str) -> Optional[Any]:
        """
        Return the cached data for ``key``, or None if absent or stale.

        A stale entry is removed as a side effect of the lookup.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                logger.debug(f"Cache miss: {key}")
                return None
            if entry.is_stale(self._clock()):
                del self._entries[key]
                logger.debug(f"Cache entry expired: {key}")
                return None
            logger.debug(f"Cache hit: {key}")
            return entry.data

    def set(self, key: str, data: Any, ttl: Optional[float] = None) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(
                key=key,
                data=data,
                created_at=self._clock(),
                ttl=self.default_ttl if ttl is None else ttl,
            )

    def invalidate_prefix(self, prefix: str) -> int:
        """
        Remove every entry whose key starts with ``prefix``.

        Returns:
            Number of entries removed.
        """
        with self._lock:
            doomed = [key for key in self._entries if key.startswith(prefix)]
            for key in doomed:
                del self._entries[key]
        if doomed:
            logger.debug(f"Invalidated {len(doomed)} cache entries with prefix '{prefix}'")
        return len(doomed)

    def invalidate_path(self, category: str, *parts: str) -> int:
        """
        Remove the entry for ``(category, *parts)`` and every deeper key.

        Unlike a bare ``invalidate_prefix``, this matches whole path
        components, so invalidating B1 ``12`` leaves B1 ``129`` intact.
        """
        key = self.make_key(category, *parts)
        with self._lock:
            doomed = [
                existing for existing in self._entries
                if existing == key or existing.startswith(key + KEY_SEPARATOR)
            ]
            for existing in doomed:
                del self._entries[existing]
        if doomed:
            logger.debug(f"Invalidated {len(doomed)} cache entries under '{key}'")
        return len(doomed)

    def clear(self) -> None:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info(f"Cleared {count} cache entries")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        # Membership does not evict; use get() for expiry-aware reads
        with self._lock:
            return key in self._entries


__all__ = [
    'TTLCache',
    'CacheEntry',
    'escape_key_part',
    'B1_VALUES_CATEGORY',
    'B2_DATA_CATEGORY',
    'B3_DATA_CATEGORY',
    'PHONE_BRANDS_CATEGORY',
]
