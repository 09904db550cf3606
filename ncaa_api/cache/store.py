"""In-memory TTL store with equivalent keys.

Process-scoped: created at startup, never persisted, cleared by TTL expiry,
explicit invalidation or the size bound. Expiry is lazy (checked on read).
When the store grows past max_entries, expired keys are purged and then the
oldest live entries are evicted down to EVICT_TO of the bound, so the sweep
runs once per batch of writes rather than on every write.

Only InFlightCoordinator writes to a store.
"""

import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from ncaa_api.core import TTLClass

logger = logging.getLogger(__name__)

# Fraction of max_entries kept after an over-bound sweep
EVICT_TO = 0.9


@dataclass(frozen=True)
class CacheEntry:
    """A stored value and the write that produced it.

    keys is the full equivalence class sharing this entry.
    """

    value: object
    stored_at: float
    ttl_class: TTLClass
    keys: tuple[str, ...]

    def is_expired(self, now: float) -> bool:
        return now - self.stored_at > self.ttl_class.seconds

    def age(self, now: float) -> float:
        return now - self.stored_at


class RequestCache:
    """Time-bounded key -> value store with two TTL classes.

    Usage:
        cache = RequestCache()
        cache.put("scoreboard/football/fbs/2025/w3", data, TTLClass.FAST,
                  equivalent_keys=["/scoreboard/football/fbs"])
        entry = cache.get("/scoreboard/football/fbs")
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int | None = None,
    ):
        self._clock = clock
        self._max_entries = max_entries
        self._entries: dict[str, CacheEntry] = {}
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> CacheEntry | None:
        """Return the live entry for key, or None on miss/expiry."""
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None
        if entry.is_expired(self._clock()):
            self._misses += 1
            return None
        self._hits += 1
        return entry

    def put(
        self,
        key: str,
        value: object,
        ttl_class: TTLClass,
        equivalent_keys: Iterable[str] = (),
    ) -> CacheEntry:
        """Store value under key and every equivalent key with one TTL clock."""
        keys = tuple(dict.fromkeys([key, *equivalent_keys]))
        entry = CacheEntry(value=value, stored_at=self._clock(), ttl_class=ttl_class, keys=keys)
        for k in keys:
            self._entries[k] = entry

        if self._max_entries is not None and len(self._entries) > self._max_entries:
            self._shrink()

        return entry

    def invalidate(self, key: str) -> int:
        """Remove key and its whole equivalence class. Returns keys removed."""
        entry = self._entries.get(key)
        if entry is None:
            return 0
        removed = self._drop(entry)
        logger.debug("[CACHE] Invalidated %s (%d keys)", key, removed)
        return removed

    def _drop(self, entry: CacheEntry) -> int:
        removed = 0
        for k in entry.keys:
            # A key may since have been rebound to a newer entry
            if self._entries.get(k) is entry:
                del self._entries[k]
                removed += 1
        return removed

    def _shrink(self) -> None:
        purged = self.purge_expired()
        target = max(1, int(self._max_entries * EVICT_TO))
        evicted = 0
        if len(self._entries) > target:
            live = {id(e): e for e in self._entries.values()}.values()
            for entry in sorted(live, key=lambda e: e.stored_at):
                if len(self._entries) <= target:
                    break
                evicted += self._drop(entry)
        logger.debug(
            "[CACHE] Size bound reached, purged %d expired and evicted %d live keys",
            purged,
            evicted,
        )

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [k for k, e in self._entries.items() if e.is_expired(now)]
        for k in expired:
            del self._entries[k]
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()
        self._hits = 0
        self._misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self) -> dict:
        """Get cache statistics."""
        now = self._clock()
        live = sum(1 for e in self._entries.values() if not e.is_expired(now))
        return {
            "keys": len(self._entries),
            "live_keys": live,
            "hits": self._hits,
            "misses": self._misses,
        }
