"""Single-flight request coordination.

Maps each cache key to the one pending upstream fetch for it. Concurrent
callers for the same key await the same task and observe the same outcome.

Between the cache check, the in-flight check and task registration there is
no await, so two callers can never both decide to fetch on one event loop.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable

from ncaa_api.cache.store import RequestCache
from ncaa_api.core import TTLClass

logger = logging.getLogger(__name__)

Fetch = Callable[[], Awaitable[object]]
CachePredicate = Callable[[object], bool]


def _consume_exception(task: asyncio.Task) -> None:
    """Mark a failed task's exception as retrieved.

    Every waiter may have disconnected before the fetch finished; the error
    is still delivered to anyone awaiting, this only silences asyncio's
    "exception was never retrieved" log.
    """
    if not task.cancelled():
        task.exception()


class InFlightCoordinator:
    """Cache-first, single-flight resolution of upstream fetches.

    This is the cache boundary for the service layer: it is the only writer
    to its RequestCache.

    Usage:
        coordinator = InFlightCoordinator(RequestCache())
        data = await coordinator.resolve(
            "scoreboard/football/fbs/2025/w3/all-conf",
            lambda: client.fetch_static_json(path),
            TTLClass.FAST,
            equivalent_keys=["/scoreboard/football/fbs"],
        )
    """

    def __init__(self, cache: RequestCache | None = None):
        self._cache = cache if cache is not None else RequestCache()
        self._in_flight: dict[str, asyncio.Task] = {}
        self._fetches_started = 0

    @property
    def cache(self) -> RequestCache:
        return self._cache

    def is_in_flight(self, key: str) -> bool:
        return key in self._in_flight

    async def resolve(
        self,
        key: str,
        fetch: Fetch,
        ttl_class: TTLClass,
        equivalent_keys: Iterable[str] = (),
        cache_if: CachePredicate | None = None,
    ) -> object:
        """Return cached data for key, joining or starting the upstream fetch.

        On success the value is stored under key and equivalent_keys before
        any waiter resumes, unless cache_if rejects it (partial results are
        shared with concurrent waiters but not stored). On failure nothing is
        cached and every waiter receives the same exception. The in-flight
        slot is cleared in both cases so the next request after expiry or
        failure fetches again.

        Waiters are shielded: cancelling one caller (client disconnect) does
        not cancel the shared fetch.
        """
        keys = tuple(dict.fromkeys([key, *equivalent_keys]))

        for k in keys:
            entry = self._cache.get(k)
            if entry is not None:
                logger.debug("[CACHE] Hit: %s", k)
                return entry.value

        task = next((self._in_flight[k] for k in keys if k in self._in_flight), None)
        if task is not None:
            logger.debug("[CACHE] Joining in-flight fetch: %s", key)
        else:
            task = asyncio.ensure_future(self._run(keys, fetch, ttl_class, cache_if))
            task.add_done_callback(_consume_exception)
            for k in keys:
                self._in_flight[k] = task
            self._fetches_started += 1
            logger.debug("[CACHE] Miss, fetching: %s", key)

        return await asyncio.shield(task)

    async def _run(
        self,
        keys: tuple[str, ...],
        fetch: Fetch,
        ttl_class: TTLClass,
        cache_if: CachePredicate | None,
    ) -> object:
        current = asyncio.current_task()
        try:
            value = await fetch()
            if cache_if is None or cache_if(value):
                self._cache.put(keys[0], value, ttl_class, keys[1:])
            else:
                logger.debug("[CACHE] Not caching partial result: %s", keys[0])
            return value
        except Exception as e:
            logger.warning("[CACHE] Fetch failed for %s: %s", keys[0], e)
            raise
        finally:
            for k in keys:
                if self._in_flight.get(k) is current:
                    del self._in_flight[k]

    def invalidate(self, key: str) -> int:
        """Drop a cached resource early (e.g. manual refresh)."""
        return self._cache.invalidate(key)

    def stats(self) -> dict:
        stats = self._cache.stats()
        stats["in_flight"] = len(set(self._in_flight.values()))
        stats["fetches_started"] = self._fetches_started
        return stats
