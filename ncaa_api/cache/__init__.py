"""Request cache and single-flight coordination."""

from ncaa_api.cache.inflight import InFlightCoordinator
from ncaa_api.cache.store import CacheEntry, RequestCache

__all__ = ["CacheEntry", "InFlightCoordinator", "RequestCache"]
