"""Cache-aside lookup over a ShortURL store

Read path:
    - CACHE HIT: return the cached target URL immediately. The store is not
      consulted, so neither the active/expired check nor the click increment
      happens for cache hits (the cache holds URL strings, not records).
    - CACHE MISS: read the record from the store in any activity state. When
      the record is valid, populate the cache with TTL = expires_at - now.

Invalidation:
    - evict() drops cache entries after a delete or an expiration sweep.

The cache is an accelerator, never the source of truth: every cache failure is
logged and swallowed here, so callers only ever see store errors. A failed
eviction leaves a staleness window bounded by the entry's TTL.

Example:
    >>> cache_aside = ShortURLCacheAside(store=dao, cache=cache)
    >>> lookup = cache_aside.lookup('abc12345')
    >>> lookup.target
    'https://example.com'
    >>> lookup.cached
    False
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, UTC

from shortlinks.models import ShortURLModel
from shortlinks.dao.base import ShortURLBaseDAO
from shortlinks.dao.cache.short_url_cache_dao import ShortURLCacheDAO
from shortlinks.dao.exceptions import CacheUnavailableError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Lookup:
    target: str
    record: ShortURLModel | None = None  # None when served from cache

    @property
    def cached(self) -> bool:
        return self.record is None


class ShortURLCacheAside:
    """Combine a ShortURL store with an optional lookup cache.

    Args:
        store (ShortURLBaseDAO):
            Source of truth for short URL records.
        cache (ShortURLCacheDAO | None):
            Lookup cache. None disables caching.
    """

    def __init__(self, store: ShortURLBaseDAO, cache: ShortURLCacheDAO | None = None):
        self.store = store
        self.cache = cache

    def lookup(self, shortcode: str) -> Lookup:
        """Resolve a shortcode through the cache, falling back to the store

        Raises:
            ShortURLNotFoundError:
                If the shortcode was never issued.
            DataStoreError:
                If the store is unavailable.
        """
        cached_target = self._cache_get(shortcode)
        if cached_target is not None:
            logger.debug('Cache hit for shortcode %s.', shortcode, extra={'shortcode': shortcode})
            return Lookup(target=cached_target)

        record = self.store.get(shortcode)
        now = datetime.now(UTC)
        if record.is_valid(now):
            self._cache_put(shortcode, record.target, record.expires_at - now)
        return Lookup(target=record.target, record=record)

    def evict(self, *shortcodes: str) -> None:
        if self.cache is None or not shortcodes:
            return
        try:
            self.cache.evict(*shortcodes)
        except CacheUnavailableError:
            logger.warning(
                'Failed to evict cache entries; they will age out via TTL.',
                exc_info=True,
                extra={'shortcodes': list(shortcodes)},
            )

    def _cache_get(self, shortcode: str) -> str | None:
        if self.cache is None:
            return None
        try:
            return self.cache.get(shortcode)
        except CacheUnavailableError:
            logger.warning('Cache read failed; falling back to store.', exc_info=True, extra={'shortcode': shortcode})
            return None

    def _cache_put(self, shortcode: str, target: str, ttl: timedelta) -> None:
        if self.cache is None:
            return
        try:
            self.cache.put(shortcode, target, ttl)
        except CacheUnavailableError:
            logger.warning('Cache population failed.', exc_info=True, extra={'shortcode': shortcode})
