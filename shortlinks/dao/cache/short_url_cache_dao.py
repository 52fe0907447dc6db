"""Redis-backed cache of shortcode -> target URL strings

The cache holds only the target URL, not the full record. Entries expire
together with the record they were read from (TTL = expires_at - now).

Classes:
    ShortURLCacheDAO:
        Thin cache client raising CacheUnavailableError on connectivity issues.

Example:
    >>> cache = ShortURLCacheDAO(redis_host="localhost", prefix="shortlinks:dev")
    >>> cache.put("abc12345", "https://example.com", timedelta(minutes=5))
    True
    >>> cache.get("abc12345")
    'https://example.com'
    >>> cache.evict("abc12345")
    1
"""

from datetime import timedelta

from beartype import beartype

from shortlinks.dao.cache.cache_key_schema import CacheKeySchema
from shortlinks.dao.redis.mixins import RedisClientMixin
from shortlinks.dao.redis.helpers import handle_cache_connection_error
from shortlinks.dao.exceptions import CacheUnavailableError


class ShortURLCacheDAO(RedisClientMixin):
    """Redis cache for resolved short URLs

    Attributes (via RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the cache.
        keys (CacheKeySchema):
            Key schema helper for generating namespaced cache keys.
    """

    unavailable_error = CacheUnavailableError

    def __init__(self, *args, prefix: str | None = None, **kwargs):
        super().__init__(*args, prefix=prefix, **kwargs)
        self.keys = CacheKeySchema(prefix=prefix)

    @handle_cache_connection_error
    @beartype
    def get(self, shortcode: str) -> str | None:
        return self.redis.get(self.keys.short_url_key(shortcode))

    @handle_cache_connection_error
    @beartype
    def put(self, shortcode: str, target: str, ttl: timedelta) -> bool:
        """Cache a target URL for `ttl`; non-positive TTLs are not cached

        Returns:
            bool: True if the entry was written.
        """
        ttl_ms = int(ttl.total_seconds() * 1000)
        if ttl_ms <= 0:
            return False
        return bool(self.redis.set(self.keys.short_url_key(shortcode), target, px=ttl_ms))

    @handle_cache_connection_error
    @beartype
    def evict(self, *shortcodes: str) -> int:
        if not shortcodes:
            return 0
        return int(self.redis.delete(*(self.keys.short_url_key(code) for code in shortcodes)))
