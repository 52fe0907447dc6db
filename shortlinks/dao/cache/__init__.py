from shortlinks.dao.cache.cache_key_schema import CacheKeySchema
from shortlinks.dao.cache.short_url_cache_dao import ShortURLCacheDAO
from shortlinks.dao.cache.cache_aside import ShortURLCacheAside, Lookup

__all__ = [
    'CacheKeySchema',
    'ShortURLCacheDAO',
    'ShortURLCacheAside',
    'Lookup',
]
