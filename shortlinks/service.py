"""Short URL lifecycle orchestration

ShortURLService ties together admission validation, shortcode generation,
the record store and the lookup cache:

    create(raw_url)   validate -> generate unused code -> insert
    resolve(code)     cache-aside lookup -> validity check -> click increment
    stats(code)       store lookup in any activity state
    delete(link_id)   logical deactivation -> best-effort cache eviction
    sweep()           bulk deactivation of expired records -> cache eviction

The store and the cache are explicit dependencies; the service holds no other
mutable state and is safe to share between concurrent requests.

Example:
    >>> service = ShortURLService(ShortURLMemoryDAO(), base_url='https://sho.rt')
    >>> created = service.create('example.com')
    >>> created.long_url
    'http://example.com'
    >>> service.resolve(created.shortcode)
    'http://example.com'
"""

import logging
import uuid
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta, UTC
from typing import Any

from shortlinks.constants import Defaults
from shortlinks.exceptions import ExpiredOrInactiveError, GenerationExhaustedError, InvalidIdError
from shortlinks.models import ShortURLModel, CreatedShortURL, ShortURLStats
from shortlinks.dao.base import ShortURLBaseDAO
from shortlinks.dao.cache import ShortURLCacheDAO, ShortURLCacheAside
from shortlinks.dao.exceptions import ShortURLAlreadyExistsError, ShortURLNotFoundError, CacheUnavailableError
from shortlinks.dao.redis import ShortURLRedisDAO
from shortlinks.utils.config import app_prefix
from shortlinks.utils.helpers import get_short_url
from shortlinks.utils.shortener import generate_shortcode
from shortlinks.utils.validator import validate_url, resolve_hostname


logger = logging.getLogger(__name__)


class ShortURLService:
    """Service layer for the short URL lifecycle.

    Args:
        store (ShortURLBaseDAO):
            Durable record store (source of truth).
        cache (ShortURLCacheDAO | None):
            Optional lookup cache for resolve().
        base_url (str):
            Public base URL used to render short URLs.
        ttl_minutes (int):
            Lifetime of newly created short URLs.
        shortcode_length (int):
            Length of generated shortcodes.
        blacklist (Iterable[str]):
            Banned hostname substrings.
        max_generation_attempts (int):
            Ceiling on generate/exists rounds per insert attempt.
        max_insert_attempts (int):
            Ceiling on insert conflicts caused by concurrent creates.
        resolver (Callable[[str], Iterable[str]]):
            Hostname resolver for the private address check.
        generator (Callable[[int], str]):
            Shortcode generator.
    """

    def __init__(
        self,
        store: ShortURLBaseDAO,
        cache: ShortURLCacheDAO | None = None,
        *,
        base_url: str = Defaults.BASE_URL,
        ttl_minutes: int = Defaults.EXPIRATION_MINUTES,
        shortcode_length: int = Defaults.SHORTCODE_LENGTH,
        blacklist: Iterable[str] = Defaults.BLACKLIST,
        max_generation_attempts: int = Defaults.MAX_GENERATION_ATTEMPTS,
        max_insert_attempts: int = Defaults.MAX_INSERT_ATTEMPTS,
        resolver: Callable[[str], Iterable[str]] = resolve_hostname,
        generator: Callable[[int], str] = generate_shortcode,
    ):
        self.store = store
        self.cache_aside = ShortURLCacheAside(store=store, cache=cache)
        self.base_url = base_url
        self.ttl = timedelta(minutes=ttl_minutes)
        self.shortcode_length = shortcode_length
        self.blacklist = tuple(banned.strip().lower() for banned in blacklist if banned.strip())
        self.max_generation_attempts = max_generation_attempts
        self.max_insert_attempts = max_insert_attempts
        self.resolver = resolver
        self.generator = generator

    def create(self, raw_url: str) -> CreatedShortURL:
        """Shorten a URL

        Raises:
            InvalidURLError: If the URL is malformed.
            ForbiddenTargetError: If the URL targets a private or blacklisted host.
            GenerationExhaustedError: If no unused shortcode could be found or inserted.
            RandomSourceError: If the OS entropy source is unavailable.
            DataStoreError: If the store is unavailable.
        """
        target = validate_url(raw_url, blacklist=self.blacklist, resolver=self.resolver)

        for attempt in range(1, self.max_insert_attempts + 1):
            now = datetime.now(UTC)
            short_url = ShortURLModel(
                id=str(uuid.uuid4()),
                shortcode=self._unused_shortcode(),
                target=target,
                created_at=now,
                updated_at=now,
                expires_at=now + self.ttl,
            )
            try:
                self.store.insert(short_url)
            except ShortURLAlreadyExistsError:
                # Another request claimed the same fresh code between exists() and insert()
                logger.info(
                    'Shortcode collision on insert; retrying with a new code.',
                    extra={'shortcode': short_url.shortcode, 'attempt': attempt},
                )
                continue
            break
        else:
            raise GenerationExhaustedError(f'Unable to insert a unique shortcode after {self.max_insert_attempts} attempts.')

        logger.info('Created short URL.', extra={'shortcode': short_url.shortcode, 'id': short_url.id})
        return CreatedShortURL(
            id=short_url.id,
            shortcode=short_url.shortcode,
            short_url=get_short_url(self.base_url, short_url.shortcode),
            long_url=short_url.target,
            created_at=short_url.created_at,
            expires_at=short_url.expires_at,
        )

    def resolve(self, shortcode: str) -> str:
        """Resolve a shortcode to its target URL

        NOTE: cache hits return without the validity check and without counting
              the click. Entries are evicted on delete/sweep and expire with
              their record, so the window is bounded by the record's TTL.

        Raises:
            ShortURLNotFoundError: If the shortcode was never issued.
            ExpiredOrInactiveError: If the record is deactivated or expired.
            DataStoreError: If the store is unavailable.
        """
        lookup = self.cache_aside.lookup(shortcode)
        if lookup.cached:
            return lookup.target

        if not lookup.record.is_valid():
            raise ExpiredOrInactiveError(f"Short URL with code '{shortcode}' is expired or inactive.")

        try:
            self.store.hit(shortcode)
        except ShortURLNotFoundError as e:
            # Deactivated between lookup and increment
            self.cache_aside.evict(shortcode)
            raise ExpiredOrInactiveError(f"Short URL with code '{shortcode}' is expired or inactive.") from e

        return lookup.target

    def stats(self, shortcode: str) -> ShortURLStats:
        """Return statistics for a shortcode, whatever its activity state

        Raises:
            ShortURLNotFoundError: If the shortcode was never issued.
            DataStoreError: If the store is unavailable.
        """
        short_url = self.store.get(shortcode)
        return ShortURLStats(
            id=short_url.id,
            shortcode=short_url.shortcode,
            short_url=get_short_url(self.base_url, short_url.shortcode),
            long_url=short_url.target,
            clicks=short_url.clicks,
            active=short_url.active,
            expired=short_url.is_expired(),
            created_at=short_url.created_at,
            expires_at=short_url.expires_at,
        )

    def delete(self, link_id: str) -> None:
        """Logically delete a short URL by id

        Raises:
            InvalidIdError: If link_id is not a UUID.
            ShortURLNotFoundError: If no active short URL has this id.
            DataStoreError: If the store is unavailable.
        """
        try:
            link_id = str(uuid.UUID(link_id))
        except (TypeError, ValueError, AttributeError) as e:
            raise InvalidIdError(f'Invalid id {link_id!r}: not a UUID.') from e

        short_url = self.store.get_by_id(link_id)
        self.store.deactivate(short_url.id)
        self.cache_aside.evict(short_url.shortcode)
        logger.info('Deactivated short URL.', extra={'shortcode': short_url.shortcode, 'id': short_url.id})

    def sweep(self) -> int:
        """Deactivate expired short URLs and evict their cache entries

        Returns:
            int: number of records deactivated.

        Raises:
            DataStoreError: If the store is unavailable.
        """
        now = datetime.now(UTC)
        expired = self.store.expired(now)
        deactivated = self.store.deactivate_expired(now)
        self.cache_aside.evict(*(short_url.shortcode for short_url in expired))

        if deactivated:
            logger.info('Deactivated expired short URLs.', extra={'deactivated': deactivated})
        return deactivated

    def _unused_shortcode(self) -> str:
        for _ in range(self.max_generation_attempts):
            shortcode = self.generator(self.shortcode_length)
            if not self.store.exists(shortcode):
                return shortcode
        raise GenerationExhaustedError(f'No unused shortcode found after {self.max_generation_attempts} attempts.')


def build_service(config: dict[str, Any]) -> ShortURLService:
    """Wire a ShortURLService from `load_config()` output

    The Redis store must be reachable (DataStoreError otherwise). The cache is
    optional: when disabled or unreachable, the service runs uncached.
    """
    redis_config = {f'redis_{k}': v for k, v in config['redis'].items()}
    store = ShortURLRedisDAO(**redis_config, prefix=app_prefix())

    cache = None
    if config['cache']['enabled']:
        cache_config = {f'redis_{k}': v for k, v in config['cache']['redis'].items()}
        try:
            cache = ShortURLCacheDAO(**cache_config, prefix=app_prefix())
        except CacheUnavailableError:
            logger.warning('Cache is unreachable; running without cache.', exc_info=True)

    app = config['app']
    return ShortURLService(
        store,
        cache,
        base_url=app['base_url'],
        ttl_minutes=app['expiration_minutes'],
        shortcode_length=app['shortcode_length'],
        blacklist=app['blacklist'],
    )
