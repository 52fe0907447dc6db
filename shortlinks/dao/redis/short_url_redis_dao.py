"""Data Access Object (DAO) implementation for managing shortened URLs in Redis

This module provides a Redis-based implementation of ShortURLBaseDAO for the
full lifecycle of ShortURLModel records.

Responsibilities:
    - Insert and retrieve short URL records from Redis;
    - Atomically increment per-link click counters;
    - Logically delete (deactivate) records by id;
    - Maintain an expiry index for the expiration sweep;
    - Translate Redis connectivity failures into DAO exceptions.

Data layout (all keys optionally prefixed, see RedisKeySchema):
    links:<shortcode>     HASH  id, target, clicks, active, created_at, updated_at, expires_at
    links:ids:<id>        STR   shortcode (immutable id -> shortcode index)
    links:active          ZSET  shortcode scored by expires_at (active records only)

Records are never removed, so `links:<shortcode>` doubles as the uniqueness
registry for every shortcode ever issued.

Classes:
    ShortURLRedisDAO:
        DAO for storing and retrieving ShortURLModel in a Redis datastore.

Example:
    >>> from shortlinks.dao.redis import ShortURLRedisDAO

    >>> dao = ShortURLRedisDAO(prefix="app:dev")
    >>> dao.insert(short_url)
    <ShortURLRedisDAO>

    >>> dao.get("abc12345").target
    'https://example.com/page'
    >>> dao.hit("abc12345")
    1
    >>> dao.deactivate_expired()
    0
"""

from datetime import datetime, UTC

import redis
from beartype import beartype

from shortlinks.models import ShortURLModel
from shortlinks.dao.base import ShortURLBaseDAO
from shortlinks.dao.redis.mixins import RedisClientMixin
from shortlinks.dao.redis.helpers import handle_redis_connection_error
from shortlinks.dao.exceptions import ShortURLAlreadyExistsError, ShortURLNotFoundError


# KEYS[1] = link hash; ARGV[1] = updated_at. Returns the new click count, or -1 if not active.
HIT_SCRIPT = """
if redis.call('HGET', KEYS[1], 'active') ~= '1' then
    return -1
end
local clicks = redis.call('HINCRBY', KEYS[1], 'clicks', 1)
redis.call('HSET', KEYS[1], 'updated_at', ARGV[1])
return clicks
"""

# KEYS[1] = expiry index; ARGV[1] = cutoff score (exclusive), ARGV[2] = updated_at,
# ARGV[3] = link hash key prefix. Returns the number of records deactivated.
DEACTIVATE_EXPIRED_SCRIPT = """
local shortcodes = redis.call('ZRANGEBYSCORE', KEYS[1], '-inf', '(' .. ARGV[1])
for _, shortcode in ipairs(shortcodes) do
    redis.call('HSET', ARGV[3] .. shortcode, 'active', '0', 'updated_at', ARGV[2])
    redis.call('ZREM', KEYS[1], shortcode)
end
return #shortcodes
"""


class ShortURLRedisDAO(RedisClientMixin, ShortURLBaseDAO):
    """Redis-based Data Access Object (DAO) for managing short URL records

    This class implements the ShortURLBaseDAO interface using Redis as a data store.
    Inserts and single deactivations run as optimistic WATCH/MULTI/EXEC
    transactions through `redis.Redis.transaction()`. Click counting and the
    expiration sweep run as Lua scripts, each one atomic server-side step.

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.

    Example:
        >>> dao = ShortURLRedisDAO(redis_host="localhost", prefix="shortlinks:test")
        >>> dao.insert(short_url)
        <ShortURLRedisDAO>
        >>> dao.exists("abc12345")
        True
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._hit_script = self.redis.register_script(HIT_SCRIPT)
        self._deactivate_expired_script = self.redis.register_script(DEACTIVATE_EXPIRED_SCRIPT)

    @handle_redis_connection_error
    @beartype
    def insert(self, short_url: ShortURLModel, **kwargs) -> 'ShortURLRedisDAO':
        """Insert a short URL record into Redis

        The existence check and the writes share one transaction watching the
        record key, so two concurrent inserts of the same shortcode cannot both
        succeed: the loser is retried by redis-py, sees the key and raises.

        Args:
            short_url (ShortURLModel):
                ShortURLModel instance representing the shortened URL record.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            ShortURLRedisDAO: self (for method chaining)

        Raises:
            ShortURLAlreadyExistsError:
                If a short URL with the same shortcode already exists.
            DataStoreError:
                If a Redis connection issue occurs during the transaction.
        """
        link_key = self.keys.link_key(short_url.shortcode)

        def _insert(pipe: redis.client.Pipeline) -> None:
            if pipe.exists(link_key):
                raise ShortURLAlreadyExistsError(f"Short URL with code '{short_url.shortcode}' already exists.")
            pipe.multi()
            pipe.hset(link_key, mapping=self._serialize(short_url))
            pipe.set(self.keys.link_id_key(short_url.id), short_url.shortcode)
            if short_url.active:
                pipe.zadd(self.keys.active_links_key(), {short_url.shortcode: short_url.expires_at.timestamp()})

        self.redis.transaction(_insert, link_key)
        return self

    @handle_redis_connection_error
    @beartype
    def get(self, shortcode: str, active_only: bool = False, **kwargs) -> ShortURLModel:
        """Retrieve a stored short URL record by shortcode

        Raises:
            ShortURLNotFoundError:
                If the short URL does not exist (or is inactive and active_only=True).
            DataStoreError:
                If Redis connectivity issues occur.
        """
        fields = self.redis.hgetall(self.keys.link_key(shortcode))
        if not fields:
            raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.")

        short_url = self._deserialize(shortcode, fields)
        if active_only and not short_url.active:
            raise ShortURLNotFoundError(f"Active short URL with code '{shortcode}' not found.")
        return short_url

    @handle_redis_connection_error
    @beartype
    def get_by_id(self, link_id: str, **kwargs) -> ShortURLModel:
        shortcode = self.redis.get(self.keys.link_id_key(link_id))
        if shortcode is None:
            raise ShortURLNotFoundError(f"Short URL with id '{link_id}' not found.")
        return self.get(shortcode)

    @handle_redis_connection_error
    @beartype
    def exists(self, shortcode: str, **kwargs) -> bool:
        return bool(self.redis.exists(self.keys.link_key(shortcode)))

    @handle_redis_connection_error
    @beartype
    def hit(self, shortcode: str, **kwargs) -> int:
        """Increment the click counter of an active short URL

        NOTE: the active check, HINCRBY and the updated_at stamp run as one Lua
              script, so a concurrent deactivation lands either wholly before
              or wholly after the click.

        Returns:
            int: click count after incrementing.

        Raises:
            ShortURLNotFoundError:
                If no active short URL with the given code exists.
            DataStoreError:
                If Redis connectivity issues occur.
        """
        clicks = int(
            self._hit_script(
                keys=[self.keys.link_key(shortcode)],
                args=[datetime.now(UTC).isoformat()],
            )
        )
        if clicks < 0:
            raise ShortURLNotFoundError(f"Active short URL with code '{shortcode}' not found.")
        return clicks

    @handle_redis_connection_error
    @beartype
    def deactivate(self, link_id: str, **kwargs) -> ShortURLModel:
        """Logically delete an active short URL by id

        Returns:
            ShortURLModel: the record as it was before deactivation.

        Raises:
            ShortURLNotFoundError:
                If no active short URL with the given id exists.
            DataStoreError:
                If Redis connectivity issues occur.
        """
        shortcode = self.redis.get(self.keys.link_id_key(link_id))
        if shortcode is None:
            raise ShortURLNotFoundError(f"Short URL with id '{link_id}' not found.")
        link_key = self.keys.link_key(shortcode)

        def _deactivate(pipe: redis.client.Pipeline) -> ShortURLModel:
            fields = pipe.hgetall(link_key)
            if not fields or fields.get('active') != '1':
                raise ShortURLNotFoundError(f"Active short URL with id '{link_id}' not found.")
            pipe.multi()
            pipe.hset(link_key, mapping={'active': '0', 'updated_at': datetime.now(UTC).isoformat()})
            pipe.zrem(self.keys.active_links_key(), shortcode)
            return self._deserialize(shortcode, fields)

        return self.redis.transaction(_deactivate, link_key, value_from_callable=True)

    @handle_redis_connection_error
    @beartype
    def expired(self, now: datetime | None = None, **kwargs) -> list[ShortURLModel]:
        """List active short URLs whose expiry lies strictly before `now`"""
        # '(' makes the upper bound exclusive: a record is still valid at exactly expires_at
        cutoff = self._cutoff(now)
        shortcodes = list(self.redis.zrangebyscore(self.keys.active_links_key(), '-inf', f'({cutoff}'))
        if not shortcodes:
            return []

        with self.redis.pipeline(transaction=False) as pipe:
            for shortcode in shortcodes:
                pipe.hgetall(self.keys.link_key(shortcode))
            rows = pipe.execute()

        return [self._deserialize(shortcode, fields) for shortcode, fields in zip(shortcodes, rows) if fields]

    @handle_redis_connection_error
    @beartype
    def deactivate_expired(self, now: datetime | None = None, **kwargs) -> int:
        """Deactivate all active short URLs whose expiry lies strictly before `now`

        NOTE: the range scan and every flip run inside one Lua script. Two
              overlapping sweeps are serialized by the server: the second
              finds the index already drained and counts nothing twice.

        Returns:
            int: number of records deactivated by this call.
        """
        deactivated = self._deactivate_expired_script(
            keys=[self.keys.active_links_key()],
            args=[self._cutoff(now), datetime.now(UTC).isoformat(), self.keys.link_key('')],
        )
        return int(deactivated)

    @staticmethod
    def _cutoff(now: datetime | None) -> float:
        return (now or datetime.now(UTC)).timestamp()

    @staticmethod
    def _serialize(short_url: ShortURLModel) -> dict[str, str]:
        return {
            'id': short_url.id,
            'target': short_url.target,
            'clicks': str(short_url.clicks),
            'active': '1' if short_url.active else '0',
            'created_at': short_url.created_at.isoformat(),
            'updated_at': short_url.updated_at.isoformat(),
            'expires_at': short_url.expires_at.isoformat(),
        }

    @staticmethod
    def _deserialize(shortcode: str, fields: dict[str, str]) -> ShortURLModel:
        return ShortURLModel(
            id=fields['id'],
            shortcode=shortcode,
            target=fields['target'],
            clicks=int(fields.get('clicks', 0)),
            active=fields.get('active') == '1',
            created_at=datetime.fromisoformat(fields['created_at']),
            updated_at=datetime.fromisoformat(fields['updated_at']),
            expires_at=datetime.fromisoformat(fields['expires_at']),
        )
