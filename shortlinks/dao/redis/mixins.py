"""Client wiring shared by the link store and the redirect cache

Both DAOs talk to a Redis server through the same constructor arguments, and
both refuse to start if that server does not answer a PING. They differ only
in the exception raised when it does not: the store raises DataStoreError,
the cache raises CacheUnavailableError so callers can run without it.
"""

import redis

from shortlinks.dao.redis.redis_key_schema import RedisKeySchema
from shortlinks.dao.redis.helpers import REDIS_CONNECTION_ERRORS, describe_client
from shortlinks.dao.exceptions import DAOError, DataStoreError


class RedisClientMixin:
    """Attach a Redis client (`self.redis`) and key schema (`self.keys`) to a DAO

    Pass `redis_client` to reuse an existing client (tests, shared pools);
    otherwise one is built from the `redis_*` arguments. Subclasses set
    `unavailable_error` to choose what an unreachable server raises.
    """

    unavailable_error: type[DAOError] = DataStoreError

    def __init__(
        self,
        redis_host: str = 'localhost',
        redis_port: int = 6379,
        redis_db: int = 0,
        redis_decode_responses: bool = True,
        redis_username: str | None = None,
        redis_password: str | None = None,
        redis_socket_timeout: float | None = 5.0,
        redis_client: redis.Redis | None = None,
        prefix: str | None = None,
    ):
        if redis_client is None:
            redis_client = redis.Redis(
                host=redis_host,
                port=int(redis_port),
                db=int(redis_db),
                decode_responses=redis_decode_responses,
                username=redis_username,
                password=redis_password,
                socket_timeout=redis_socket_timeout,
            )
        self.redis = redis_client
        self.keys = RedisKeySchema(prefix=prefix)
        self._healthcheck()

    def _healthcheck(self) -> None:
        """PING the server, raising `unavailable_error` if it cannot be reached"""
        try:
            self.redis.ping()
        except REDIS_CONNECTION_ERRORS as e:
            raise self.unavailable_error(
                f"Can't connect to Redis at {describe_client(self.redis)}. Check the provided configuration parameters."
            ) from e
