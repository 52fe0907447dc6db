import functools
import redis
from typing import TypeVar, Any
from collections.abc import Callable

from shortlinks.dao.exceptions import DataStoreError, CacheUnavailableError


__all__ = []

F = TypeVar('F', bound=Callable[..., Any])

# Errors surfaced by redis-py for unreachable or slow servers
REDIS_CONNECTION_ERRORS = (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError)


def describe_client(client: redis.Redis) -> str:
    info = client.connection_pool.connection_kwargs
    return f"{info.get('host')}:{info.get('port')}/{info.get('db')}"


def handle_redis_connection_error(method: F) -> F:
    """Wrap Redis-interacting DAO methods to handle connection errors

    Args:
        method (Callable[..., Any]):
            DAO method performing Redis operations which may raise redis.exceptions.ConnectionError
            or redis.exceptions.TimeoutError.

    Returns:
        Callable[..., Any]:
            Wrapped method which raises DataStoreError on connectivity issues with Redis.

    Example:
        >>> @handle_redis_connection_error
        ... def exists(self, shortcode):
        ...     return self.redis.exists(shortcode)
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except REDIS_CONNECTION_ERRORS as e:
            raise DataStoreError(f"Can't connect to Redis at {describe_client(self.redis)}.") from e

    return wrapper


def handle_cache_connection_error(method: F) -> F:
    """Same as handle_redis_connection_error, but raises CacheUnavailableError.

    Any redis.exceptions.RedisError is converted, including server-side
    rejections such as OOM under noeviction, READONLY or WRONGTYPE.

    Example:
        >>> @handle_cache_connection_error
        ... def get(self, shortcode):
        ...     return self.redis.get(shortcode)
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except REDIS_CONNECTION_ERRORS as e:
            raise CacheUnavailableError(f"Can't connect to cache at {describe_client(self.redis)}.") from e
        except redis.exceptions.RedisError as e:
            raise CacheUnavailableError(f'Cache command failed at {describe_client(self.redis)}: {e}') from e

    return wrapper
