"""Unit tests for the ShortURLCacheDAO

Test coverage includes:

1. Initialization
   - Ensures an unreachable cache raises CacheUnavailableError.

2. Reads and writes
   - Ensures get() reads namespaced keys.
   - Ensures put() stores entries with a millisecond TTL and skips non-positive TTLs.
   - Ensures evict() deletes all given keys in one call.

3. Error handling
   - Ensures Redis connection errors raise CacheUnavailableError.
   - Ensures server-side rejections (OOM, READONLY) raise CacheUnavailableError.
"""

from datetime import timedelta

import pytest
import redis
from beartype.roar import BeartypeCallHintParamViolation

from shortlinks.dao.cache import ShortURLCacheDAO
from shortlinks.dao.exceptions import CacheUnavailableError


@pytest.fixture
def cache(redis_client, app_prefix):
    return ShortURLCacheDAO(redis_client=redis_client, prefix=app_prefix)


# -------------------------------
# 1. Initialization
# -------------------------------


def test_init_with_unreachable_cache(redis_client):
    redis_client.ping.side_effect = redis.exceptions.ConnectionError('Connection refused')

    with pytest.raises(CacheUnavailableError, match="Can't connect to Redis at 203.0.113.1:18000/5"):
        ShortURLCacheDAO(redis_client=redis_client)


# -------------------------------
# 2. Reads and writes
# -------------------------------


def test_get_hit(cache, redis_client):
    redis_client.get.return_value = 'https://example.com'

    assert cache.get('abc12345') == 'https://example.com'
    redis_client.get.assert_called_once_with('cache:testapp:test:short:abc12345')


def test_get_miss(cache):
    assert cache.get('abc12345') is None


def test_put(cache, redis_client):
    redis_client.set.return_value = True

    assert cache.put('abc12345', 'https://example.com', timedelta(minutes=5)) is True
    redis_client.set.assert_called_once_with('cache:testapp:test:short:abc12345', 'https://example.com', px=300_000)


@pytest.mark.parametrize('ttl', [timedelta(0), timedelta(seconds=-1), timedelta(microseconds=500)])
def test_put_non_positive_ttl(cache, redis_client, ttl):
    assert cache.put('abc12345', 'https://example.com', ttl) is False
    redis_client.set.assert_not_called()


def test_put_invalid_ttl_type(cache):
    with pytest.raises((TypeError, BeartypeCallHintParamViolation)):
        cache.put('abc12345', 'https://example.com', 300)


def test_evict(cache, redis_client):
    redis_client.delete.return_value = 2

    assert cache.evict('abc12345', 'def67890') == 2
    redis_client.delete.assert_called_once_with('cache:testapp:test:short:abc12345', 'cache:testapp:test:short:def67890')


def test_evict_nothing(cache, redis_client):
    assert cache.evict() == 0
    redis_client.delete.assert_not_called()


# -------------------------------
# 3. Error handling
# -------------------------------


@pytest.mark.parametrize(
    'method, args',
    [
        ('get', ('abc12345',)),
        ('put', ('abc12345', 'https://example.com', timedelta(minutes=1))),
        ('evict', ('abc12345',)),
    ],
)
def test_connection_errors(cache, redis_client, method, args):
    error = redis.exceptions.ConnectionError('Connection reset')
    redis_client.get.side_effect = error
    redis_client.set.side_effect = error
    redis_client.delete.side_effect = error

    with pytest.raises(CacheUnavailableError, match="Can't connect to cache at 203.0.113.1:18000/5."):
        getattr(cache, method)(*args)


@pytest.mark.parametrize(
    'method, args',
    [
        ('get', ('abc12345',)),
        ('put', ('abc12345', 'https://example.com', timedelta(minutes=1))),
        ('evict', ('abc12345',)),
    ],
)
@pytest.mark.parametrize(
    'error',
    [
        redis.exceptions.ResponseError('OOM command not allowed when used memory > maxmemory'),
        redis.exceptions.ReadOnlyError("You can't write against a read only replica."),
    ],
)
def test_server_side_errors(cache, redis_client, method, args, error):
    redis_client.get.side_effect = error
    redis_client.set.side_effect = error
    redis_client.delete.side_effect = error

    with pytest.raises(CacheUnavailableError, match='Cache command failed at 203.0.113.1:18000/5') as exc_info:
        getattr(cache, method)(*args)

    assert exc_info.value.__cause__ is error
