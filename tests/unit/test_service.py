"""Unit tests for ShortURLService

Test coverage includes:

1. create()
   - Ensures URLs are validated, normalized and stored with the configured TTL.
   - Ensures concurrent creates never share a shortcode or an id.
   - Ensures insert conflicts are retried and attempt ceilings are enforced.

2. resolve()
   - Ensures valid records resolve and count exactly one click per call.
   - Ensures expired, deactivated and unknown shortcodes are rejected.
   - Ensures the cache is populated on MISS and bypasses the store on HIT.
   - Ensures cache command failures (e.g. OOM) never fail a resolve.

3. stats() and delete()
   - Ensures stats are served in any activity state.
   - Ensures delete is logical, evicts the cache and fails the second time.
   - Ensures a cache rejecting the eviction never fails a delete.

4. sweep()
   - Ensures expired records are deactivated once and evicted from the cache.

5. build_service()
   - Ensures the store and cache are wired from configuration.
"""

import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import datetime, timedelta, UTC
from unittest.mock import MagicMock

import pytest
import redis
from freezegun import freeze_time

from shortlinks import service as service_module
from shortlinks.service import ShortURLService, build_service
from shortlinks.exceptions import (
    InvalidURLError,
    ForbiddenTargetError,
    ExpiredOrInactiveError,
    GenerationExhaustedError,
    InvalidIdError,
    RandomSourceError,
)
from shortlinks.dao.cache import ShortURLCacheDAO
from shortlinks.dao.memory import ShortURLMemoryDAO
from shortlinks.dao.exceptions import ShortURLNotFoundError, CacheUnavailableError, DataStoreError


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture
def cache():
    _cache = MagicMock(spec=ShortURLCacheDAO)
    _cache.get.return_value = None
    return _cache


@pytest.fixture
def make_service(memory_dao, public_resolver):
    def _make(store=None, **kwargs):
        kwargs.setdefault('base_url', 'https://sho.rt')
        kwargs.setdefault('ttl_minutes', 5)
        kwargs.setdefault('resolver', public_resolver)
        return ShortURLService(store if store is not None else memory_dao, **kwargs)

    return _make


@pytest.fixture
def service(make_service):
    return make_service()


class BlindExistsDAO(ShortURLMemoryDAO):
    """Memory DAO whose exists() never sees stored records, as in a create race."""

    def exists(self, shortcode, **kwargs):
        return False


# -------------------------------
# 1. create()
# -------------------------------


@freeze_time('2026-10-19 12:00:00')
def test_create(service, memory_dao):
    created = service.create('  example.com/page  ')

    assert created.long_url == 'http://example.com/page'
    assert created.short_url == f'https://sho.rt/{created.shortcode}'
    assert created.created_at == datetime(2026, 10, 19, 12, 0, 0, tzinfo=UTC)
    assert created.expires_at - created.created_at == timedelta(minutes=5)
    assert str(uuid.UUID(created.id)) == created.id

    stored = memory_dao.get(created.shortcode)
    assert stored.target == 'http://example.com/page'
    assert stored.clicks == 0
    assert stored.active is True


def test_create_uses_configured_shortcode_length(make_service):
    assert len(make_service(shortcode_length=12).create('https://example.com').shortcode) == 12


def test_create_rejects_invalid_and_forbidden_urls(service, memory_dao):
    with pytest.raises(InvalidURLError):
        service.create('http://exa mple.com')
    with pytest.raises(ForbiddenTargetError):
        service.create('http://127.0.0.1')
    with pytest.raises(ForbiddenTargetError):
        service.create('https://phishing.site/login')

    assert 'insert' not in memory_dao.calls


def test_create_with_custom_blacklist(make_service):
    service = make_service(blacklist=['example.org'])

    with pytest.raises(ForbiddenTargetError):
        service.create('https://www.example.org')
    assert service.create('https://malware.com').long_url == 'https://malware.com'


def test_create_with_mixed_case_blacklist(make_service):
    service = make_service(blacklist=['Example.ORG', '  Malware.COM '])

    with pytest.raises(ForbiddenTargetError):
        service.create('https://www.example.org')
    with pytest.raises(ForbiddenTargetError):
        service.create('https://MALWARE.com/x')


def test_concurrent_creates_are_unique(service, memory_dao):
    with ThreadPoolExecutor(max_workers=16) as executor:
        created = list(executor.map(lambda i: service.create(f'https://example.com/{i}'), range(100)))

    assert len({c.shortcode for c in created}) == 100
    assert len({c.id for c in created}) == 100
    assert memory_dao.calls['insert'] == 100


def test_create_skips_existing_shortcodes(make_service, memory_dao, short_url):
    memory_dao.insert(short_url)
    codes = iter(['abc12345', 'abc12345', 'fresh000'])
    service = make_service(generator=lambda length: next(codes))

    assert service.create('https://example.com').shortcode == 'fresh000'


def test_create_retries_insert_conflicts(make_service, short_url, caplog):
    store = BlindExistsDAO()
    store.insert(short_url)
    codes = iter(['abc12345', 'fresh000'])
    service = make_service(store=store, generator=lambda length: next(codes))

    with caplog.at_level(logging.INFO):
        created = service.create('https://example.com')

    assert created.shortcode == 'fresh000'
    assert store.calls['insert'] == 3
    assert 'Shortcode collision on insert' in caplog.text


def test_create_insert_attempts_exhausted(make_service, short_url):
    store = BlindExistsDAO()
    store.insert(short_url)
    service = make_service(store=store, generator=lambda length: 'abc12345', max_insert_attempts=3)

    with pytest.raises(GenerationExhaustedError, match='after 3 attempts'):
        service.create('https://example.com')

    assert store.calls['insert'] == 4


def test_create_generation_attempts_exhausted(make_service, memory_dao, short_url):
    memory_dao.insert(short_url)
    service = make_service(generator=lambda length: 'abc12345', max_generation_attempts=7)

    with pytest.raises(GenerationExhaustedError, match='No unused shortcode found after 7 attempts'):
        service.create('https://example.com')

    assert memory_dao.calls['exists'] == 7


def test_create_random_source_unavailable(make_service):
    def _broken(length):
        raise RandomSourceError('Secure random source is unavailable.')

    with pytest.raises(RandomSourceError):
        make_service(generator=_broken).create('https://example.com')


def test_create_generator_receives_length(make_service):
    lengths = []
    service = make_service(shortcode_length=6, generator=lambda length: lengths.append(length) or 'abcdef')

    service.create('https://example.com')

    assert lengths == [6]


# -------------------------------
# 2. resolve()
# -------------------------------


@freeze_time('2026-10-19 12:01:00')
def test_resolve_counts_clicks(service, memory_dao, short_url):
    memory_dao.insert(short_url)

    for _ in range(3):
        assert service.resolve('abc12345') == 'https://example.com/blog/article-123'

    assert memory_dao.get('abc12345').clicks == 3


def test_resolve_concurrent_clicks(service):
    created = service.create('https://example.com')

    with ThreadPoolExecutor(max_workers=8) as executor:
        list(executor.map(lambda _: service.resolve(created.shortcode), range(50)))

    assert service.stats(created.shortcode).clicks == 50


def test_resolve_unknown(service):
    with pytest.raises(ShortURLNotFoundError):
        service.resolve('zzzzzzzz')


@freeze_time('2026-10-19 12:05:00')
def test_resolve_at_exact_expiry_is_still_valid(service, memory_dao, short_url):
    memory_dao.insert(short_url)
    assert service.resolve('abc12345') == short_url.target


@freeze_time('2026-10-19 12:05:01')
def test_resolve_expired(service, memory_dao, short_url):
    memory_dao.insert(short_url)

    with pytest.raises(ExpiredOrInactiveError):
        service.resolve('abc12345')

    assert memory_dao.get('abc12345').clicks == 0


@freeze_time('2026-10-19 12:01:00')
def test_resolve_deactivated(service, memory_dao, short_url):
    memory_dao.insert(replace(short_url, active=False))

    with pytest.raises(ExpiredOrInactiveError):
        service.resolve('abc12345')


@freeze_time('2026-10-19 12:01:00')
def test_resolve_deactivated_between_lookup_and_hit(make_service, memory_dao, short_url, cache, monkeypatch):
    memory_dao.insert(short_url)
    service = make_service(cache=cache)

    def _deactivated(shortcode, **kwargs):
        raise ShortURLNotFoundError(f"Active short URL with code '{shortcode}' not found.")

    monkeypatch.setattr(memory_dao, 'hit', _deactivated)

    with pytest.raises(ExpiredOrInactiveError):
        service.resolve('abc12345')

    cache.evict.assert_called_once_with('abc12345')


@freeze_time('2026-10-19 12:01:00')
def test_resolve_populates_cache_and_serves_hits(make_service, memory_dao, short_url, cache):
    memory_dao.insert(short_url)
    service = make_service(cache=cache)

    assert service.resolve('abc12345') == short_url.target
    cache.put.assert_called_once_with('abc12345', short_url.target, timedelta(minutes=4))

    cache.get.return_value = short_url.target
    assert service.resolve('abc12345') == short_url.target
    assert service.resolve('abc12345') == short_url.target

    assert memory_dao.calls['get'] == 1
    assert memory_dao.calls['hit'] == 1


@freeze_time('2026-10-19 12:01:00')
def test_resolve_with_cache_outage(make_service, memory_dao, short_url, cache):
    memory_dao.insert(short_url)
    cache.get.side_effect = CacheUnavailableError('down')
    cache.put.side_effect = CacheUnavailableError('down')

    assert make_service(cache=cache).resolve('abc12345') == short_url.target
    assert memory_dao.get('abc12345').clicks == 1


@pytest.fixture
def rejecting_cache(redis_client, app_prefix):
    redis_client.get.return_value = None
    redis_client.set.side_effect = redis.exceptions.ResponseError('OOM command not allowed when used memory > maxmemory')
    redis_client.delete.side_effect = redis.exceptions.ResponseError('OOM command not allowed when used memory > maxmemory')
    return ShortURLCacheDAO(redis_client=redis_client, prefix=app_prefix)


@freeze_time('2026-10-19 12:01:00')
def test_resolve_with_cache_rejecting_writes(make_service, memory_dao, short_url, rejecting_cache, redis_client):
    memory_dao.insert(short_url)

    assert make_service(cache=rejecting_cache).resolve('abc12345') == short_url.target
    assert memory_dao.get('abc12345').clicks == 1
    redis_client.set.assert_called_once()


def test_resolve_with_store_outage(make_service, cache):
    store = MagicMock(spec=ShortURLMemoryDAO)
    store.get.side_effect = DataStoreError("Can't connect to Redis")

    with pytest.raises(DataStoreError):
        make_service(store=store, cache=cache).resolve('abc12345')


# -------------------------------
# 3. stats() and delete()
# -------------------------------


@freeze_time('2026-10-19 12:01:00')
def test_stats(service, memory_dao, short_url):
    memory_dao.insert(replace(short_url, clicks=9))

    stats = service.stats('abc12345')

    assert stats.clicks == 9
    assert stats.active is True
    assert stats.expired is False
    assert stats.short_url == 'https://sho.rt/abc12345'
    assert stats.long_url == short_url.target
    assert memory_dao.get('abc12345').clicks == 9


@freeze_time('2026-10-19 12:10:00')
def test_stats_for_expired_record(service, memory_dao, short_url):
    memory_dao.insert(short_url)

    stats = service.stats('abc12345')

    assert stats.active is True
    assert stats.expired is True


def test_stats_unknown(service):
    with pytest.raises(ShortURLNotFoundError):
        service.stats('zzzzzzzz')


def test_delete(make_service, memory_dao, short_url, cache):
    memory_dao.insert(short_url)
    service = make_service(cache=cache)

    service.delete(short_url.id)

    assert memory_dao.get('abc12345').active is False
    cache.evict.assert_called_once_with('abc12345')
    with pytest.raises(ExpiredOrInactiveError):
        service.resolve('abc12345')


def test_delete_twice(service, memory_dao, short_url):
    memory_dao.insert(short_url)

    service.delete(short_url.id)
    with pytest.raises(ShortURLNotFoundError):
        service.delete(short_url.id)


def test_delete_accepts_uppercase_uuid(service, memory_dao, short_url):
    memory_dao.insert(short_url)
    service.delete(short_url.id.upper())
    assert memory_dao.get('abc12345').active is False


@pytest.mark.parametrize('link_id', ['abc12345', '', 'zzzzzzzz-zzzz-zzzz-zzzz-zzzzzzzzzzzz', None])
def test_delete_invalid_id(service, link_id):
    with pytest.raises(InvalidIdError):
        service.delete(link_id)


def test_delete_unknown_id(service):
    with pytest.raises(ShortURLNotFoundError):
        service.delete(str(uuid.uuid4()))


def test_delete_with_cache_outage(make_service, memory_dao, short_url, cache):
    memory_dao.insert(short_url)
    cache.evict.side_effect = CacheUnavailableError('down')

    make_service(cache=cache).delete(short_url.id)

    assert memory_dao.get('abc12345').active is False


def test_delete_with_cache_rejecting_writes(make_service, memory_dao, short_url, rejecting_cache, redis_client):
    memory_dao.insert(short_url)

    make_service(cache=rejecting_cache).delete(short_url.id)

    assert memory_dao.get('abc12345').active is False
    redis_client.delete.assert_called_once_with('cache:testapp:test:short:abc12345')


# -------------------------------
# 4. sweep()
# -------------------------------


def test_sweep(make_service, memory_dao, short_url, cache, now):
    memory_dao.insert(short_url)
    memory_dao.insert(replace(short_url, id='id-1', shortcode='expired1', expires_at=now + timedelta(minutes=1)))
    memory_dao.insert(replace(short_url, id='id-2', shortcode='expired2', expires_at=now + timedelta(minutes=2)))
    memory_dao.insert(replace(short_url, id='id-3', shortcode='deleted0', expires_at=now, active=False))
    service = make_service(cache=cache)

    with freeze_time('2026-10-19 12:03:00'):
        assert service.sweep() == 2
        assert service.sweep() == 0

    cache.evict.assert_called_once_with('expired1', 'expired2')
    assert memory_dao.get('expired1').active is False
    assert memory_dao.get('expired2').active is False
    assert memory_dao.get('abc12345').active is True


def test_sweep_with_nothing_expired(service, memory_dao, short_url):
    memory_dao.insert(short_url)

    with freeze_time('2026-10-19 12:00:00'):
        assert service.sweep() == 0


# -------------------------------
# 5. build_service()
# -------------------------------


@pytest.fixture
def config():
    redis_config = {'host': 'redis.test', 'port': 6379, 'db': 0, 'username': None, 'password': None}
    return {
        'app': {
            'base_url': 'https://sho.rt',
            'expiration_minutes': 30,
            'shortcode_length': 10,
            'cleanup_interval_minutes': 1,
            'blacklist': ['evil.com'],
        },
        'redis': redis_config,
        'cache': {'enabled': True, 'redis': {**redis_config, 'host': 'cache.test'}},
    }


@pytest.fixture
def wiring(monkeypatch):
    store_cls = MagicMock(return_value=ShortURLMemoryDAO())
    cache_cls = MagicMock()
    monkeypatch.setattr(service_module, 'ShortURLRedisDAO', store_cls)
    monkeypatch.setattr(service_module, 'ShortURLCacheDAO', cache_cls)
    monkeypatch.setenv('APP_NAME', 'shortlinks')
    monkeypatch.setenv('APP_ENV', 'test')
    return store_cls, cache_cls


def test_build_service(config, wiring):
    store_cls, cache_cls = wiring

    service = build_service(config)

    store_cls.assert_called_once_with(
        redis_host='redis.test',
        redis_port=6379,
        redis_db=0,
        redis_username=None,
        redis_password=None,
        prefix='shortlinks:test',
    )
    assert cache_cls.call_args.kwargs['redis_host'] == 'cache.test'
    assert cache_cls.call_args.kwargs['prefix'] == 'shortlinks:test'
    assert service.cache_aside.cache is cache_cls.return_value
    assert service.base_url == 'https://sho.rt'
    assert service.ttl == timedelta(minutes=30)
    assert service.shortcode_length == 10
    assert service.blacklist == ('evil.com',)


def test_build_service_without_cache(config, wiring):
    _, cache_cls = wiring
    config['cache']['enabled'] = False

    service = build_service(config)

    cache_cls.assert_not_called()
    assert service.cache_aside.cache is None


def test_build_service_with_unreachable_cache(config, wiring, caplog):
    _, cache_cls = wiring
    cache_cls.side_effect = CacheUnavailableError("Can't connect to Redis")

    with caplog.at_level(logging.WARNING):
        service = build_service(config)

    assert service.cache_aside.cache is None
    assert 'running without cache' in caplog.text


def test_build_service_with_unreachable_store(config, wiring):
    store_cls, _ = wiring
    store_cls.side_effect = DataStoreError("Can't connect to Redis")

    with pytest.raises(DataStoreError):
        build_service(config)
