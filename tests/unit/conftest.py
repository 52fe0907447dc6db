from datetime import datetime, timedelta, UTC
from unittest.mock import MagicMock

import pytest
import redis

from shortlinks.models import ShortURLModel
from shortlinks.dao.memory import ShortURLMemoryDAO


@pytest.fixture
def app_prefix() -> str:
    """Provide a consistent Redis key prefix for testing."""
    return 'testapp:test'


@pytest.fixture
def redis_client() -> redis.Redis:
    """Mock a Redis pipeline-compatible client.

    `transaction(func, *watches)` runs `func` against the same mock and then
    `execute()`, mirroring redis.Redis.transaction() without WATCH retries.
    `register_script(source)` returns one callable mock per script source.
    """
    client = MagicMock(spec=redis.client.Pipeline)
    client.connection_pool = MagicMock(
        spec=redis.ConnectionPool,
        connection_kwargs={'host': '203.0.113.1', 'port': 18000, 'db': 5},
    )
    client.exists.return_value = False
    client.get.return_value = None
    client.hgetall.return_value = {}
    client.zrangebyscore.return_value = []
    client.pipeline.return_value = client
    client.__enter__.return_value = client
    client.__exit__.return_value = None

    def _transaction(func, *watches, value_from_callable=False, **kwargs):
        func_value = func(client)
        exec_value = client.execute()
        return func_value if value_from_callable else exec_value

    client.transaction.side_effect = _transaction

    scripts = {}
    client.register_script.side_effect = lambda source: scripts.setdefault(source, MagicMock(name='script', return_value=0))
    return client


@pytest.fixture
def now() -> datetime:
    return datetime(2026, 10, 19, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def short_url(now) -> ShortURLModel:
    return ShortURLModel(
        id='0b7c5a9e-4a43-4a8e-9d8a-5f7e4b6c1d2e',
        shortcode='abc12345',
        target='https://example.com/blog/article-123',
        created_at=now,
        updated_at=now,
        expires_at=now + timedelta(minutes=5),
    )


@pytest.fixture
def memory_dao() -> ShortURLMemoryDAO:
    return ShortURLMemoryDAO()


@pytest.fixture
def public_resolver():
    """Hostname resolver returning a public address for every host."""
    return lambda hostname: ['93.184.216.34']
