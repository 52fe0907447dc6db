"""Unit tests for ExpirationSweeper

Test coverage includes:

1. Single ticks
   - Ensures run_once() returns the number of deactivated records.
   - Ensures a failing tick is logged and reported as None.

2. Background thread
   - Ensures the sweeper ticks periodically until stopped.
   - Ensures the context manager starts and stops the thread.
   - Ensures two sweepers overlapping on one store deactivate each record once.

3. Validation
   - Ensures non-positive intervals are rejected.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import datetime, timedelta, UTC
from unittest.mock import MagicMock

import pytest

from shortlinks.service import ShortURLService
from shortlinks.sweeper import ExpirationSweeper
from shortlinks.dao.exceptions import DataStoreError


@pytest.fixture
def service():
    _service = MagicMock(spec=ShortURLService)
    _service.sweep.return_value = 3
    return _service


# -------------------------------
# 1. Single ticks
# -------------------------------


def test_run_once(service):
    assert ExpirationSweeper(service).run_once() == 3
    service.sweep.assert_called_once_with()


def test_run_once_failure_is_logged(service, caplog):
    service.sweep.side_effect = DataStoreError("Can't connect to Redis")

    with caplog.at_level(logging.ERROR):
        assert ExpirationSweeper(service).run_once() is None

    assert 'Expiration sweep failed' in caplog.text


# -------------------------------
# 2. Background thread
# -------------------------------


def test_ticks_until_stopped(service):
    ticked = threading.Event()
    ticks = []

    def _sweep():
        ticks.append(1)
        if len(ticks) >= 3:
            ticked.set()
        return 0

    service.sweep.side_effect = _sweep
    sweeper = ExpirationSweeper(service, interval_seconds=0.01).start()

    assert sweeper.running is True
    assert ticked.wait(timeout=5)
    sweeper.stop(timeout=5)

    assert sweeper.running is False
    assert len(ticks) >= 3


def test_failing_ticks_keep_running(service):
    ticked = threading.Event()
    calls = []

    def _sweep():
        calls.append(1)
        if len(calls) == 1:
            raise DataStoreError('down')
        ticked.set()
        return 1

    service.sweep.side_effect = _sweep

    with ExpirationSweeper(service, interval_seconds=0.01) as sweeper:
        assert ticked.wait(timeout=5)
        assert sweeper.running is True

    assert sweeper.running is False


def test_start_is_idempotent(service):
    sweeper = ExpirationSweeper(service, interval_seconds=60)
    sweeper.start()
    thread = sweeper._thread

    assert sweeper.start()._thread is thread
    sweeper.stop(timeout=5)


def test_stop_before_first_tick(service):
    with ExpirationSweeper(service, interval_seconds=60):
        pass

    service.sweep.assert_not_called()


def test_overlapping_sweepers_share_the_work(memory_dao, short_url):
    expired_at = datetime.now(UTC) - timedelta(days=1)
    for i in range(300):
        memory_dao.insert(replace(short_url, id=f'id-{i}', shortcode=f'exp{i:05d}', expires_at=expired_at))
    sweepers = [ExpirationSweeper(ShortURLService(memory_dao)) for _ in range(2)]
    barrier = threading.Barrier(2)

    def _tick(sweeper):
        barrier.wait(timeout=5)
        return sweeper.run_once()

    with ThreadPoolExecutor(max_workers=2) as pool:
        counts = list(pool.map(_tick, sweepers))

    assert sum(counts) == 300
    assert all(not memory_dao.get(f'exp{i:05d}').active for i in range(300))


# -------------------------------
# 3. Validation
# -------------------------------


@pytest.mark.parametrize('interval', [0, -1, -0.5])
def test_invalid_interval(service, interval):
    with pytest.raises(ValueError, match='Interval must be positive'):
        ExpirationSweeper(service, interval_seconds=interval)
