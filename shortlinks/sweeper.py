"""Periodic expiration sweep

ExpirationSweeper runs `ShortURLService.sweep()` on a fixed interval in a
daemon thread, independent of request handling. A failed tick is logged and
the next tick runs as scheduled. Overlapping sweeps (e.g. several processes)
are safe because the sweep is idempotent.

Example:
    >>> with ExpirationSweeper(service, interval_seconds=60):
    ...     serve_forever()
"""

import logging
import threading

from shortlinks.service import ShortURLService


logger = logging.getLogger(__name__)


class ExpirationSweeper:
    """Repeating background task deactivating expired short URLs.

    Args:
        service (ShortURLService):
            Service whose sweep() is invoked every tick.
        interval_seconds (float):
            Delay between the end of one tick and the start of the next.
    """

    def __init__(self, service: ShortURLService, interval_seconds: float = 60.0):
        if interval_seconds <= 0:
            raise ValueError(f'Interval must be positive (given value: {interval_seconds}).')

        self.service = service
        self.interval_seconds = interval_seconds
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> int | None:
        """Run a single sweep tick

        Returns:
            int | None: records deactivated, or None if the tick failed.
        """
        try:
            deactivated = self.service.sweep()
        except Exception:
            logger.exception('Expiration sweep failed; retrying on next tick.')
            return None

        logger.debug('Expiration sweep finished.', extra={'deactivated': deactivated})
        return deactivated

    def run_forever(self) -> None:
        """Tick until stop() is called (blocks the calling thread)"""
        while not self._stop.wait(self.interval_seconds):
            self.run_once()

    def start(self) -> 'ExpirationSweeper':
        if self.running:
            return self
        self._stop.clear()
        self._thread = threading.Thread(target=self.run_forever, name='expiration-sweeper', daemon=True)
        self._thread.start()
        logger.info('Expiration sweeper started.', extra={'interval_seconds': self.interval_seconds})
        return self

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info('Expiration sweeper stopped.')

    def __enter__(self) -> 'ExpirationSweeper':
        return self.start()

    def __exit__(self, *exc_info) -> None:
        self.stop()
