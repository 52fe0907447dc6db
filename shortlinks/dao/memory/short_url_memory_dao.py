"""In-process implementation of ShortURLBaseDAO

Keeps records in dictionaries guarded by a single lock, so every operation is
atomic with respect to concurrent threads. Useful for local runs and tests;
state does not survive the process.

Example:
    >>> dao = ShortURLMemoryDAO()
    >>> dao.insert(short_url).exists(short_url.shortcode)
    True
"""

import threading
from dataclasses import replace
from datetime import datetime, UTC

from beartype import beartype

from shortlinks.models import ShortURLModel
from shortlinks.dao.base import ShortURLBaseDAO
from shortlinks.dao.exceptions import ShortURLAlreadyExistsError, ShortURLNotFoundError


class ShortURLMemoryDAO(ShortURLBaseDAO):
    """Thread-safe in-memory DAO for short URL records.

    Attributes:
        calls (dict[str, int]):
            Number of invocations per public method, handy for asserting
            how often the store was consulted.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._links: dict[str, ShortURLModel] = {}
        self._ids: dict[str, str] = {}
        self.calls: dict[str, int] = {}

    def _count(self, method: str) -> None:
        self.calls[method] = self.calls.get(method, 0) + 1

    @beartype
    def insert(self, short_url: ShortURLModel, **kwargs) -> 'ShortURLMemoryDAO':
        with self._lock:
            self._count('insert')
            if short_url.shortcode in self._links:
                raise ShortURLAlreadyExistsError(f"Short URL with code '{short_url.shortcode}' already exists.")
            self._links[short_url.shortcode] = short_url
            self._ids[short_url.id] = short_url.shortcode
        return self

    @beartype
    def get(self, shortcode: str, active_only: bool = False, **kwargs) -> ShortURLModel:
        with self._lock:
            self._count('get')
            short_url = self._links.get(shortcode)
        if short_url is None or (active_only and not short_url.active):
            raise ShortURLNotFoundError(f"Short URL with code '{shortcode}' not found.")
        return short_url

    @beartype
    def get_by_id(self, link_id: str, **kwargs) -> ShortURLModel:
        with self._lock:
            self._count('get_by_id')
            shortcode = self._ids.get(link_id)
            short_url = self._links.get(shortcode) if shortcode is not None else None
        if short_url is None:
            raise ShortURLNotFoundError(f"Short URL with id '{link_id}' not found.")
        return short_url

    @beartype
    def exists(self, shortcode: str, **kwargs) -> bool:
        with self._lock:
            self._count('exists')
            return shortcode in self._links

    @beartype
    def hit(self, shortcode: str, **kwargs) -> int:
        with self._lock:
            self._count('hit')
            short_url = self._links.get(shortcode)
            if short_url is None or not short_url.active:
                raise ShortURLNotFoundError(f"Active short URL with code '{shortcode}' not found.")
            short_url = replace(short_url, clicks=short_url.clicks + 1, updated_at=datetime.now(UTC))
            self._links[shortcode] = short_url
            return short_url.clicks

    @beartype
    def deactivate(self, link_id: str, **kwargs) -> ShortURLModel:
        with self._lock:
            self._count('deactivate')
            shortcode = self._ids.get(link_id)
            short_url = self._links.get(shortcode) if shortcode is not None else None
            if short_url is None or not short_url.active:
                raise ShortURLNotFoundError(f"Active short URL with id '{link_id}' not found.")
            self._links[shortcode] = replace(short_url, active=False, updated_at=datetime.now(UTC))
            return short_url

    @beartype
    def expired(self, now: datetime | None = None, **kwargs) -> list[ShortURLModel]:
        now = now or datetime.now(UTC)
        with self._lock:
            self._count('expired')
            return [u for u in self._links.values() if u.active and u.is_expired(now)]

    @beartype
    def deactivate_expired(self, now: datetime | None = None, **kwargs) -> int:
        now = now or datetime.now(UTC)
        with self._lock:
            self._count('deactivate_expired')
            expired = [u for u in self._links.values() if u.active and u.is_expired(now)]
            for short_url in expired:
                self._links[short_url.shortcode] = replace(short_url, active=False, updated_at=now)
            return len(expired)
