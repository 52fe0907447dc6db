"""Data models for short URL records and service responses.

Classes:
    ShortURLModel:
        The persisted short URL record.
    CreatedShortURL:
        Result of shortening a URL.
    ShortURLStats:
        Statistics view over a short URL record.
"""

from dataclasses import dataclass
from datetime import datetime, UTC
from typing import Any


def _isoformat(dt: datetime) -> str:
    return dt.astimezone(UTC).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


# fmt: off
@dataclass(frozen=True)
class ShortURLModel:
    id: str                 # UUID4 string, immutable
    shortcode: str          # Unique short identifier, never reassigned
    target: str             # Normalized original URL
    expires_at: datetime    # Fixed at creation from the configured TTL
    created_at: datetime
    updated_at: datetime
    clicks: int = 0         # Successful (store-served) resolutions
    active: bool = True     # Flips to False on delete or expiration sweep
# fmt: on

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or datetime.now(UTC)) > self.expires_at

    def is_valid(self, now: datetime | None = None) -> bool:
        """True if the record can be resolved: active and not past `expires_at`."""
        return self.active and not self.is_expired(now)


@dataclass(frozen=True)
class CreatedShortURL:
    id: str
    shortcode: str
    short_url: str
    long_url: str
    created_at: datetime
    expires_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'shortCode': self.shortcode,
            'shortUrl': self.short_url,
            'longUrl': self.long_url,
            'createdAt': _isoformat(self.created_at),
            'expiresAt': _isoformat(self.expires_at),
        }


@dataclass(frozen=True)
class ShortURLStats:
    id: str
    shortcode: str
    short_url: str
    long_url: str
    clicks: int
    active: bool
    expired: bool
    created_at: datetime
    expires_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            'id': self.id,
            'shortCode': self.shortcode,
            'shortUrl': self.short_url,
            'longUrl': self.long_url,
            'clickCount': self.clicks,
            'isActive': self.active,
            'isExpired': self.expired,
            'createdAt': _isoformat(self.created_at),
            'expiresAt': _isoformat(self.expires_at),
        }
