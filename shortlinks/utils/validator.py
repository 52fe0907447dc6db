"""URL admission checks

A submitted URL passes four gates, in order, short-circuiting on the first
failure:

    1. Scheme normalization: prepend 'http://' when the URL starts with
       neither 'http://' nor 'https://'.
    2. Syntactic parse: scheme and host must be present.
    3. SSRF guard: reject hosts resolving to loopback or private addresses.
       A failed DNS lookup is not an error; the URL is admitted.
    4. Blacklist: reject hosts containing a banned substring (case-insensitive).

Functions:
    normalize_url(raw_url) -> str
    resolve_hostname(hostname) -> list[str]
    validate_url(raw_url, blacklist, resolver) -> str

Example:
    >>> validate_url('example.com')
    'http://example.com'
    >>> validate_url('http://localhost:8080/admin')
    Traceback (most recent call last):
        ...
    shortlinks.exceptions.ForbiddenTargetError: ...
"""

import ipaddress
import logging
import socket
from collections.abc import Callable, Iterable
from urllib.parse import urlsplit

from shortlinks.constants import Defaults
from shortlinks.exceptions import InvalidURLError, ForbiddenTargetError


logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = ('http', 'https')


def normalize_url(raw_url: str) -> str:
    url = raw_url.strip()
    if not url.startswith('http://') and not url.startswith('https://'):
        url = f'http://{url}'
    return url


def resolve_hostname(hostname: str) -> list[str]:
    """Resolve a hostname to its IP addresses

    Raises:
        OSError: If resolution fails (socket.gaierror is a subclass).
    """
    return sorted({info[4][0] for info in socket.getaddrinfo(hostname, None)})


def _is_internal(address: str) -> bool:
    try:
        ip = ipaddress.ip_address(address.split('%', 1)[0])  # drop IPv6 zone id
    except ValueError:
        return False
    return ip.is_loopback or ip.is_private


def validate_url(
    raw_url: str,
    blacklist: Iterable[str] = Defaults.BLACKLIST,
    resolver: Callable[[str], Iterable[str]] = resolve_hostname,
) -> str:
    """Normalize and admit a submitted URL

    Args:
        raw_url (str):
            URL as submitted by the client.
        blacklist (Iterable[str]):
            Banned hostname substrings.
        resolver (Callable[[str], Iterable[str]]):
            Hostname -> IP addresses lookup. Defaults to DNS via getaddrinfo.

    Returns:
        str: The normalized URL, ready for storage.

    Raises:
        InvalidURLError: If the URL cannot be parsed into scheme and host.
        ForbiddenTargetError: If the host is private, loopback or blacklisted.
    """
    if not isinstance(raw_url, str) or not raw_url.strip():
        raise InvalidURLError('URL must be a non-empty string.')

    url = normalize_url(raw_url)

    if any(ch.isspace() for ch in url):
        raise InvalidURLError(f'Invalid URL {url!r}: contains whitespace.')
    try:
        parsed = urlsplit(url)
        hostname = parsed.hostname
        parsed.port  # noqa: B018 raises ValueError for out-of-range or non-numeric ports
    except ValueError as e:
        raise InvalidURLError(f'Invalid URL {url!r}: {e}') from e
    if parsed.scheme not in ALLOWED_SCHEMES or not hostname:
        raise InvalidURLError(f'Invalid URL {url!r}: missing scheme or host.')

    try:
        addresses = list(resolver(hostname))
    except (OSError, UnicodeError):
        logger.debug('Could not resolve %s; skipping private address check.', hostname)
        addresses = []
    if _is_internal(hostname) or any(_is_internal(address) for address in addresses):
        raise ForbiddenTargetError(f'Forbidden URL {url!r}: private or local address.')

    if any(banned.strip().lower() in hostname for banned in blacklist if banned.strip()):
        raise ForbiddenTargetError(f'Forbidden URL {url!r}: blacklisted domain.')

    return url
