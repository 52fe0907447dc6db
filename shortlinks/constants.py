import string
from enum import StrEnum


# Base62 alphabet for shortcodes: 26 lowercase + 26 uppercase + 10 digits
ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits


class Defaults:
    """Default application settings."""

    BASE_URL = 'http://localhost:8080'
    EXPIRATION_MINUTES = 1
    SHORTCODE_LENGTH = 8
    CLEANUP_INTERVAL_MINUTES = 1
    # Ceiling on generate/exists rounds per create (practically unbounded at 62^8)
    MAX_GENERATION_ATTEMPTS = 1_000_000
    # Ceiling on insert conflicts (concurrent creates racing on a fresh code)
    MAX_INSERT_ATTEMPTS = 5
    BLACKLIST = ('malware.com', 'phishing.site', 'spam.example')


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        PROJECT_ROOT = 'PROJECT_ROOT'
        LOG_LEVEL = 'LOG_LEVEL'
        BASE_URL = 'BASE_URL'
        EXPIRATION_MINUTES = 'DEFAULT_EXPIRATION_MINUTES'
        SHORTCODE_LENGTH = 'SHORT_CODE_LENGTH'
        CLEANUP_INTERVAL_MINUTES = 'CLEANUP_INTERVAL_MINUTES'
        BLACKLIST = 'BLACKLISTED_DOMAINS'

    class Redis(StrEnum):
        HOST = 'REDIS_HOST'
        PORT = 'REDIS_PORT'
        DB = 'REDIS_DB'
        USERNAME = 'REDIS_USERNAME'
        PASSWORD = 'REDIS_PASSWORD'  # noqa: S105

    class Cache(StrEnum):
        ENABLED = 'CACHE_ENABLED'
        HOST = 'CACHE_REDIS_HOST'
        PORT = 'CACHE_REDIS_PORT'
        DB = 'CACHE_REDIS_DB'
        USERNAME = 'CACHE_REDIS_USERNAME'
        PASSWORD = 'CACHE_REDIS_PASSWORD'  # noqa: S105


# Error codes
UNKNOWN_INTERNAL_SERVER_ERROR = 'UNKNOWN_INTERNAL_SERVER_ERROR'
