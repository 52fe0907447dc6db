"""Utility functions for application configuration management.

Configuration is env-style. Every setting has a default, may be given in an
optional per-environment YAML file, and is finally overridden by environment
variables:

    defaults  <  $PROJECT_ROOT/config/<APP_ENV>.yml  <  environment variables

The YAML file follows the structure returned by `load_config()`:

    app:
      base_url: https://sho.rt
      expiration_minutes: 60
      shortcode_length: 8
      cleanup_interval_minutes: 1
      blacklist: [malware.com, phishing.site]
    redis:
      host: redis.internal
      port: 6379
      db: 0
    cache:
      enabled: true
      redis:
        host: cache.internal

Functions:
    app_env() -> str
        Return the current application environment (`APP_ENV`) value,
        defaulting to `'local'`.

    app_name() -> str | None
        Return the application name (`APP_NAME`), or None if not set.

    app_prefix() -> str | None
        Return application prefix for DAOs, or None if `APP_NAME` is not set.

    project_root() -> Path
        Return the project root directory, using `PROJECT_ROOT` when available.

    load_config() -> dict
        Merge defaults, the YAML file and environment variables into one dict.

Example:
    >>> from shortlinks.utils.config import load_config
    >>> config = load_config()
    >>> config['redis']['host']
    'localhost'
"""

import os
import logging
from pathlib import Path
from typing import Any

import yaml

from shortlinks.constants import ENV, Defaults
from shortlinks.exceptions import BadConfigurationError


logger = logging.getLogger(__name__)

TRUTHY = frozenset({'1', 'true', 'yes', 'on'})
FALSY = frozenset({'0', 'false', 'no', 'off'})


def app_env() -> str:
    return os.environ.get(ENV.App.APP_ENV, 'local').lower()


def app_name() -> str | None:
    return os.environ.get(ENV.App.APP_NAME)


def project_root() -> Path:
    return Path(os.environ.get(ENV.App.PROJECT_ROOT, os.getcwd()))


def app_prefix() -> str | None:
    return None if app_name() is None else f'{app_name()}:{app_env()}'


def _file_config() -> dict[str, Any]:
    path = project_root() / 'config' / f'{app_env()}.yml'
    if not path.is_file():
        return {}

    logger.debug('Loading configuration file %s.', path)
    try:
        with path.open() as f:
            document = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise BadConfigurationError(f'Invalid YAML in configuration file {path}.') from e

    if not isinstance(document, dict):
        raise BadConfigurationError(f'Configuration file {path} must contain a mapping.')
    return document


def _setting(env_name: str, file_value: Any, default: Any) -> Any:
    value = os.environ.get(env_name)
    if value not in (None, ''):
        return value
    return default if file_value is None else file_value


def _as_int(name: str, value: Any, minimum: int | None = None) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as e:
        raise BadConfigurationError(f'{name} must be an integer (given value: {value!r}).') from e
    if minimum is not None and number < minimum:
        raise BadConfigurationError(f'{name} must be >= {minimum} (given value: {number}).')
    return number


def _as_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in TRUTHY:
        return True
    if normalized in FALSY:
        return False
    raise BadConfigurationError(f'{name} must be a boolean (given value: {value!r}).')


def _as_list(value: Any) -> list[str]:
    if isinstance(value, str):
        value = value.split(',')
    return [item.strip().lower() for item in value if item and item.strip()]


def _redis_config(env: type[ENV.Redis] | type[ENV.Cache], section: dict[str, Any], fallback: dict[str, Any]) -> dict[str, Any]:
    return {
        'host': _setting(env.HOST, section.get('host'), fallback['host']),
        'port': _as_int(env.PORT, _setting(env.PORT, section.get('port'), fallback['port']), minimum=1),
        'db': _as_int(env.DB, _setting(env.DB, section.get('db'), fallback['db']), minimum=0),
        'username': _setting(env.USERNAME, section.get('username'), fallback['username']),
        'password': _setting(env.PASSWORD, section.get('password'), fallback['password']),
    }


def load_config() -> dict[str, Any]:
    """Load the application configuration

    Returns:
        dict[str, Any]:
            Configuration with 'app', 'redis' and 'cache' sections.

    Raises:
        BadConfigurationError:
            If a value cannot be parsed or is out of range, or the YAML file is invalid.
    """
    document = _file_config()
    app = document.get('app') or {}
    cache = document.get('cache') or {}

    redis_defaults = {'host': 'localhost', 'port': 6379, 'db': 0, 'username': None, 'password': None}
    redis_config = _redis_config(ENV.Redis, document.get('redis') or {}, redis_defaults)

    return {
        'app': {
            'base_url': _setting(ENV.App.BASE_URL, app.get('base_url'), Defaults.BASE_URL),
            'expiration_minutes': _as_int(
                ENV.App.EXPIRATION_MINUTES,
                _setting(ENV.App.EXPIRATION_MINUTES, app.get('expiration_minutes'), Defaults.EXPIRATION_MINUTES),
                minimum=1,
            ),
            'shortcode_length': _as_int(
                ENV.App.SHORTCODE_LENGTH,
                _setting(ENV.App.SHORTCODE_LENGTH, app.get('shortcode_length'), Defaults.SHORTCODE_LENGTH),
                minimum=1,
            ),
            'cleanup_interval_minutes': _as_int(
                ENV.App.CLEANUP_INTERVAL_MINUTES,
                _setting(ENV.App.CLEANUP_INTERVAL_MINUTES, app.get('cleanup_interval_minutes'), Defaults.CLEANUP_INTERVAL_MINUTES),
                minimum=1,
            ),
            'blacklist': _as_list(_setting(ENV.App.BLACKLIST, app.get('blacklist'), Defaults.BLACKLIST)),
        },
        'redis': redis_config,
        'cache': {
            'enabled': _as_bool(ENV.Cache.ENABLED, _setting(ENV.Cache.ENABLED, cache.get('enabled'), True)),
            # Cache connection defaults to the datastore connection
            'redis': _redis_config(ENV.Cache, cache.get('redis') or {}, redis_config),
        },
    }
