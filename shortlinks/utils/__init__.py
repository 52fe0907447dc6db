from shortlinks.utils.config import app_env, app_name, project_root, app_prefix, load_config
from shortlinks.utils.helpers import get_short_url, json_response, guarantee_500_response
from shortlinks.utils.shortener import generate_shortcode
from shortlinks.utils.validator import normalize_url, validate_url, resolve_hostname
from shortlinks.utils.logging import initialize_logging


__all__ = [
    'generate_shortcode',
    'normalize_url',
    'validate_url',
    'resolve_hostname',
    'app_env',
    'app_name',
    'app_prefix',
    'project_root',
    'load_config',
    'get_short_url',
    'json_response',
    'guarantee_500_response',
    'initialize_logging',
]
