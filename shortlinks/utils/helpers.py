"""Helper utilities for lambda handlers.

Functions:
    get_short_url(base_url, shortcode) -> str
        Get string representation of short URL for a given shortcode
    json_response(status_code, body, headers) -> dict
        Build an API Gateway proxy response with a JSON body
    guarantee_500_response(handler) -> Callable
        Decorator: turn unhandled exceptions into a logged 500 response

Example:
    >>> get_short_url('https://sho.rt/', 'abc12345')
    'https://sho.rt/abc12345'
"""

import json
import functools
import logging
from typing import Any
from collections.abc import Callable

from shortlinks.constants import UNKNOWN_INTERNAL_SERVER_ERROR
from shortlinks.types import LambdaEvent, LambdaContext, LambdaResponse


logger = logging.getLogger(__name__)


def get_short_url(base_url: str, shortcode: str) -> str:
    """Get string representation of shortened URL

    Args:
        base_url (str): public base URL, e.g. 'https://sho.rt'
        shortcode (str): shortcode

    Returns:
        str: short url string representation
    """
    return f'{base_url.rstrip("/")}/{shortcode}'


def json_response(status_code: int, body: dict[str, Any], headers: dict[str, str] | None = None) -> LambdaResponse:
    return {
        'statusCode': status_code,
        'headers': {'Content-Type': 'application/json', **(headers or {})},
        'body': json.dumps(body),
    }


def guarantee_500_response(handler: Callable) -> Callable:
    """Decorator ensuring a lambda handler always answers, even on unexpected errors.

    Example:
        >>> @guarantee_500_response
        ... def lambda_handler(event, context):
        ...     raise RuntimeError('boom')
        >>> lambda_handler({}, None)['statusCode']
        500
    """

    @functools.wraps(handler)
    def wrapper(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
        try:
            return handler(event, context)
        except Exception:
            logger.exception(
                'Unhandled exception in lambda handler. Responding with 500.',
                extra={'event': UNKNOWN_INTERNAL_SERVER_ERROR},
            )
            return json_response(500, {'error': 'Internal Server Error', 'errorCode': UNKNOWN_INTERNAL_SERVER_ERROR})

    return wrapper
