import logging
from typing import Any

from shortlinks.service import build_service
from shortlinks.exceptions import ConfigurationError
from shortlinks.dao.exceptions import ShortURLNotFoundError, DataStoreError
from shortlinks.utils import load_config, json_response, guarantee_500_response
from shortlinks.lambdas.url_stats.constants import (
    MISSING_SHORTCODE,
    SHORT_URL_NOT_FOUND,
    STATS_FAILED,
    STATS_SUCCESS,
)


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Handle incoming API Gateway requests for short URL statistics

    HTTP responses:
        200: Statistics
            id, shortCode, shortUrl, longUrl, clickCount, isActive, isExpired, createdAt, expiresAt
        400: Bad client request
            error: missing shortcode in path parameters
        404: Not found
            error: shortcode was never issued
        500: Internal server error

    Stats are served for records in any activity state and never count as a click.
    """
    shortcode = (event.get('pathParameters') or {}).get('shortcode')
    if not shortcode:
        logger.info('Missing "shortcode" in path. Responding with 400.', extra={'event': MISSING_SHORTCODE})
        return json_response(400, {'error': "Bad Request (missing 'shortcode' in path)", 'errorCode': MISSING_SHORTCODE})

    try:
        stats = build_service(load_config()).stats(shortcode)
    except ShortURLNotFoundError:
        logger.info('Short URL record not found. Responding with 404.', extra={'shortcode': shortcode, 'event': SHORT_URL_NOT_FOUND})
        return json_response(404, {'error': 'URL not found', 'errorCode': SHORT_URL_NOT_FOUND})
    except (ConfigurationError, DataStoreError):
        logger.exception('Failed to load short URL stats. Responding with 500.', extra={'event': STATS_FAILED})
        return json_response(500, {'error': 'Internal Server Error', 'errorCode': STATS_FAILED})

    logger.debug('Serving short URL stats.', extra={'shortcode': shortcode, 'event': STATS_SUCCESS})
    return json_response(200, stats.to_dict())
