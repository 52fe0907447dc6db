import logging
from typing import Any

from shortlinks.service import build_service
from shortlinks.exceptions import ConfigurationError, ExpiredOrInactiveError
from shortlinks.dao.exceptions import ShortURLNotFoundError, DataStoreError
from shortlinks.utils import load_config, json_response, guarantee_500_response
from shortlinks.lambdas.redirect_url.constants import (
    MISSING_SHORTCODE,
    SHORT_URL_NOT_FOUND,
    SHORT_URL_EXPIRED,
    REDIRECT_FAILED,
    REDIRECT_SUCCESS,
)


logger = logging.getLogger(__name__)


def response_302(*, location: str) -> dict:
    return {
        'statusCode': 302,
        'headers': {'Location': location},
        'body': '',
    }


def response_404(error_code: str) -> dict:
    return json_response(404, {'error': 'URL not found or expired', 'errorCode': error_code})


@guarantee_500_response
def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Handle incoming API Gateway requests to redirect URLs

    This Lambda handler follows this procedure to redirect URLs:
    - Step 1: Extract shortcode from request path
    - Step 2: Resolve the shortcode (cache first, then database)
    - Step 3: Redirect client to target URL

    HTTP responses:
        302: Successful redirect
            headers:
                Location: target URL destination
        400: Bad client request
            error: missing shortcode in path parameters
        404: Not found
            error: shortcode unknown, expired or deactivated
        500: Internal server error
            error: server experienced an internal error

    Example:
        >>> event = {'pathParameters': {'shortcode': 'Gh71TCNa'}}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        302
        >>> response['headers']['Location']
        'https://example.com/my-page'
    """
    # 1- Extract shortcode from request's path
    shortcode = (event.get('pathParameters') or {}).get('shortcode')
    if not shortcode:
        logger.info('Missing "shortcode" in path. Responding with 400.', extra={'event': MISSING_SHORTCODE})
        return json_response(400, {'error': "Bad Request (missing 'shortcode' in path)", 'errorCode': MISSING_SHORTCODE})

    # 2- Resolve the shortcode
    try:
        target_url = build_service(load_config()).resolve(shortcode)
    except ShortURLNotFoundError:
        logger.info(
            'Short URL record not found. Responding with 404.',
            extra={'shortcode': shortcode, 'event': SHORT_URL_NOT_FOUND},
        )
        return response_404(SHORT_URL_NOT_FOUND)
    except ExpiredOrInactiveError:
        logger.info(
            'Short URL record expired or inactive. Responding with 404.',
            extra={'shortcode': shortcode, 'event': SHORT_URL_EXPIRED},
        )
        return response_404(SHORT_URL_EXPIRED)
    except (ConfigurationError, DataStoreError):
        logger.exception('Failed to resolve short URL. Responding with 500.', extra={'event': REDIRECT_FAILED})
        return json_response(500, {'error': 'Internal Server Error', 'errorCode': REDIRECT_FAILED})

    # 3- Redirect client to target URL
    logger.info(
        'Redirecting client to target URL. Responding with 302.',
        extra={'shortcode': shortcode, 'event': REDIRECT_SUCCESS},
    )
    return response_302(location=target_url)
