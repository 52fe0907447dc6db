import json
import logging
from typing import Any

from shortlinks.service import build_service
from shortlinks.exceptions import (
    ConfigurationError,
    InvalidURLError,
    ForbiddenTargetError,
    GenerationExhaustedError,
    RandomSourceError,
)
from shortlinks.dao.exceptions import DataStoreError
from shortlinks.utils import load_config, json_response, guarantee_500_response
from shortlinks.lambdas.shorten_url.constants import (
    INVALID_JSON_BODY,
    MISSING_URL,
    INVALID_URL,
    FORBIDDEN_URL,
    SHORTEN_FAILED,
    SHORTEN_SUCCESS,
)


logger = logging.getLogger(__name__)


def response_400(message: str, error_code: str) -> dict:
    return json_response(400, {'error': f'Bad Request ({message})', 'errorCode': error_code})


def response_500(error_code: str | None = None) -> dict:
    body = {'error': 'Internal Server Error'}
    if error_code:
        body['errorCode'] = error_code
    return json_response(500, body)


@guarantee_500_response
def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Handle incoming API Gateway requests to shorten URLs

    This Lambda handler follows this procedure to shorten URLs:
    - Step 1: Extract original URL from request body
    - Step 2: Build the service from the application's config
    - Step 3: Validate, generate shortcode and store the record (via service)
    - Step 4: Respond to user with 201 created

    HTTP responses:
        201: Successful URL shortening
            id, shortCode, shortUrl, longUrl, createdAt, expiresAt
        400: Bad client request
            error: invalid JSON, missing url, malformed or forbidden URL
        500: Internal server error
            error: the server experienced an internal error

    Args:
        event (dict[str, Any]):
            API Gateway event payload in Lambda Proxy format.
        context (Any):
            AWS Lambda context object containing runtime information.

    Returns:
        dict[str, Any]:
            API Gateway-compatible response including statusCode, headers, and body.

    Example:
        >>> event = {'body': json.dumps({'url': 'example.com'})}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        201
        >>> json.loads(response['body'])['longUrl']
        'http://example.com'
    """
    # 1- Extract original URL from request body
    try:
        request_body = json.loads(event.get('body') or '{}')
    except json.JSONDecodeError:
        logger.info('Invalid JSON body. Responding with 400.', extra={'event': INVALID_JSON_BODY})
        return response_400('invalid JSON body', INVALID_JSON_BODY)

    url = request_body.get('url') if isinstance(request_body, dict) else None
    if not url or not isinstance(url, str):
        logger.info("Missing 'url' in request body. Responding with 400.", extra={'event': MISSING_URL})
        return response_400("missing 'url' in JSON body", MISSING_URL)

    # 2- Build the service from the application's config
    try:
        service = build_service(load_config())
    except (ConfigurationError, DataStoreError):
        logger.exception('Failed to initialize short URL service. Responding with 500.', extra={'event': SHORTEN_FAILED})
        return response_500(SHORTEN_FAILED)

    # 3- Validate, generate shortcode and store the record
    try:
        created = service.create(url)
    except InvalidURLError as e:
        logger.info('Invalid URL submitted. Responding with 400.', extra={'event': INVALID_URL, 'reason': str(e)})
        return response_400(f'invalid URL: {e}', INVALID_URL)
    except ForbiddenTargetError as e:
        logger.info('Forbidden URL submitted. Responding with 400.', extra={'event': FORBIDDEN_URL, 'reason': str(e)})
        return response_400(f'forbidden URL: {e}', FORBIDDEN_URL)
    except (GenerationExhaustedError, RandomSourceError, DataStoreError):
        logger.exception('Failed to create short URL. Responding with 500.', extra={'event': SHORTEN_FAILED})
        return response_500(SHORTEN_FAILED)

    # 4- Respond with the created short URL
    logger.info(
        'Shortened URL. Responding with 201.',
        extra={'event': SHORTEN_SUCCESS, 'shortcode': created.shortcode},
    )
    return json_response(201, created.to_dict())
