import logging
from typing import Any

from shortlinks.service import build_service
from shortlinks.exceptions import ConfigurationError, InvalidIdError
from shortlinks.dao.exceptions import ShortURLNotFoundError, DataStoreError
from shortlinks.utils import load_config, json_response, guarantee_500_response
from shortlinks.lambdas.delete_url.constants import (
    MISSING_ID,
    INVALID_ID,
    SHORT_URL_NOT_FOUND,
    DELETE_FAILED,
    DELETE_SUCCESS,
)


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Handle incoming API Gateway requests to delete short URLs

    Deletion is logical: the record is deactivated and its cache entry evicted.
    Deleting the same id twice yields 200 and then 404.

    HTTP responses:
        200: Deleted
            message: success message
        400: Bad client request
            error: missing or malformed id
        404: Not found
            error: no active short URL with this id
        500: Internal server error
    """
    link_id = (event.get('pathParameters') or {}).get('id')
    if not link_id:
        logger.info('Missing "id" in path. Responding with 400.', extra={'event': MISSING_ID})
        return json_response(400, {'error': "Bad Request (missing 'id' in path)", 'errorCode': MISSING_ID})

    try:
        build_service(load_config()).delete(link_id)
    except InvalidIdError as e:
        logger.info('Malformed id. Responding with 400.', extra={'id': link_id, 'event': INVALID_ID})
        return json_response(400, {'error': f'Bad Request ({e})', 'errorCode': INVALID_ID})
    except ShortURLNotFoundError:
        logger.info('Short URL record not found. Responding with 404.', extra={'id': link_id, 'event': SHORT_URL_NOT_FOUND})
        return json_response(404, {'error': 'URL not found', 'errorCode': SHORT_URL_NOT_FOUND})
    except (ConfigurationError, DataStoreError):
        logger.exception('Failed to delete short URL. Responding with 500.', extra={'event': DELETE_FAILED})
        return json_response(500, {'error': 'Internal Server Error', 'errorCode': DELETE_FAILED})

    logger.info('Deleted short URL. Responding with 200.', extra={'id': link_id, 'event': DELETE_SUCCESS})
    return json_response(200, {'message': 'URL deleted successfully'})
