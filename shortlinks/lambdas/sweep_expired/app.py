import logging
from typing import Any

from shortlinks.service import build_service
from shortlinks.exceptions import ConfigurationError
from shortlinks.dao.exceptions import DataStoreError
from shortlinks.utils import load_config
from shortlinks.lambdas.sweep_expired.constants import SUCCESS, ERROR


logger = logging.getLogger(__name__)


def response_success(*, deactivated: int) -> dict:
    return {
        'status': SUCCESS,
        'deactivated': int(deactivated),
        'message': f'Deactivated {deactivated} expired short URLs',
    }


def response_error(*, error: Exception) -> dict:
    return {
        'status': ERROR,
        'message': 'Failed to deactivate expired short URLs',
        'reason': str(error),
        'error': error.__class__.__name__,
    }


def lambda_handler(event: dict, context: Any) -> dict:
    """Deactivate expired short URLs (scheduled by EventBridge)

    This Lambda handler runs one expiration sweep tick:
    - Step 1: Deactivate expired short URLs and evict their cache entries
    - Step 2: Respond with success or error

    A failed tick is reported, not raised; the next scheduled invocation retries.

    Diagnostic responses:
        success:
            status: success
            deactivated: <count>
            message: Deactivated <count> expired short URLs
        error:
            status: error
            message: Failed to deactivate expired short URLs
            reason: <reason>
            error: <error class name> (e.g. DataStoreError, BadConfigurationError)

    Example:
        >>> response = lambda_handler({}, None)
        >>> response['status']
        'success'
        >>> response['deactivated']
        3
    """
    try:
        deactivated = build_service(load_config()).sweep()
    except (ConfigurationError, DataStoreError) as error:
        logger.exception(
            'Failed to deactivate expired short URLs.',
            extra={'event': ERROR, 'reason': str(error), 'error': error.__class__.__name__},
        )
        return response_error(error=error)

    logger.info('Deactivated expired short URLs.', extra={'event': SUCCESS, 'deactivated': deactivated})
    return response_success(deactivated=deactivated)
