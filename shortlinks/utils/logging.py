"""Structured JSON logging for the lambdas and the sweep CLI

Every record becomes one JSON object per line on stdout. Fields passed through
`extra=` (shortcode, id, attempt, deactivated, ...) are lifted to the top level
so log queries can filter on them directly:

    {"timestamp": "2026-10-19T12:00:00.000Z", "level": "INFO",
     "logger": "shortlinks.service", "message": "Created short URL.",
     "shortcode": "abc12345"}

`initialize_logging()` must run once per process, before the first log call.
"""

import os
import json
import logging
import logging.config
from datetime import datetime, UTC

from shortlinks.constants import ENV


# Attributes every LogRecord carries; anything else came in through `extra=`
_RESERVED = frozenset(logging.makeLogRecord({}).__dict__) | {'message', 'asctime', 'taskName'}


def _utc_timestamp(created: float) -> str:
    return datetime.fromtimestamp(created, tz=UTC).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


class JsonFormatter(logging.Formatter):
    """Render a LogRecord, its extras and any traceback as a JSON line"""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            'timestamp': _utc_timestamp(record.created),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        payload.update((key, value) for key, value in vars(record).items() if key not in _RESERVED)

        if record.exc_info:
            payload['exception'] = self.formatException(record.exc_info)
        if record.stack_info:
            payload['stack'] = self.formatStack(record.stack_info)

        return json.dumps(payload, default=str)


def initialize_logging(level: str | None = None) -> None:
    """Route the root logger to stdout as JSON

    Args:
        level (str | None):
            Root log level. Defaults to $LOG_LEVEL, then INFO.
    """
    level = (level or os.getenv(ENV.App.LOG_LEVEL) or 'INFO').upper()
    logging.config.dictConfig(
        {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {'json': {'()': JsonFormatter}},
            'handlers': {
                'stdout': {
                    'class': 'logging.StreamHandler',
                    'formatter': 'json',
                    'stream': 'ext://sys.stdout',
                }
            },
            'root': {'level': level, 'handlers': ['stdout']},
        }
    )
