"""Command line entry point.

CLI usage:
    # Run the expiration sweeper every CLEANUP_INTERVAL_MINUTES (foreground)
    $ python -m shortlinks sweep

    # Custom interval in seconds
    $ python -m shortlinks sweep --interval 30

    # Single sweep tick, e.g. from cron
    $ python -m shortlinks sweep --once
"""

import argparse
import logging
import sys

from shortlinks.service import build_service
from shortlinks.exceptions import ConfigurationError
from shortlinks.dao.exceptions import DataStoreError
from shortlinks.sweeper import ExpirationSweeper
from shortlinks.utils import load_config, initialize_logging


logger = logging.getLogger('shortlinks')


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.

    Returns:
        int: process exit code.
    """
    parser = argparse.ArgumentParser(prog='shortlinks', description='Short URL lifecycle tooling')
    subparsers = parser.add_subparsers(dest='command', required=True)

    sweep = subparsers.add_parser('sweep', help='Deactivate expired short URLs periodically')
    sweep.add_argument('--interval', type=float, default=None, help='Seconds between ticks (default: CLEANUP_INTERVAL_MINUTES)')
    sweep.add_argument('--once', action='store_true', help='Run a single tick and exit')

    args = parser.parse_args(argv)
    initialize_logging()

    try:
        config = load_config()
        service = build_service(config)
    except (ConfigurationError, DataStoreError):
        logger.exception('Failed to initialize short URL service.')
        return 1

    sweeper = ExpirationSweeper(service, interval_seconds=args.interval or config['app']['cleanup_interval_minutes'] * 60)

    if args.once:
        return 0 if sweeper.run_once() is not None else 1

    try:
        sweeper.run_forever()
    except KeyboardInterrupt:
        logger.info('Interrupted; stopping expiration sweeper.')
    return 0


if __name__ == '__main__':
    sys.exit(main())
