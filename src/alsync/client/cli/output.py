"""Console logging for the alsync CLI."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logging(verbose: bool = False) -> None:
    """Send alsync log records to stdout.

    Replaces handlers installed by earlier calls so repeated invocations
    (tests, embedding) don't duplicate output.

    Args:
        verbose: Show debug messages.
    """
    alsync_logger = logging.getLogger("alsync")
    for handler in alsync_logger.handlers[:]:
        alsync_logger.removeHandler(handler)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    alsync_logger.addHandler(stdout_handler)
    alsync_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
