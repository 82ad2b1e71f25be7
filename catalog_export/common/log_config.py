"""
Logging Configuration

Export progress and skipped images are logged to stderr so stdout only
carries the final export summary. An optional log file keeps a timestamped
record of each export run.

Connection-pool warnings raised by urllib3 while downloading images go
through the same handlers as the package's own messages.
"""

import logging
import sys
from typing import Optional

LOGGER_NAME = "catalog_export"
HTTP_LOGGER_NAME = "urllib3"

CONSOLE_FORMAT = "%(levelname)-8s %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None) -> None:
    """
    Configure export logging.

    Args:
        verbose: If True, log per-image and per-page detail (DEBUG)
        quiet: If True, only log skipped images and failures (WARNING)
        log_file: Also append messages to this file, with timestamps
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    handlers = [console]

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        handlers.append(file_handler)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    http_logger = logging.getLogger(HTTP_LOGGER_NAME)
    http_logger.setLevel(logging.WARNING)
    http_logger.propagate = False

    # Avoid duplicate handlers if called multiple times
    for target in (logger, http_logger):
        for old in target.handlers:
            old.close()
        target.handlers.clear()
        for handler in handlers:
            target.addHandler(handler)
