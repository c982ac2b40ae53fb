"""Console logging for pooltwap.

Diagnostics and progress go to stderr so the report on stdout stays clean.
"""

import logging
import sys
import time

LOGGER_NAME = "pooltwap"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class UTCFormatter(logging.Formatter):
    """Formatter stamping records in UTC with a trailing ``Z``."""

    converter = time.gmtime
    default_time_format = "%Y-%m-%dT%H:%M:%S"
    default_msec_format = "%s.%03dZ"


def get_logger(name: str = LOGGER_NAME, level: str | int = "INFO") -> logging.Logger:
    """Return ``name`` with a single stderr handler attached on first use."""
    logger = logging.getLogger(name)
    handler_name = f"{name}.stderr"
    if not any(handler.get_name() == handler_name for handler in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.set_name(handler_name)
        handler.setFormatter(UTCFormatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    logger.setLevel(level.upper() if isinstance(level, str) else level)
    return logger
