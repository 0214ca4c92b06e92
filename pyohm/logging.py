"""Logging configuration for pyohm.

The package logs through a single ``pyohm`` logger that is quiet by default
(WARNING and above).

Usage:
    from pyohm.logging import logger, enable_debug_logging

    enable_debug_logging()
    logger.debug("Now factorization and Newton iterations are traced")
"""

import logging
import sys

logger = logging.getLogger("pyohm")

# Default: WARNING level only (quiet operation)
logger.setLevel(logging.WARNING)

if not logger.handlers:
    _default_handler = logging.StreamHandler(sys.stdout)
    _default_handler.setLevel(logging.WARNING)
    _default_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(_default_handler)


class FlushingHandler(logging.StreamHandler):
    """StreamHandler that flushes after every emit."""

    def emit(self, record):
        super().emit(record)
        self.flush()


def enable_debug_logging(stream=None):
    """Enable DEBUG level logging with immediate flush.

    Args:
        stream: Output stream (defaults to stdout)
    """
    logger.setLevel(logging.DEBUG)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = FlushingHandler(stream or sys.stdout)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter("%(name)s %(levelname)s: %(message)s"))
    logger.addHandler(handler)


def set_log_level(level: int):
    """Set the logging level.

    Args:
        level: logging.DEBUG, logging.INFO, logging.WARNING, etc.
    """
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)
