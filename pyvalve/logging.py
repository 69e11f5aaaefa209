"""Logging configuration for pyvalve.

Default mode is quiet (WARNING and above). Analysis and export progress is
logged at DEBUG/INFO and can be switched on when tracing a circuit:

    from pyvalve.logging import logger, enable_debug_logging

    logger.warning("This will show")
    logger.debug("This won't show")

    enable_debug_logging()
    logger.debug("Now this shows")
"""

import logging
import sys

logger = logging.getLogger("pyvalve")

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
        stream: Output stream (defaults to stdout).
    """
    logger.setLevel(logging.DEBUG)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = FlushingHandler(stream if stream is not None else sys.stdout)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)


def set_log_level(level: int):
    """Set the logging level.

    Args:
        level: logging.DEBUG, logging.INFO, logging.WARNING, etc.
    """
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)
