"""
Logging configuration for the TVM calculator.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
HANDLER_NAME = "tvmcalc"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Attach a console handler to the package logger.

    Safe to call more than once; the handler is only added the first time.
    """
    logger = logging.getLogger("tvmcalc")
    logger.setLevel(level.upper())

    if not any(h.get_name() == HANDLER_NAME for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.set_name(HANDLER_NAME)
        logger.addHandler(handler)

    return logger
