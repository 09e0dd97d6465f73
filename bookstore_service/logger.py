"""
Shared logger for the bookstore service.

Every module does ``from logger import logger``; the level comes from
``LOG_LEVEL`` (see ``config.py``).  Console results are printed separately,
so log lines go to stderr and never interleave with the step output on stdout.
"""

import logging
import sys

from config import LOG_LEVEL

LOGGER_NAME = "bookstore_service"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def _build_logger() -> logging.Logger:
    log = logging.getLogger(LOGGER_NAME)
    if not log.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(handler)
    log.setLevel(getattr(logging, LOG_LEVEL.upper(), logging.INFO))
    log.propagate = False
    return log


logger = _build_logger()
