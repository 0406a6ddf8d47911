"""Logger factory shared by the engine and the HTTP app."""
from __future__ import annotations

import logging

from .config import _env

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"


def get_logger(name: str) -> logging.Logger:
    """
    Return the named logger with a single stream handler attached and
    the level taken from ``INDICATOR_LOG_LEVEL`` (default INFO).
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        _h = logging.StreamHandler()
        _h.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(_h)
    logger.setLevel((_env("INDICATOR_LOG_LEVEL", "INFO") or "INFO").upper())
    return logger
