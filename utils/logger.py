"""
utils/logger.py
---------------
Logging setup for the data-access layer.
The executor logs generated SQL and failed statements; repositories log
inserts. Everything goes to stdout at the level named by LOG_LEVEL.
"""

import logging
import sys

from config import LOG_LEVEL

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_configured = False


def _configure_root() -> None:
    global _configured
    if _configured:
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
    root = logging.getLogger()
    root.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    root.addHandler(handler)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a module (pass ``__name__``), configuring output on first use."""
    _configure_root()
    return logging.getLogger(name)
