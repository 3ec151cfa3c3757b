"""Logging setup for docbrief.

The provider client logs every attempt itself, so the HTTP libraries it
drives are held at WARNING to keep one line per attempt.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
QUIET_LOGGERS = ("httpx", "httpcore", "openai")

_HANDLER_NAME = "docbrief-stdout"


def setup_logging(level: str = "INFO") -> None:
    """Route application logs to stdout at ``level``.

    Safe to call more than once: the stdout handler is installed once and
    later calls only change the level.
    """
    root = logging.getLogger()
    root.setLevel(level.upper())
    if not any(h.get_name() == _HANDLER_NAME for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
