"""Logging for the CPA-005 converter.

Converter modules only call ``get_logger("cpa005.<module>")`` and stay silent
until a front end calls ``configure_logging()``. The CLI logs to stderr; the
Streamlit app, whose stderr is usually out of sight, can send its log to a
file through ``CPA005_LOG_FILE``.
"""

import logging
import os
import sys

_PKG_LOGGER_NAME = "cpa005"
LEVEL_ENV = "CPA005_LOG_LEVEL"
FILE_ENV = "CPA005_LOG_FILE"
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def _parse_level(level):
    if level is None:
        level = os.getenv(LEVEL_ENV)
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        level = level.strip().upper()
        if level.isdigit():
            return int(level)
        numeric = getattr(logging, level, None)
        if isinstance(numeric, int):
            return numeric
    return logging.INFO


def _installed_handler(logger):
    for h in logger.handlers:
        if getattr(h, "_cpa005", False):
            return h
    return None


def configure_logging(level=None, *, log_file=None, fmt=None, stream=sys.stderr):
    """Attach one handler to the ``cpa005`` logger and return it.

    ``level`` is an int or a level name, defaulting to ``CPA005_LOG_LEVEL``
    and then INFO. ``log_file`` (default ``CPA005_LOG_FILE``) appends to a
    file instead of writing to ``stream``. Streamlit reruns the app script on
    every interaction, so a second call returns the existing handler.
    """
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    existing = _installed_handler(logger)
    if existing is not None:
        return existing

    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    log_file = log_file or os.getenv(FILE_ENV)
    if log_file:
        handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler(stream)
    handler._cpa005 = True
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))

    logger.setLevel(_parse_level(level))
    logger.addHandler(handler)
    logger.propagate = False
    return handler


def reset_logging():
    """Detach the handler installed by ``configure_logging``."""
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    handler = _installed_handler(logger)
    if handler is not None:
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


def get_logger(name):
    """Return a logger, giving the package logger a ``NullHandler`` until configured."""
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
