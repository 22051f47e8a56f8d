"""
Logging setup for ecFlow Light.

Library modules only create module level loggers; handlers are installed by
the command line tool (or the embedding application) through
:func:`configure_logging`.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, Union

LOGGER_NAME = "ecflow_light"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_level_pinned = False


def parse_level(level: Union[str, int, None], default: int = logging.WARNING) -> int:
    """
    Convert a level name ("debug", "INFO", ...) or number into a logging level.

    Unknown names fall back to ``default``.
    """
    if level is None:
        return default
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else default


def set_level(level: Union[str, int, None]) -> None:
    """
    Change the level of the package logger, leaving handlers untouched.

    Ignored when :func:`configure_logging` was given an explicit level, so a
    level from the YAML configuration never overrides the command line or
    the environment.
    """
    if level is not None and not _level_pinned:
        logging.getLogger(LOGGER_NAME).setLevel(parse_level(level))


def configure_logging(level: Union[str, int, None] = None, stream: Optional[object] = None) -> logging.Logger:
    """
    Install a single stream handler on the package logger.

    Calling this more than once replaces the previous handler instead of
    stacking duplicates.

    Parameters
    ----------
    level
        Level name or number; defaults to WARNING. An explicit level takes
        precedence over later :func:`set_level` calls.
    stream
        Output stream; defaults to ``sys.stderr``.

    Returns
    -------
    logging.Logger
        The configured package logger.
    """
    global _level_pinned
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if getattr(handler, "_ecflow_light", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._ecflow_light = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.setLevel(parse_level(level))
    _level_pinned = level is not None
    return logger
