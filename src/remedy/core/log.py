# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Logging setup for scripts built on the Remedy client.

Library modules only ever call ``logging.getLogger(__name__)``; nothing is
emitted until a script calls :func:`configure_logging`. Two handlers hang off
the ``remedy`` logger: a ``screen`` handler on stderr and, optionally, a
``file`` handler. Each has its own threshold and the logger itself runs at the
more verbose of the two.
"""

from __future__ import annotations

import logging
import sys
from typing import Iterable, Optional, Union

ROOT_LOGGER_NAME = "remedy"

SCREEN_FORMAT = "%(name)s: %(message)s"
FILE_FORMAT = "[%(asctime)s] %(levelname)s " + SCREEN_FORMAT

SCREEN_HANDLER = "screen"
FILE_HANDLER = "file"

LevelLike = Union[int, str]


def _level(value: Optional[LevelLike], default: int) -> int:
    if value is None or value == "":
        return default
    if isinstance(value, int):
        return value
    resolved = logging.getLevelName(str(value).upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {value!r}")
    return resolved


def configure_logging(
    level: Optional[LevelLike] = logging.ERROR,
    logfile: Optional[str] = None,
    logfile_level: Optional[LevelLike] = logging.INFO,
    *,
    stream=None,
) -> logging.Logger:
    """
    (Re)initialize the ``screen`` and ``file`` handlers on the ``remedy`` logger.

    Handlers installed by an earlier call are removed first, so this is safe to
    call again after loading a configuration file.

    :param level: Threshold of the stderr handler (default: ``ERROR``).
    :type level: int or str or None
    :param logfile: Optional path of a log file to append to.
    :type logfile: str or None
    :param logfile_level: Threshold of the file handler (default: ``INFO``).
    :type logfile_level: int or str or None
    :param stream: Stream for the screen handler; defaults to ``sys.stderr``.
    :return: The configured ``remedy`` logger.
    :rtype: logging.Logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        if handler.get_name() in (SCREEN_HANDLER, FILE_HANDLER):
            logger.removeHandler(handler)
            handler.close()

    screen_level = _level(level, logging.ERROR)
    screen = logging.StreamHandler(stream or sys.stderr)
    screen.set_name(SCREEN_HANDLER)
    screen.setFormatter(logging.Formatter(SCREEN_FORMAT))
    screen.setLevel(screen_level)
    logger.addHandler(screen)

    effective = screen_level
    if logfile:
        file_level = _level(logfile_level, logging.INFO)
        fh = logging.FileHandler(logfile, encoding="utf-8")
        fh.set_name(FILE_HANDLER)
        fh.setFormatter(logging.Formatter(FILE_FORMAT))
        fh.setLevel(file_level)
        logger.addHandler(fh)
        effective = min(effective, file_level)

    logger.setLevel(effective)
    logger.debug("logging configured: screen=%s file=%s", logging.getLevelName(screen_level), logfile or "-")
    return logger


def configure_from_config(config) -> logging.Logger:
    """Configure logging from a :class:`~remedy.core.config.RemedyConfig`."""
    return configure_logging(config.debug_level, config.logfile, config.logfile_level)


def more_logging(count: int, handlers: Optional[Iterable[str]] = None) -> bool:
    """
    Make logging more verbose by ``count`` levels.

    Lowers the threshold of the named handlers (default: just ``screen``) and,
    where needed, of the logger itself. Levels never go below ``DEBUG``.

    :param count: Number of levels to step down, e.g. the number of ``-v`` flags.
    :type count: int
    :param handlers: Handler names to adjust.
    :type handlers: iterable of str or None
    :return: True if anything was adjusted.
    :rtype: bool
    """
    if count <= 0:
        return False
    names = set(handlers or (SCREEN_HANDLER,))
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    step = 10 * int(count)
    adjusted = False
    for handler in logger.handlers:
        if handler.get_name() in names:
            handler.setLevel(max(logging.DEBUG, handler.level - step))
            adjusted = True
    if adjusted:
        lowest = min(h.level for h in logger.handlers)
        if logger.level > lowest:
            logger.setLevel(lowest)
        logger.debug("increased loglevel by %d for %s", count, ", ".join(sorted(names)))
    return adjusted
