"""Centralized logging configuration for the ``promptpad`` package.

- ``configure_logging(level)``: attach a single stderr handler to the package
  root logger. Called once by entrypoints (the CLI, the app lifespan).
- ``get_logger(name)``: acquire a logger, making sure the package root logger
  has at least a ``NullHandler`` when nothing has been configured.

Library modules never attach their own handlers.
"""

from __future__ import annotations

import logging
import os
import sys

_PKG_LOGGER_NAME = "promptpad"
_CONFIGURED = False


def _parse_level(level: int | str | None) -> int:
    if level is None:
        level = os.getenv("PROMPTPAD_LOG_LEVEL")
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        # Accept numeric strings or standard level names (INFO/DEBUG/etc.).
        level = level.strip().upper()
        if level.isdigit():
            return int(level)
        numeric = getattr(logging, level, None)
        if isinstance(numeric, int):
            return numeric
    return logging.INFO


_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def configure_logging(level: int | str | None = None) -> None:
    """Configure the package root logger exactly once.

    ``level`` is an ``int`` or level name. If ``None``, falls back to
    ``PROMPTPAD_LOG_LEVEL`` when set, otherwise ``logging.INFO``. Output goes
    to stderr.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    logger = logging.getLogger(_PKG_LOGGER_NAME)

    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT))

    logger.setLevel(_parse_level(level))
    logger.addHandler(handler)
    logger.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger by name, silent until an entrypoint configures output."""

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
