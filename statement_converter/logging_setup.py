"""Logging configuration for the ``statement_converter`` package.

Library modules only call ``get_logger(__name__)``. Handlers are attached
once, by the CLI or a host application, through ``configure_logging``.
"""

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "statement_converter"
_LEVEL_ENV = "STATEMENT_CONVERTER_LOG_LEVEL"
_configured = False


def _parse_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if level is None:
        level = os.getenv(_LEVEL_ENV, "WARNING")
    level = level.strip().upper()
    if level.isdigit():
        return int(level)
    numeric = getattr(logging, level, None)
    return numeric if isinstance(numeric, int) else logging.WARNING


def configure_logging(level: int | str | None = None, stream: IO[str] = sys.stderr) -> None:
    """Attach a single stream handler to the package logger.

    Args:
        level: Level number or name. Defaults to the
               ``STATEMENT_CONVERTER_LOG_LEVEL`` environment variable, then WARNING.
        stream: Where log records go; stderr keeps stdout free for output.
    """
    global _configured
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _configured:
        logger.setLevel(_parse_level(level))
        return

    for handler in list(logger.handlers):
        if isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(_parse_level(level))
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a module logger; silent until ``configure_logging`` runs."""
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _configured and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
