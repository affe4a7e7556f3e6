"""Logger factory with one consistent console format for every module."""

from __future__ import annotations

import logging
import sys

from rag_mcp_agent.config import settings

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str, level: int | str | None = None) -> logging.Logger:
    """Return a named logger writing to stdout.

    Args:
        name: Typically ``__name__`` of the calling module.
        level: Explicit level override. Defaults to ``settings.log_level``.
    """

    resolved_level = level if level is not None else settings.log_level.upper()
    logger = logging.getLogger(name)

    if not logger.handlers:
        logger.setLevel(resolved_level)

        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(resolved_level)
        handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT))
        logger.addHandler(handler)

        logger.propagate = False

    return logger
