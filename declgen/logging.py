"""Logging for declgen runs.

Records emitted while a directive is being evaluated (clang diagnostics,
dialect detection, extractor debug output) are prefixed with the template
location of that directive, so a warning can be traced back to the line that
triggered the header parse.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import Iterator, Optional

_LOGGER_NAME = "declgen"

_CONSOLE_FORMAT = "[declgen] %(levelname)s %(where)s%(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(where)s%(message)s"

_current_location: ContextVar[Optional[str]] = ContextVar("declgen_location", default=None)


class DirectiveLocationFilter(logging.Filter):
    """Sets ``record.where`` to ``"<template>:<line>: "`` inside a directive, else ``""``."""

    def filter(self, record: logging.LogRecord) -> bool:
        location = getattr(record, "location", None) or _current_location.get()
        record.where = f"{location}: " if location else ""
        return True


@contextmanager
def directive_context(location: str) -> Iterator[None]:
    """Attribute log records emitted in this block to the directive at ``location``."""
    token = _current_location.set(location)
    try:
        yield
    finally:
        _current_location.reset(token)


def get_logger(name: str | None = None) -> logging.Logger:
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Send declgen records to stderr (never stdout, which carries the artifact).

    ``verbose`` enables per-directive DEBUG output; ``log_file`` adds a
    timestamped copy of every record.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    location_filter = DirectiveLocationFilter()
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    formats = [_CONSOLE_FORMAT]
    if log_file is not None:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
        formats.append(_FILE_FORMAT)
    for handler, fmt in zip(handlers, formats):
        handler.setLevel(level)
        handler.addFilter(location_filter)
        handler.setFormatter(logging.Formatter(fmt))
        logger.addHandler(handler)
    return logger


__all__ = [
    "DirectiveLocationFilter",
    "configure_logging",
    "directive_context",
    "get_logger",
]
