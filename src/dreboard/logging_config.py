"""Logging setup for dreboard.

Modules obtain loggers through :func:`get_logger`, which keeps every logger
under the ``dreboard`` namespace. Messages are short event names; details go
in ``extra`` and are rendered as ``key=value`` pairs by
:class:`StructuredFormatter`.
"""

import logging
import sys
import threading
from typing import Any, Optional

__all__ = ["StructuredFormatter", "get_logger", "configure_logging", "reset_logging"]

_LOGGER_PREFIX = "dreboard"

_STDLIB_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "asctime", "taskName"}


class StructuredFormatter(logging.Formatter):
    """Format a record as ``ts level logger event key=value ...``."""

    def __init__(self):
        super().__init__(fmt="%(asctime)s %(levelname)s %(name)s %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = [
            f"{key}={value}"
            for key, value in vars(record).items()
            if key not in _STDLIB_KEYS
        ]
        if extras:
            line = f"{line} {' '.join(extras)}"
        return line


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the dreboard namespace."""
    if name == _LOGGER_PREFIX or name.startswith(f"{_LOGGER_PREFIX}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int | str = logging.WARNING,
    stream: Any = None,
    handler: Optional[logging.Handler] = None,
) -> None:
    """Configure the dreboard logger hierarchy (idempotent)."""
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    root_logger = logging.getLogger(_LOGGER_PREFIX)
    root_logger.setLevel(level)

    h = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
    h.setFormatter(StructuredFormatter())
    root_logger.addHandler(h)


def reset_logging() -> None:
    """Reset logging configuration. FOR TESTING ONLY."""
    global _configured
    with _lock:
        _configured = False
    logger = logging.getLogger(_LOGGER_PREFIX)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
