"""Logging for the ``reimbursements`` command.

Diagnostics (file paths, step outcomes) go to stderr through the
``reimbursements`` logger; everything the operator is meant to read goes
through the rich console instead. Modules ask for a logger with
:func:`get_logger` and the CLI calls :func:`configure_logging` once, with the
level from ``--log-level`` or ``REIMBURSEMENTS_LOG_LEVEL``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "reimbursements"
LOG_LEVEL_ENV = "REIMBURSEMENTS_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_CONFIGURED = False


def _level_from_str(value: str) -> int | None:
    value = value.strip().upper()
    if value.isdigit():
        return int(value)
    numeric = getattr(logging, value, None)
    return numeric if isinstance(numeric, int) else None


def _parse_level(level: int | str | None) -> int:
    """Resolve ``level``, then the environment, then INFO; bad names fall through."""
    if isinstance(level, int):
        return level
    for candidate in (level, os.getenv(LOG_LEVEL_ENV)):
        if candidate:
            parsed = _level_from_str(candidate)
            if parsed is not None:
                return parsed
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """Send ``reimbursements.*`` records to ``stream``. Later calls are no-ops."""

    global _CONFIGURED
    if _CONFIGURED:
        return

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in list(pkg_logger.handlers):
        if isinstance(h, logging.NullHandler):
            pkg_logger.removeHandler(h)

    resolved = _parse_level(level)
    handler = logging.StreamHandler(stream)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))

    pkg_logger.setLevel(resolved)
    pkg_logger.addHandler(handler)
    pkg_logger.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Logger for a module of this package; silent until the CLI configures output."""

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "LOG_LEVEL_ENV", "DEFAULT_FORMAT"]
