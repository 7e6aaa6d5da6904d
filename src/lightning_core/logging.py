"""Logging setup for LIGHTNING.

The CLI logs to stderr; ``configure_file_logger`` additionally writes the
``lightning_core`` logger to ``<config>/logs/lightning.log``. The log directory
is created through the boundary filesystem like any other application path.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from lightning_core.config import LogLevel
from lightning_core.fs import BoundaryFileSystem

PACKAGE_LOGGER = "lightning_core"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_base_logging(*, debug_enabled: bool, package_level: LogLevel | str) -> None:
    root_level = logging.INFO if debug_enabled else logging.WARNING

    logging.basicConfig(
        level=root_level,
        stream=sys.__stderr__,
        format=LOG_FORMAT,
        force=True,
    )
    for handler in logging.getLogger().handlers:
        handler.setLevel(logging.DEBUG if debug_enabled else root_level)

    level = logging.DEBUG if debug_enabled else _to_logging_level(package_level)
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)


def configure_file_logger(
    log_path: Path,
    *,
    log_level: LogLevel | str = LogLevel.INFO,
    fs: BoundaryFileSystem | None = None,
) -> logging.Logger:
    """Attach a file handler to the package logger and return it.

    Repeated calls for the same file do not add duplicate handlers.
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    level_value = _to_logging_level(log_level)
    logger.setLevel(level_value)

    target = os.path.abspath(log_path)
    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == target:
            handler.setLevel(level_value)
            return logger

    if fs is not None:
        fs.ensure_allowed(log_path)
        fs.ensure_directory_exists(Path(log_path).parent)
    else:
        Path(log_path).parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(log_path, encoding="utf-8")
    handler.setLevel(level_value)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger


def _to_logging_level(value: LogLevel | str) -> int:
    """Map a config level onto the stdlib constant; unknown values fall back to WARNING."""

    try:
        level = LogLevel(value)
    except ValueError:
        return logging.WARNING
    return logging.getLevelNamesMapping()[level.value.upper()]


__all__ = [
    "configure_base_logging",
    "configure_file_logger",
    "_to_logging_level",
]
