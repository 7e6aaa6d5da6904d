"""Exception hierarchy for boundary enforcement and configuration storage."""

from __future__ import annotations

import os


class BoundaryError(Exception):
    """Base class for errors raised by the boundary layer."""


class InvalidPathError(BoundaryError, ValueError):
    """Raised when a path is empty, malformed or cannot be made absolute."""


class BoundaryViolationError(BoundaryError):
    """Raised when a path escapes the allowed roots."""

    def __init__(self, message: str, path: str | os.PathLike[str] | None = None) -> None:
        super().__init__(message)
        self.path = os.fspath(path) if path is not None else None


class ReparsePolicyViolationError(BoundaryViolationError):
    """Raised when a target or one of its ancestors is a symlink, junction or mount point."""


class NotFoundError(BoundaryError, FileNotFoundError):
    """Raised when an operation requires an existing path that is missing."""

    def __init__(self, message: str, path: str | os.PathLike[str] | None = None) -> None:
        super().__init__(message)
        self.path = os.fspath(path) if path is not None else None


class ConfigFileError(BoundaryError, ValueError):
    """Raised when the stored configuration file cannot be parsed."""


__all__ = [
    "BoundaryError",
    "InvalidPathError",
    "BoundaryViolationError",
    "ReparsePolicyViolationError",
    "NotFoundError",
    "ConfigFileError",
]
