"""Lexical path canonicalization and containment arithmetic.

Nothing in this module touches the filesystem. Symlinks and junctions are left
alone on purpose; :mod:`lightning_core.fs` detects them with live attribute
checks.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

from lightning_core.errors import InvalidPathError

CASE_INSENSITIVE = sys.platform in ("win32", "darwin")

PathInput = str | os.PathLike[str]


@dataclass(frozen=True, eq=False)
class CanonicalPath:
    """Absolute, normalized path with comparison rules fixed at construction."""

    value: str
    case_sensitive: bool = not CASE_INSENSITIVE
    key: str = field(init=False, repr=False)

    def __post_init__(self) -> None:
        key = os.path.normcase(self.value)
        if not self.case_sensitive:
            key = key.casefold()
        object.__setattr__(self, "key", key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CanonicalPath):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        return self.value

    def __fspath__(self) -> str:
        return self.value

    @property
    def drive(self) -> str:
        return os.path.splitdrive(self.value)[0]

    @property
    def is_root(self) -> bool:
        return os.path.dirname(self.value) == self.value

    @property
    def parent(self) -> CanonicalPath:
        return CanonicalPath(os.path.dirname(self.value), self.case_sensitive)

    def joinpath(self, *parts: str) -> CanonicalPath:
        return canonicalize(os.path.join(self.value, *parts))


def canonicalize(path: PathInput | CanonicalPath | None) -> CanonicalPath:
    """Return the canonical form of ``path``.

    Relative input is anchored at the current working directory, ``.``/``..``
    segments are collapsed and trailing separators dropped (drive and volume
    roots keep exactly one).
    """

    if isinstance(path, CanonicalPath):
        return path
    if path is None:
        raise InvalidPathError("path is required")
    try:
        raw = os.fspath(path)
    except TypeError as exc:
        raise InvalidPathError(f"unsupported path value: {path!r}") from exc
    if not isinstance(raw, str):
        raise InvalidPathError(f"path must be text, got {type(raw).__name__}")
    if not raw.strip():
        raise InvalidPathError("path is empty")
    if "\x00" in raw:
        raise InvalidPathError(f"path contains a NUL character: {raw!r}")

    try:
        full = os.path.abspath(raw)
    except (OSError, ValueError) as exc:
        raise InvalidPathError(f"cannot make path absolute: {raw!r}") from exc

    if not os.path.isabs(full):
        raise InvalidPathError(f"cannot make path absolute: {raw!r}")

    full = _strip_trailing_separators(full)
    return CanonicalPath(full)


def is_same_or_descendant(candidate: PathInput | CanonicalPath, root: PathInput | CanonicalPath) -> bool:
    """Return True when ``candidate`` is ``root`` or nested inside it."""

    candidate_path = canonicalize(candidate)
    root_path = canonicalize(root)

    if candidate_path.key == root_path.key:
        return True

    prefix = root_path.key
    if not prefix.endswith(_separators()):
        prefix += os.sep
    return candidate_path.key.startswith(prefix)


def is_network_path(path: PathInput | CanonicalPath) -> bool:
    """Return True for UNC style (``\\\\server\\share``) or ``//host`` paths."""

    raw = os.fspath(path)
    if raw.startswith(("\\\\", "//")):
        return True
    drive = os.path.splitdrive(raw)[0]
    return drive.startswith(("\\\\", "//"))


def _separators() -> tuple[str, ...]:
    if os.altsep:
        return (os.sep, os.altsep)
    return (os.sep,)


def _strip_trailing_separators(full: str) -> str:
    drive, rest = os.path.splitdrive(full)
    stripped = rest.rstrip("".join(_separators()))
    if not stripped:
        # volume root: keep exactly one separator
        return drive + os.sep
    return drive + stripped


__all__ = [
    "CASE_INSENSITIVE",
    "CanonicalPath",
    "PathInput",
    "canonicalize",
    "is_same_or_descendant",
    "is_network_path",
]
