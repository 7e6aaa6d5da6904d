"""Boundary-checked filesystem façade.

Every public operation canonicalizes its argument, checks containment against
the policy, sweeps the existing ancestry for reparse points and only then
touches the disk.
"""

from __future__ import annotations

import logging
import os
from datetime import UTC, datetime
from pathlib import Path

from lightning_core.attributes import is_reparse_point
from lightning_core.errors import BoundaryViolationError, NotFoundError, ReparsePolicyViolationError
from lightning_core.pathutil import CanonicalPath, PathInput, canonicalize
from lightning_core.policy import BoundaryPolicy

_LOGGER = logging.getLogger(__name__)

PathArg = PathInput | CanonicalPath


class BoundaryFileSystem:
    """Single choke point for path-based I/O confined to a :class:`BoundaryPolicy`."""

    __slots__ = ("_policy",)

    def __init__(self, policy: BoundaryPolicy) -> None:
        if policy is None:
            raise TypeError("policy is required")
        self._policy = policy

    @property
    def policy(self) -> BoundaryPolicy:
        return self._policy

    def ensure_allowed(self, path: PathArg) -> CanonicalPath:
        """Validate ``path`` without performing any I/O besides the ancestor sweep."""

        target = canonicalize(path)
        if not self._policy.contains(target):
            _LOGGER.debug("denied path outside allowed roots: %s", target)
            raise BoundaryViolationError(f"path is outside allowed roots: {target}", target)
        self._sweep_ancestors(target)
        return target

    def file_exists(self, path: PathArg) -> bool:
        target = self.ensure_allowed(path)
        return os.path.isfile(target)

    def directory_exists(self, path: PathArg) -> bool:
        target = self.ensure_allowed(path)
        return os.path.isdir(target)

    def read_all_text(self, path: PathArg) -> str:
        target = self.ensure_allowed(path)
        try:
            return Path(target).read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise NotFoundError(f"file not found: {target}", target) from exc

    def ensure_directory_exists(self, path: PathArg) -> None:
        """Create ``path`` and any missing parents, each of which must be allowed.

        The ancestry is swept again once the directory exists, so a link that
        appeared while creating it is still caught.
        """

        target = self.ensure_allowed(path)

        missing: list[CanonicalPath] = []
        node = target
        while not os.path.lexists(node):
            missing.append(node)
            parent = node.parent
            if parent == node:
                break
            node = parent

        for directory in reversed(missing):
            if not self._policy.contains(directory):
                _LOGGER.debug("refusing to create directory outside allowed roots: %s", directory)
                raise BoundaryViolationError(
                    f"cannot create directory outside allowed roots: {directory}", directory
                )
            try:
                os.mkdir(directory)
            except FileExistsError:
                continue
            _LOGGER.debug("created directory %s", directory)

        if not os.path.isdir(target):
            raise NotADirectoryError(f"not a directory: {target}")

        self._sweep_ancestors(target)

    def write_all_text(self, path: PathArg, contents: str) -> None:
        """Write ``contents`` as UTF-8, creating the parent directory if needed.

        A target that turns out to be a reparse point after the write raises
        :class:`ReparsePolicyViolationError`; the write has already happened by
        then and the caller must treat the file as suspect.
        """

        target = self.ensure_allowed(path)
        parent = target.parent
        if parent != target and not os.path.isdir(parent):
            self.ensure_directory_exists(parent)

        Path(target).write_text(contents, encoding="utf-8")

        if is_reparse_point(target):
            _LOGGER.warning("written file became a reparse point: %s", target)
            raise ReparsePolicyViolationError(f"written file is a reparse point: {target}", target)

    def get_last_write_time(self, path: PathArg) -> datetime:
        target = self.ensure_allowed(path)
        try:
            st = os.stat(target)
        except FileNotFoundError as exc:
            raise NotFoundError(f"path not found: {target}", target) from exc
        return datetime.fromtimestamp(st.st_mtime, tz=UTC)

    def delete_file(self, path: PathArg) -> None:
        target = self.ensure_allowed(path)
        try:
            os.remove(target)
        except FileNotFoundError as exc:
            raise NotFoundError(f"file not found: {target}", target) from exc

    def list_directory(self, path: PathArg) -> list[CanonicalPath]:
        """Return the direct children of a directory, sorted by comparison key."""

        target = self.ensure_allowed(path)
        try:
            with os.scandir(target) as entries:
                names = [entry.name for entry in entries]
        except FileNotFoundError as exc:
            raise NotFoundError(f"directory not found: {target}", target) from exc
        return sorted((target.joinpath(name) for name in names), key=lambda child: child.key)

    def _sweep_ancestors(self, target: CanonicalPath) -> None:
        node = target
        while not os.path.lexists(node):
            parent = node.parent
            if parent == node:
                return
            node = parent

        while True:
            if is_reparse_point(node):
                _LOGGER.debug("denied path through reparse point %s: %s", node, target)
                raise ReparsePolicyViolationError(f"reparse point in path: {node}", node)
            parent = node.parent
            if parent == node or not os.path.lexists(parent):
                return
            node = parent

    def __repr__(self) -> str:
        return f"BoundaryFileSystem({self._policy!r})"


def build_boundary_filesystem(allowed_roots: list[PathArg] | tuple[PathArg, ...]) -> BoundaryFileSystem:
    """Build a filesystem confined to ``allowed_roots``."""

    return BoundaryFileSystem(BoundaryPolicy(allowed_roots))


__all__ = ["BoundaryFileSystem", "PathArg", "build_boundary_filesystem"]
