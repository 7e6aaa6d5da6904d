"""Process-wide holder of the active boundary filesystem."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

from lightning_core.fs import BoundaryFileSystem, PathArg
from lightning_core.policy import BoundaryPolicy

_LOGGER = logging.getLogger(__name__)


class BoundaryFileSystemProvider:
    """Own the currently active :class:`BoundaryFileSystem`.

    Readers get the instance with a plain attribute read. Replacement swaps a
    single reference under a lock, so a reader sees either the old or the new
    instance, never anything in between. References obtained before a swap keep
    enforcing their own roots.
    """

    def __init__(self, initial: BoundaryFileSystem) -> None:
        if initial is None:
            raise TypeError("initial filesystem is required")
        self._current = initial
        self._lock = threading.Lock()

    @classmethod
    def from_roots(cls, allowed_roots: Iterable[PathArg]) -> BoundaryFileSystemProvider:
        return cls(BoundaryFileSystem(BoundaryPolicy(allowed_roots)))

    @property
    def current(self) -> BoundaryFileSystem:
        return self._current

    def set_current(self, fs: BoundaryFileSystem) -> None:
        if fs is None:
            raise TypeError("filesystem is required")
        with self._lock:
            self._current = fs
        _LOGGER.info("active boundary replaced: %s", ", ".join(str(root) for root in fs.policy.roots))

    def replace_roots(self, allowed_roots: Iterable[PathArg]) -> BoundaryFileSystem:
        """Build a filesystem for ``allowed_roots``, activate it and return it."""

        fs = BoundaryFileSystem(BoundaryPolicy(allowed_roots))
        self.set_current(fs)
        return fs


__all__ = ["BoundaryFileSystemProvider"]
