"""Allowed-root boundary policy."""

from __future__ import annotations

from collections.abc import Iterable

from lightning_core.pathutil import CanonicalPath, PathInput, canonicalize, is_same_or_descendant


class BoundaryPolicy:
    """Immutable set of allowed roots answering containment queries.

    Roots are canonicalized eagerly; duplicates and nested roots are accepted.
    Instances never change after construction and can be shared across threads.
    """

    __slots__ = ("_roots",)

    def __init__(self, allowed_roots: Iterable[PathInput | CanonicalPath]) -> None:
        if allowed_roots is None:
            raise TypeError("allowed_roots is required")
        if isinstance(allowed_roots, str):
            allowed_roots = [allowed_roots]
        self._roots: tuple[CanonicalPath, ...] = tuple(canonicalize(root) for root in allowed_roots)

    @property
    def roots(self) -> tuple[CanonicalPath, ...]:
        return self._roots

    def contains(self, path: CanonicalPath) -> bool:
        """Return True if an already canonical ``path`` lies under any root."""

        return any(is_same_or_descendant(path, root) for root in self._roots)

    def is_allowed(self, path: PathInput | CanonicalPath) -> bool:
        return self.contains(canonicalize(path))

    def __repr__(self) -> str:
        joined = ", ".join(str(root) for root in self._roots)
        return f"BoundaryPolicy([{joined}])"


__all__ = ["BoundaryPolicy"]
