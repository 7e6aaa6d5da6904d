"""Platform capability checks on live filesystem nodes.

These are the only places that look at OS-level metadata: link/junction flags,
hidden/system flags and volume identity. Callers stay platform neutral.
"""

from __future__ import annotations

import os
import stat
import sys

from lightning_core.pathutil import CanonicalPath, PathInput

_IS_WINDOWS = sys.platform == "win32"


def is_reparse_point(path: PathInput | CanonicalPath) -> bool:
    """Return True when the existing node at ``path`` redirects elsewhere.

    Symlinks count on every platform. On Windows any node flagged with
    ``FILE_ATTRIBUTE_REPARSE_POINT`` (junctions, volume mount points) counts as
    well. A missing node is not a reparse point.
    """

    try:
        st = os.lstat(path)
    except FileNotFoundError:
        return False
    if stat.S_ISLNK(st.st_mode):
        return True
    if _IS_WINDOWS:
        attrs = getattr(st, "st_file_attributes", 0)
        return bool(attrs & stat.FILE_ATTRIBUTE_REPARSE_POINT)
    return False


def is_hidden_or_system(path: PathInput | CanonicalPath) -> bool:
    """Return True for entries the OS marks as hidden or system."""

    if _IS_WINDOWS:
        st = os.lstat(path)
        attrs = getattr(st, "st_file_attributes", 0)
        return bool(attrs & (stat.FILE_ATTRIBUTE_HIDDEN | stat.FILE_ATTRIBUTE_SYSTEM))
    return os.path.basename(os.fspath(path)).startswith(".")


def volume_key(path: PathInput | CanonicalPath) -> str:
    """Return an identifier for the volume ``path`` lives on.

    Windows compares drive letters or UNC shares. Elsewhere there are no drives,
    so the device id of the nearest existing node stands in for the mount.
    """

    raw = os.path.abspath(os.fspath(path))
    if _IS_WINDOWS:
        return os.path.splitdrive(raw)[0].upper()

    current = raw
    while not os.path.exists(current):
        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent
    return f"dev:{os.stat(current).st_dev}"


__all__ = ["is_reparse_point", "is_hidden_or_system", "volume_key"]
