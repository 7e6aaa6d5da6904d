"""Validation of the configured directory roots.

``validate_config`` is a pure function from a configuration to a list of
human-readable findings. It never raises; an empty list means the directories
may become the active boundary.
"""

from __future__ import annotations

import logging
import os
import uuid
from collections.abc import Callable
from itertools import combinations

from lightning_core.attributes import is_hidden_or_system, volume_key
from lightning_core.config import LightningConfig
from lightning_core.errors import BoundaryError, ReparsePolicyViolationError
from lightning_core.fs import BoundaryFileSystem
from lightning_core.pathutil import CanonicalPath, canonicalize, is_network_path, is_same_or_descendant
from lightning_core.paths import AppPaths
from lightning_core.policy import BoundaryPolicy

_LOGGER = logging.getLogger(__name__)

VCS_MARKERS = (".git",)
PROBE_PREFIX = ".lightning-write-probe-"

FIELD_LABELS = {
    "met_source_dir": "MetSourceDir",
    "af_repo_dir": "AfRepoDir",
    "app_work_dir": "AppWorkDir",
}

VolumeKey = Callable[[CanonicalPath], object]


def validate_config(cfg: LightningConfig, *, volume_of: VolumeKey | None = None) -> list[str]:
    """Return every finding for the directory fields of ``cfg``.

    Presence and absoluteness gate the remaining checks. Volume separation is
    skipped once overlap is reported, since overlapping roots always share a
    volume. Flatness and repository shape only run on directories that exist,
    and the writability probe only runs when the roots are disjoint.
    """

    volume_of = volume_of or volume_key
    errors: list[str] = []
    raw = cfg.directories()

    for field, value in raw.items():
        if not value.strip():
            errors.append(f"{FIELD_LABELS[field]} is required.")
    if errors:
        return errors

    roots: dict[str, CanonicalPath] = {}
    for field, value in raw.items():
        label = FIELD_LABELS[field]
        if is_network_path(value):
            errors.append(f"{label} must be a local path, not a network path: {value}")
            continue
        if not os.path.isabs(value):
            errors.append(f"{label} must be an absolute path: {value}")
            continue
        try:
            roots[field] = canonicalize(value)
        except BoundaryError as exc:
            errors.append(f"{label} is not a valid path: {exc}")
    if errors:
        return errors

    met = roots["met_source_dir"]
    af = roots["af_repo_dir"]
    work = roots["app_work_dir"]

    met_exists = os.path.isdir(met)
    af_exists = os.path.isdir(af)
    if not met_exists:
        errors.append(f"MetSourceDir does not exist: {met}")
    if not af_exists:
        errors.append(f"AfRepoDir does not exist: {af}")
    work_usable = not os.path.exists(work) or os.path.isdir(work)
    if not work_usable:
        errors.append(f"AppWorkDir is not a directory: {work}")

    overlap = False
    for (first, first_path), (second, second_path) in combinations(roots.items(), 2):
        if is_same_or_descendant(first_path, second_path) or is_same_or_descendant(second_path, first_path):
            errors.append(f"{FIELD_LABELS[first]} and {FIELD_LABELS[second]} must not overlap.")
            overlap = True

    if not overlap:
        errors.extend(_check_volumes(roots, volume_of))

    if met_exists:
        errors.extend(_check_flat(met))
    if af_exists:
        errors.extend(_check_repo_shape(af))
    if work_usable and not overlap:
        errors.extend(_check_writable(work))

    if errors:
        _LOGGER.debug("config validation found %d problem(s)", len(errors))
    return errors


def boundary_roots(cfg: LightningConfig, paths: AppPaths) -> tuple[str, ...]:
    """Return the roots the runtime boundary is built from once ``cfg`` is valid."""

    return (
        str(paths.config_directory),
        cfg.met_source_dir,
        cfg.af_repo_dir,
        cfg.app_work_dir,
    )


def _check_volumes(roots: dict[str, CanonicalPath], volume_of: VolumeKey) -> list[str]:
    errors: list[str] = []
    volumes: dict[str, object] = {}
    for field, path in roots.items():
        try:
            volumes[field] = volume_of(path)
        except OSError as exc:
            errors.append(f"{FIELD_LABELS[field]} volume could not be determined: {exc}")
    for first, second in combinations(volumes, 2):
        if volumes[first] == volumes[second]:
            errors.append(f"{FIELD_LABELS[first]} and {FIELD_LABELS[second]} must be on different volumes.")
    return errors


def _check_flat(met: CanonicalPath) -> list[str]:
    fs = BoundaryFileSystem(BoundaryPolicy([met]))
    try:
        subdirs = [
            child
            for child in fs.list_directory(met)
            if os.path.isdir(child) and not is_hidden_or_system(child)
        ]
    except (BoundaryError, OSError) as exc:
        return [f"MetSourceDir could not be inspected: {exc}"]
    if subdirs:
        return [f"MetSourceDir must not contain subdirectories (found {len(subdirs)}): {met}"]
    return []


def _check_repo_shape(af: CanonicalPath) -> list[str]:
    fs = BoundaryFileSystem(BoundaryPolicy([af]))
    try:
        fs.ensure_allowed(af)
    except ReparsePolicyViolationError:
        return [f"AfRepoDir must not be a symbolic link or junction: {af}"]
    if any(os.path.lexists(af.joinpath(marker)) for marker in VCS_MARKERS):
        return []
    return [f"AfRepoDir does not look like a repository (missing {', '.join(VCS_MARKERS)}): {af}"]


def _check_writable(work: CanonicalPath) -> list[str]:
    fs = BoundaryFileSystem(BoundaryPolicy([work]))
    probe = work.joinpath(f"{PROBE_PREFIX}{uuid.uuid4().hex}")
    try:
        fs.ensure_directory_exists(work)
        fs.write_all_text(probe, "probe")
        fs.delete_file(probe)
    except (BoundaryError, OSError) as exc:
        _LOGGER.debug("write probe failed for %s: %s", work, exc)
        return [f"AppWorkDir is not writable: {work} ({exc})"]
    return []


__all__ = ["FIELD_LABELS", "VCS_MARKERS", "boundary_roots", "validate_config"]
