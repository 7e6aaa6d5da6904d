import logging
import os
import pathlib
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"

# Ensure src/ is importable when running tests without installing the package.
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from lightning_core.fs import BoundaryFileSystem  # noqa: E402
from lightning_core.paths import AppPaths  # noqa: E402
from lightning_core.policy import BoundaryPolicy  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_lightning_home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Point LIGHTNING_HOME at a per-test sandbox so we never touch the real config."""

    home = tmp_path / "home"
    monkeypatch.setenv("LIGHTNING_HOME", str(home))
    yield home


@pytest.fixture(autouse=True)
def _reset_package_logger():
    """Close file handlers attached to the package logger during a test."""

    logger = logging.getLogger("lightning_core")
    level = logger.level
    yield
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.setLevel(level)


@pytest.fixture
def app_paths(_isolate_lightning_home: Path) -> AppPaths:
    return AppPaths(_isolate_lightning_home)


@pytest.fixture
def make_fs() -> Callable[..., BoundaryFileSystem]:
    """Factory building a BoundaryFileSystem over the given roots."""

    def _make(*roots: os.PathLike[str] | str) -> BoundaryFileSystem:
        return BoundaryFileSystem(BoundaryPolicy(list(roots)))

    return _make


@pytest.fixture
def make_symlink() -> Callable[[Path, Path], None]:
    """Create a directory or file symlink, skipping when the platform refuses."""

    def _make(link: Path, target: Path) -> None:
        try:
            link.symlink_to(target, target_is_directory=target.is_dir())
        except (OSError, NotImplementedError) as exc:
            pytest.skip(f"symlinks not supported here: {exc}")

    return _make


@pytest.fixture
def distinct_volumes() -> Callable[[object], str]:
    """Volume resolver treating every root as its own volume."""

    return lambda path: os.fspath(path)


@pytest.fixture
def config_dirs(tmp_path: Path) -> dict[str, Path]:
    """A flat source dir, a repository with a .git marker and a not-yet-created work dir."""

    met = tmp_path / "met"
    met.mkdir()
    (met / "a.met").write_text("met", encoding="utf-8")
    (met / ".cache").mkdir()

    repo = tmp_path / "repo"
    (repo / ".git").mkdir(parents=True)

    work = tmp_path / "work"
    return {"met_source_dir": met, "af_repo_dir": repo, "app_work_dir": work}
