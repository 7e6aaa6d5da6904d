import functools
import logging
from datetime import UTC, datetime
from pathlib import Path

import pytest

from lightning_core.config import LightningConfig, TomlConfigStore
from lightning_core.errors import BoundaryViolationError
from lightning_core.pathutil import canonicalize
from lightning_core.provider import BoundaryFileSystemProvider
from lightning_core.setup_session import SetupSession
from lightning_core.validation import validate_config

FIXED_NOW = datetime(2025, 1, 2, 3, 4, 5, tzinfo=UTC)


@pytest.fixture
def provider(app_paths) -> BoundaryFileSystemProvider:
    return BoundaryFileSystemProvider.from_roots([app_paths.config_directory])


@pytest.fixture
def store(provider, app_paths) -> TomlConfigStore:
    return TomlConfigStore(provider, app_paths)


@pytest.fixture
def session(store, provider, app_paths, distinct_volumes) -> SetupSession:
    return SetupSession(
        store,
        provider,
        app_paths,
        validator=functools.partial(validate_config, volume_of=distinct_volumes),
        clock=lambda: FIXED_NOW,
    )


def _as_str(dirs: dict[str, Path]) -> dict[str, str]:
    return {key: str(value) for key, value in dirs.items()}


def test_first_run_defaults_work_dir_and_stays_invalid(session, provider, app_paths) -> None:
    initial = provider.current

    errors = session.initialize()

    assert app_paths.config_directory.is_dir()
    assert session.app_work_dir == str(app_paths.default_work_dir)
    assert "MetSourceDir is required." in errors
    assert not session.is_valid
    assert session.status == "Not saved (config invalid)."
    assert session.validation_summary == "Invalid (not saved)."
    assert provider.current is initial
    assert not app_paths.config_path.exists()


def test_valid_update_swaps_boundary_and_saves(session, provider, store, app_paths, config_dirs) -> None:
    session.initialize()
    config_only = provider.current

    errors = session.update(**_as_str(config_dirs))

    assert errors == []
    assert session.is_valid
    assert session.last_saved_at == FIXED_NOW
    assert session.status == "Auto-saved at 03:04:05."
    assert session.validation_summary == "Valid (saved 2025-01-02 03:04:05)."
    assert config_dirs["app_work_dir"].is_dir()
    assert provider.current is not config_only
    assert provider.current.policy.roots == (
        canonicalize(app_paths.config_directory),
        canonicalize(config_dirs["met_source_dir"]),
        canonicalize(config_dirs["af_repo_dir"]),
        canonicalize(config_dirs["app_work_dir"]),
    )

    loaded = store.try_load()
    assert loaded is not None
    assert loaded.met_source_dir == str(config_dirs["met_source_dir"])
    assert loaded.app_work_dir == str(config_dirs["app_work_dir"])

    with pytest.raises(BoundaryViolationError):
        config_only.ensure_allowed(config_dirs["met_source_dir"])


def test_update_trims_and_skips_unchanged(session, config_dirs) -> None:
    session.initialize()
    session.update(**{key: f"  {value}  " for key, value in _as_str(config_dirs).items()})

    assert session.met_source_dir == str(config_dirs["met_source_dir"])

    calls: list[LightningConfig] = []
    session._validate = lambda cfg: calls.append(cfg) or []
    session.update(met_source_dir=str(config_dirs["met_source_dir"]))

    assert calls == []


def test_invalid_update_keeps_previous_boundary(session, provider, app_paths, tmp_path: Path) -> None:
    session.initialize()
    before = provider.current

    errors = session.update(
        met_source_dir=str(tmp_path / "x"),
        af_repo_dir=str(tmp_path / "x" / "y"),
        app_work_dir=str(tmp_path / "w"),
    )

    assert errors
    assert provider.current is before
    assert not app_paths.config_path.exists()


def test_initialize_loads_existing_config(store, provider, app_paths, config_dirs, distinct_volumes) -> None:
    cfg = LightningConfig(**_as_str(config_dirs), enable_vs_code_integration=True)
    store.save(cfg)

    session = SetupSession(
        store,
        provider,
        app_paths,
        validator=functools.partial(validate_config, volume_of=distinct_volumes),
        clock=lambda: FIXED_NOW,
    )
    errors = session.initialize()

    assert errors == []
    assert session.met_source_dir == cfg.met_source_dir
    assert session.af_repo_dir == cfg.af_repo_dir
    assert session.app_work_dir == cfg.app_work_dir
    assert session.current_config().enable_vs_code_integration is True
    assert session.status == "Auto-saved at 03:04:05."


def test_initialize_records_last_write_time_when_config_invalid(store, provider, app_paths, tmp_path: Path) -> None:
    store.save(LightningConfig(met_source_dir=str(tmp_path / "missing")))
    session = SetupSession(store, provider, app_paths, validator=lambda cfg: ["nope"])

    session.initialize()

    assert session.last_saved_at is not None
    assert session.last_saved_at.tzinfo is not None
    assert session.app_work_dir == str(app_paths.default_work_dir)


def test_unreadable_config_is_treated_as_missing(session, app_paths, caplog) -> None:
    app_paths.config_directory.mkdir(parents=True)
    app_paths.config_path.write_text("version = [", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="lightning_core"):
        session.initialize()

    assert "ignoring unreadable config" in caplog.text
    assert not session.is_valid
    assert session.met_source_dir == ""


def test_summary_before_first_save(session, app_paths) -> None:
    session.is_valid = True

    assert session.validation_summary == f"Valid (will save to: {app_paths.config_path})"


def test_non_utf8_config_is_treated_as_missing(session, app_paths, caplog) -> None:
    app_paths.config_directory.mkdir(parents=True)
    app_paths.config_path.write_bytes(b"\xff\xfe")

    with caplog.at_level(logging.WARNING, logger="lightning_core"):
        session.initialize()

    assert "ignoring unreadable config" in caplog.text
    assert session.status == "No config found yet. Pick folders to create one."
