"""Headless setup flow: load, edit, validate and auto-save the configuration.

The session starts under whatever boundary the provider currently holds
(normally the configuration directory only). Once the three directories
validate, it builds the runtime boundary from them, activates it and saves.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from lightning_core.config import ConfigStore, LightningConfig
from lightning_core.errors import ConfigFileError
from lightning_core.fs import build_boundary_filesystem
from lightning_core.paths import AppPaths
from lightning_core.provider import BoundaryFileSystemProvider
from lightning_core.validation import boundary_roots, validate_config

_LOGGER = logging.getLogger(__name__)

Validator = Callable[[LightningConfig], list[str]]


class SetupSession:
    def __init__(
        self,
        config_store: ConfigStore,
        provider: BoundaryFileSystemProvider,
        paths: AppPaths,
        *,
        validator: Validator = validate_config,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = config_store
        self._provider = provider
        self._paths = paths
        self._validate = validator
        self._clock = clock or (lambda: datetime.now(UTC))
        self._suspend_auto_save = False

        self._met_source_dir = ""
        self._af_repo_dir = ""
        self._app_work_dir = ""
        self._loaded: LightningConfig | None = None

        self.errors: list[str] = []
        self.is_valid = False
        self.last_saved_at: datetime | None = None
        self.status = "Not saved yet."

    @property
    def met_source_dir(self) -> str:
        return self._met_source_dir

    @property
    def af_repo_dir(self) -> str:
        return self._af_repo_dir

    @property
    def app_work_dir(self) -> str:
        return self._app_work_dir

    @property
    def config_path(self) -> str:
        return str(self._paths.config_path)

    @property
    def validation_summary(self) -> str:
        if not self.is_valid:
            return "Invalid (not saved)."
        if self.last_saved_at is None:
            return f"Valid (will save to: {self.config_path})"
        return f"Valid (saved {self.last_saved_at:%Y-%m-%d %H:%M:%S})."

    def initialize(self) -> list[str]:
        """Load the stored config (if any) and validate it, saving when valid."""

        self._suspend_auto_save = True
        try:
            fs = self._provider.current
            fs.ensure_directory_exists(self._paths.config_directory)

            cfg: LightningConfig | None
            try:
                cfg = self._store.try_load()
            except ConfigFileError as exc:
                _LOGGER.warning("ignoring unreadable config: %s", exc)
                cfg = None

            if cfg is not None:
                self._loaded = cfg
                self.update(
                    met_source_dir=cfg.met_source_dir,
                    af_repo_dir=cfg.af_repo_dir,
                    app_work_dir=cfg.app_work_dir,
                )
                if fs.file_exists(self._paths.config_path):
                    self.last_saved_at = fs.get_last_write_time(self._paths.config_path)

            if not self._app_work_dir.strip():
                self.update(app_work_dir=str(self._paths.default_work_dir))

            self.status = (
                "No config found yet. Pick folders to create one."
                if cfg is None
                else "Config loaded. Changes auto-save when valid."
            )
        finally:
            self._suspend_auto_save = False

        return self.revalidate_and_maybe_save()

    def update(
        self,
        *,
        met_source_dir: str | None = None,
        af_repo_dir: str | None = None,
        app_work_dir: str | None = None,
    ) -> list[str]:
        """Change any of the directory fields; revalidates when something changed."""

        changed = False
        for name, value in (
            ("_met_source_dir", met_source_dir),
            ("_af_repo_dir", af_repo_dir),
            ("_app_work_dir", app_work_dir),
        ):
            if value is None:
                continue
            normalized = value.strip()
            if getattr(self, name) != normalized:
                setattr(self, name, normalized)
                changed = True

        if changed and not self._suspend_auto_save:
            return self.revalidate_and_maybe_save()
        return list(self.errors)

    def current_config(self) -> LightningConfig:
        base = self._loaded or LightningConfig()
        return base.model_copy(
            update={
                "met_source_dir": self._met_source_dir,
                "af_repo_dir": self._af_repo_dir,
                "app_work_dir": self._app_work_dir,
            }
        )

    def revalidate_and_maybe_save(self) -> list[str]:
        cfg = self.current_config()

        self.errors = list(self._validate(cfg))
        self.is_valid = not self.errors

        if not self.is_valid:
            self.status = "Not saved (config invalid)."
            _LOGGER.info("config invalid, not saved: %s", "; ".join(self.errors))
            return list(self.errors)

        runtime_fs = build_boundary_filesystem(boundary_roots(cfg, self._paths))
        runtime_fs.ensure_directory_exists(cfg.app_work_dir)
        self._provider.set_current(runtime_fs)

        self._store.save(cfg)
        self._loaded = cfg

        self.last_saved_at = self._clock()
        self.status = f"Auto-saved at {self.last_saved_at:%H:%M:%S}."
        _LOGGER.info("config saved to %s", self.config_path)
        return []


__all__ = ["SetupSession"]
