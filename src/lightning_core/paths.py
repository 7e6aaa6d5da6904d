"""Common path utilities for LIGHTNING."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

CONFIG_FILE_NAME = "config.toml"


def get_lightning_home() -> Path:
    """Return the configuration directory, honoring LIGHTNING_HOME if set."""

    env_path = os.environ.get("LIGHTNING_HOME")
    if env_path:
        return Path(env_path).expanduser()
    if sys.platform == "win32":
        local_app_data = os.environ.get("LOCALAPPDATA")
        base = Path(local_app_data) if local_app_data else Path.home() / "AppData" / "Local"
        return base / "EmpyreanCodex" / "LIGHTNING"
    return Path.home() / ".lightning"


@dataclass(frozen=True)
class AppPaths:
    """Well-known locations under the configuration directory."""

    config_directory: Path

    @property
    def config_path(self) -> Path:
        return self.config_directory / CONFIG_FILE_NAME

    @property
    def default_work_dir(self) -> Path:
        return self.config_directory / "work"

    @property
    def log_path(self) -> Path:
        return self.config_directory / "logs" / "lightning.log"


def default_app_paths() -> AppPaths:
    return AppPaths(get_lightning_home())


__all__ = ["AppPaths", "CONFIG_FILE_NAME", "default_app_paths", "get_lightning_home"]
