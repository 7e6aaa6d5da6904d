"""Configuration record and TOML-backed store for LIGHTNING.

The store never touches the disk directly: every read and write goes through
the provider's current :class:`~lightning_core.fs.BoundaryFileSystem`.
"""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from enum import Enum
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from lightning_core.errors import ConfigFileError
from lightning_core.paths import AppPaths
from lightning_core.provider import BoundaryFileSystemProvider

CONFIG_VERSION = 1


class LogLevel(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LightningConfig(BaseModel):
    """Persisted LIGHTNING settings.

    Only the three directory fields matter to the boundary layer; the rest is
    carried through untouched.
    """

    model_config = ConfigDict(frozen=True, validate_default=True, extra="forbid")

    version: int = CONFIG_VERSION
    met_source_dir: str = ""
    af_repo_dir: str = ""
    app_work_dir: str = ""
    enable_vs_code_integration: bool = False
    log_level: LogLevel = LogLevel.INFO

    @field_validator("version")
    @classmethod
    def _validate_version(cls, value: int) -> int:
        if value < 1:
            raise ValueError("version must be >= 1")
        return value

    @field_validator("met_source_dir", "af_repo_dir", "app_work_dir", mode="before")
    @classmethod
    def _strip_dir(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, str):
            return value.strip()
        return value

    def directories(self) -> dict[str, str]:
        return {
            "met_source_dir": self.met_source_dir,
            "af_repo_dir": self.af_repo_dir,
            "app_work_dir": self.app_work_dir,
        }


class ConfigStore(Protocol):
    def try_load(self) -> LightningConfig | None: ...

    def save(self, config: LightningConfig) -> None: ...


class TomlConfigStore:
    """Load and save :class:`LightningConfig` as ``config.toml``."""

    def __init__(self, provider: BoundaryFileSystemProvider, paths: AppPaths) -> None:
        self._provider = provider
        self._paths = paths

    def try_load(self) -> LightningConfig | None:
        fs = self._provider.current
        path = self._paths.config_path
        if not fs.file_exists(path):
            return None
        try:
            text = fs.read_all_text(path)
        except UnicodeDecodeError as exc:
            raise ConfigFileError(f"{path}: not valid UTF-8: {exc}") from exc
        return parse_config(text, source=str(path))

    def save(self, config: LightningConfig) -> None:
        fs = self._provider.current
        fs.ensure_directory_exists(self._paths.config_directory)
        fs.write_all_text(self._paths.config_path, render_config(config))


def parse_config(text: str, *, source: str = "<config>") -> LightningConfig:
    """Parse TOML text into a config; unknown keys are ignored."""

    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigFileError(f"{source}: invalid TOML: {exc}") from exc

    values: dict[str, Any] = {}
    version = data.get("version")
    if version is not None:
        values["version"] = version

    for key in ("met_source_dir", "af_repo_dir", "app_work_dir"):
        value = _get_config_value(data, "directories", key)
        if value is not None:
            values[key] = value

    vs_code = _get_config_value(data, "features", "enable_vs_code_integration")
    if vs_code is not None:
        values["enable_vs_code_integration"] = vs_code

    log_level = _coerce_log_level(_get_config_value(data, "logging", "log_level"))
    if log_level is not None:
        values["log_level"] = log_level

    try:
        return LightningConfig(**values)
    except ValidationError as exc:
        raise ConfigFileError(f"{source}: invalid configuration: {exc}") from exc


def render_config(config: LightningConfig) -> str:
    sections: list[str] = [f"version = {config.version}"]

    _append_section(sections, "directories", config.directories())
    _append_section(sections, "features", {"enable_vs_code_integration": config.enable_vs_code_integration})
    _append_section(sections, "logging", {"log_level": config.log_level})

    return "\n\n".join(filter(None, sections)) + "\n"


def _get_config_value(config: Mapping[str, Any], section: str, key: str) -> Any:
    section_data = config.get(section)
    if not isinstance(section_data, dict):
        return None
    return section_data.get(key)


def _coerce_log_level(value: Any) -> LogLevel | None:
    if isinstance(value, LogLevel):
        return value
    if isinstance(value, str):
        try:
            return LogLevel(value.strip().lower())
        except ValueError:
            return None
    return None


def _toml_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    for raw, code in (("\n", "\\n"), ("\r", "\\r"), ("\t", "\\t")):
        escaped = escaped.replace(raw, code)
    return f'"{escaped}"'


def _append_section(parts: list[str], name: str, values: Mapping[str, Any]) -> None:
    filtered = {k: v for k, v in values.items() if v is not None}
    if not filtered:
        return
    lines = [f"[{name}]"]
    for key, val in filtered.items():
        if isinstance(val, Enum):
            lines.append(f"{key} = {_toml_string(str(val.value))}")
        elif isinstance(val, str):
            lines.append(f"{key} = {_toml_string(val)}")
        elif isinstance(val, bool):
            lines.append(f"{key} = {'true' if val else 'false'}")
        else:
            lines.append(f"{key} = {val}")
    parts.append("\n".join(lines))


__all__ = [
    "CONFIG_VERSION",
    "ConfigStore",
    "LightningConfig",
    "LogLevel",
    "TomlConfigStore",
    "parse_config",
    "render_config",
]
