"""Console entrypoint for LIGHTNING configuration.

Provides config inspection, validation and a headless setup command. The
process starts with a boundary covering only the configuration directory;
``setup`` widens it once the configured directories validate.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

from lightning_core import __version__
from lightning_core.config import LightningConfig, LogLevel, TomlConfigStore
from lightning_core.errors import BoundaryError
from lightning_core.logging import configure_base_logging, configure_file_logger
from lightning_core.paths import AppPaths, default_app_paths
from lightning_core.provider import BoundaryFileSystemProvider
from lightning_core.setup_session import SetupSession
from lightning_core.validation import validate_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lightning-core",
        description="LIGHTNING directory configuration and filesystem boundary",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Show version and exit.",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging on stderr.")
    parser.add_argument(
        "--log-level",
        choices=[e.value for e in LogLevel],
        dest="log_level",
        help="Log level override",
    )
    parser.add_argument("--home", help="Configuration directory (overrides LIGHTNING_HOME)")

    subparsers = parser.add_subparsers(dest="command")

    config_parser = subparsers.add_parser("config", help="Config helpers")
    config_sub = config_parser.add_subparsers(dest="config_cmd", required=True)
    config_sub.add_parser("path", help="Print config path")
    config_sub.add_parser("show", help="Print the stored config")

    validate_parser = subparsers.add_parser("validate", help="Validate stored config with optional overrides")
    _add_directory_arguments(validate_parser)

    setup_parser = subparsers.add_parser("setup", help="Set directories, validate and save when valid")
    _add_directory_arguments(setup_parser)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    paths = AppPaths(Path(args.home)) if args.home else default_app_paths()
    # The startup boundary only covers the config directory itself.
    paths.config_directory.parent.mkdir(parents=True, exist_ok=True)
    provider = BoundaryFileSystemProvider.from_roots([paths.config_directory])
    store = TomlConfigStore(provider, paths)

    configure_base_logging(debug_enabled=args.debug, package_level=args.log_level or LogLevel.WARNING)

    command = args.command
    if command is None:
        parser.print_help()
        return 1

    try:
        if command == "config":
            return _run_config(store, paths, args)
        if command == "validate":
            return _run_validate(store, args)
        if command == "setup":
            return _run_setup(store, provider, paths, args)
    except (BoundaryError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    parser.error(f"unknown command {command}")
    return 1


def _add_directory_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--met-source-dir", dest="met_source_dir", help="Directory containing .met files")
    parser.add_argument("--af-repo-dir", dest="af_repo_dir", help="AF repository root")
    parser.add_argument("--app-work-dir", dest="app_work_dir", help="Working directory for intermediate files")


def _collect_overrides(args: argparse.Namespace) -> dict[str, Any]:
    values = {
        "met_source_dir": args.met_source_dir,
        "af_repo_dir": args.af_repo_dir,
        "app_work_dir": args.app_work_dir,
    }
    return {key: value for key, value in values.items() if value is not None}


def _run_config(store: TomlConfigStore, paths: AppPaths, args: argparse.Namespace) -> int:
    if args.config_cmd == "path":
        print(paths.config_path)
        return 0
    if args.config_cmd == "show":
        cfg = store.try_load()
        if cfg is None:
            print("no config saved yet", file=sys.stderr)
            return 1
        print(cfg.model_dump_json(indent=2))
        return 0
    return 1


def _run_validate(store: TomlConfigStore, args: argparse.Namespace) -> int:
    cfg = store.try_load()
    overrides = _collect_overrides(args)
    if cfg is None:
        cfg = LightningConfig(**overrides)
    else:
        cfg = cfg.model_copy(update={key: value.strip() for key, value in overrides.items()})

    errors = validate_config(cfg)
    if errors:
        for message in errors:
            print(f"- {message}")
        return 1
    print("config is valid")
    return 0


def _run_setup(
    store: TomlConfigStore,
    provider: BoundaryFileSystemProvider,
    paths: AppPaths,
    args: argparse.Namespace,
) -> int:
    level = LogLevel.DEBUG if args.debug else (args.log_level or LogLevel.INFO)
    configure_file_logger(paths.log_path, log_level=level, fs=provider.current)

    session = SetupSession(store, provider, paths)
    session.initialize()
    overrides = _collect_overrides(args)
    if overrides:
        session.update(**overrides)

    print(session.status)
    print(session.validation_summary)
    for message in session.errors:
        print(f"- {message}")
    return 0 if session.is_valid else 1


if __name__ == "__main__":
    sys.exit(main())
