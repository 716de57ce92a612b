"""TOML configuration loading for swhid."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .directory import DirectoryBuildOptions, WalkOptions
from .models import PermissionPolicy, PermissionsSourceKind

DEFAULT_CONFIG_FILENAME = "swhid.toml"


class ConfigError(RuntimeError):
    """Raised when a configuration file cannot be parsed or validated."""


def _expand_path(raw: str | os.PathLike[str] | Path, *, base_dir: Path) -> Path:
    """Return an absolute ``Path`` by expanding env vars and user segments."""

    text = str(raw)
    expanded = Path(os.path.expandvars(text)).expanduser()
    if expanded.is_absolute():
        return expanded.resolve(strict=False)
    return (base_dir / expanded).resolve(strict=False)


def _enum_value(enum_cls, raw: Any, key: str):
    try:
        return enum_cls(raw)
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ConfigError(f"[directory] {key} must be one of: {allowed} (got {raw!r})") from exc


def _directory_options(raw: Mapping[str, Any], *, base_dir: Path) -> DirectoryBuildOptions:
    exclude = raw.get("exclude", [])
    if isinstance(exclude, str):
        exclude = [exclude]
    if not isinstance(exclude, list) or not all(isinstance(item, str) for item in exclude):
        raise ConfigError("[directory] exclude must be a list of strings")

    manifest_raw = raw.get("permissions_manifest")
    try:
        return DirectoryBuildOptions(
            permissions_source=_enum_value(
                PermissionsSourceKind, raw.get("permissions_source", "auto"), "permissions_source"
            ),
            permissions_policy=_enum_value(
                PermissionPolicy, raw.get("permissions_policy", "best-effort"), "permissions_policy"
            ),
            permissions_manifest_path=(
                _expand_path(manifest_raw, base_dir=base_dir) if manifest_raw is not None else None
            ),
            walk_options=WalkOptions(
                follow_symlinks=raw.get("follow_symlinks", False),
                exclude_suffixes=tuple(exclude),
            ),
        )
    except ValidationError as exc:
        raise ConfigError(f"Invalid [directory] table: {exc}") from exc


class Config(BaseModel):
    """Fully parsed configuration file."""

    model_config = ConfigDict(frozen=True)

    config_path: Path | None = None
    directory: DirectoryBuildOptions = Field(default_factory=DirectoryBuildOptions)


def load_config(path: Path | None = None) -> Config:
    """Load and validate a configuration file.

    Args:
        path: Optional path to the TOML file, or a directory holding ``swhid.toml``.
            Defaults to ``swhid.toml`` in the current working directory; when that
            file is absent the built-in defaults are returned.
    """

    config_path = _resolve_config_path(path)
    if config_path is None:
        return Config()

    try:
        with config_path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Configuration file '{config_path}' is not valid TOML: {exc}") from exc

    directory_section = data.get("directory") or {}
    if not isinstance(directory_section, dict):
        raise ConfigError("[directory] must be a table")

    directory = _directory_options(directory_section, base_dir=config_path.parent)
    return Config(config_path=config_path, directory=directory)


def _resolve_config_path(path: Path | None) -> Path | None:
    if path is None:
        default = Path.cwd() / DEFAULT_CONFIG_FILENAME
        return default.resolve(strict=False) if default.is_file() else None

    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Configuration file '{path}' does not exist")
    if path.is_dir():
        candidate = path / DEFAULT_CONFIG_FILENAME
        if not candidate.exists():
            raise ConfigError(f"Expected to find '{DEFAULT_CONFIG_FILENAME}' inside '{path}', but none was located")
        path = candidate

    return path.resolve(strict=False)
