from __future__ import annotations

from pathlib import Path
from textwrap import dedent

import pytest

from swhid.config import DEFAULT_CONFIG_FILENAME, ConfigError, load_config
from swhid.models import PermissionPolicy, PermissionsSourceKind


def _write_config(tmp_path: Path, body: str) -> Path:
    config_path = tmp_path / DEFAULT_CONFIG_FILENAME
    config_path.write_text(dedent(body))
    return config_path


def test_load_config_happy_path(tmp_path: Path, fake_home: Path) -> None:
    config_path = _write_config(
        tmp_path,
        """
        [directory]
        follow_symlinks = true
        exclude = [".pyc", "~"]
        permissions_source = "manifest"
        permissions_policy = "strict"
        permissions_manifest = "~/perms.toml"
        """,
    )

    config = load_config(config_path)

    assert config.config_path == config_path.resolve(strict=False)
    options = config.directory
    assert options.walk_options.follow_symlinks is True
    assert options.walk_options.exclude_suffixes == (".pyc", "~")
    assert options.permissions_source is PermissionsSourceKind.MANIFEST
    assert options.permissions_policy is PermissionPolicy.STRICT
    assert options.permissions_manifest_path == fake_home / "perms.toml"


def test_relative_manifest_path_uses_config_directory(tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path,
        """
        [directory]
        permissions_manifest = "meta/perms.toml"
        """,
    )

    config = load_config(config_path)
    assert config.directory.permissions_manifest_path == (tmp_path / "meta" / "perms.toml").resolve(strict=False)


def test_environment_variables_are_expanded(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SWHID_TEST_DIR", str(tmp_path / "env"))
    config_path = _write_config(
        tmp_path,
        """
        [directory]
        permissions_manifest = "$SWHID_TEST_DIR/perms.toml"
        """,
    )

    assert load_config(config_path).directory.permissions_manifest_path == (tmp_path / "env" / "perms.toml").resolve(
        strict=False
    )


def test_empty_config_uses_defaults(tmp_path: Path) -> None:
    config = load_config(_write_config(tmp_path, ""))
    assert config.directory.permissions_source is PermissionsSourceKind.AUTO
    assert config.directory.permissions_policy is PermissionPolicy.BEST_EFFORT
    assert config.directory.walk_options.follow_symlinks is False
    assert config.directory.permissions_manifest_path is None


def test_missing_default_file_means_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    config = load_config()
    assert config.config_path is None
    assert config.directory.permissions_source is PermissionsSourceKind.AUTO


def test_default_file_in_working_directory_is_used(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _write_config(tmp_path, '[directory]\npermissions_policy = "strict"\n')
    monkeypatch.chdir(tmp_path)
    assert load_config().directory.permissions_policy is PermissionPolicy.STRICT


def test_explicit_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="does not exist"):
        load_config(tmp_path / "nope.toml")


def test_directory_argument_resolves_default_file(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path, '[directory]\nexclude = ".o"\n')
    config = load_config(tmp_path)
    assert config.config_path == config_path.resolve(strict=False)
    assert config.directory.walk_options.exclude_suffixes == (".o",)


def test_directory_without_default_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Expected to find"):
        load_config(tmp_path)


@pytest.mark.parametrize(
    "body",
    [
        '[directory]\npermissions_source = "svn"\n',
        '[directory]\npermissions_policy = "lenient"\n',
        "[directory]\nexclude = [1, 2]\n",
        '[directory]\nfollow_symlinks = "sometimes"\n',
        'directory = "flat"\n',
        "[directory\n",
    ],
)
def test_invalid_configs_raise(tmp_path: Path, body: str) -> None:
    with pytest.raises(ConfigError):
        load_config(_write_config(tmp_path, body))
