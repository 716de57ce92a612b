"""Executable-bit probing for directory hashing.

The executable bit is the only part of a directory manifest that some hosts
cannot observe (Windows has no such bit). A *permissions source* answers
whether a file is executable, possibly with :attr:`EntryExec.UNKNOWN`, and
:func:`resolve_file_permissions` applies a :class:`PermissionPolicy` to turn
that answer into a tree mode.
"""

from __future__ import annotations

import logging
import os
import stat
import tomllib
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Iterable, Protocol

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from tomli_w import dump as toml_dump

from .errors import PermissionManifestError, PermissionResolutionError, SwhidIOError
from .models import EntryExec, EntryPerms, PermissionPolicy, PermissionsSourceKind

logger = logging.getLogger(__name__)

VCS_MARKER = ".git"


class PermissionsSource(Protocol):
    def executable_of(self, path: Path) -> EntryExec:
        """Return whether ``path`` is executable, or ``EntryExec.UNKNOWN``."""
        ...


def resolve_file_permissions(probe: EntryExec, policy: PermissionPolicy, path: Path) -> EntryPerms:
    """Map a probe result to a file mode according to ``policy``.

    An unknown bit under best-effort is not reported here; the caller decides
    how to surface it.
    """

    if probe is EntryExec.EXECUTABLE:
        return EntryPerms.EXECUTABLE_FILE
    if probe is EntryExec.NOT_EXECUTABLE:
        return EntryPerms.FILE
    if policy is PermissionPolicy.STRICT:
        raise PermissionResolutionError(
            f"Cannot determine the executable bit of '{path}' on this platform. "
            "Use --permissions-source git-index or git-tree, provide a permission manifest "
            "(--permissions-source manifest --permissions-manifest PATH), "
            "or use --permissions-policy best-effort."
        )
    return EntryPerms.FILE


class FilesystemPermissionsSource:
    """Reads the execute bits from the host filesystem (POSIX only)."""

    def executable_of(self, path: Path) -> EntryExec:
        if os.name != "posix":
            return EntryExec.UNKNOWN
        try:
            mode = os.stat(path).st_mode
        except OSError as exc:
            raise SwhidIOError(f"Failed to read metadata for '{path}': {exc}") from exc
        return EntryExec.known(bool(mode & 0o111))


class HeuristicPermissionsSource(FilesystemPermissionsSource):
    """Reserved for extension/shebang detection; currently the filesystem source."""


def normalize_manifest_path(raw: str) -> str:
    """Return ``raw`` with forward slashes, rejecting absolute and escaping paths."""

    if PurePosixPath(raw).is_absolute() or PureWindowsPath(raw).is_absolute():
        raise PermissionManifestError(f"Permission manifest entry '{raw}' must be a relative path")
    if PureWindowsPath(raw).drive or raw.startswith(("/", "\\")):
        raise PermissionManifestError(f"Permission manifest entry '{raw}' must be a relative path")

    normalized = raw.replace("\\", "/")
    parts = [part for part in normalized.split("/") if part not in ("", ".")]
    if ".." in parts:
        raise PermissionManifestError(f"Permission manifest entry '{raw}' must not contain '..'")
    if not parts:
        raise PermissionManifestError("Permission manifest entry has an empty path")
    return "/".join(parts)


class PermissionRecord(BaseModel):
    """One ``[[file]]`` record of a sidecar permission manifest."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: str
    executable: bool

    @field_validator("path")
    @classmethod
    def _normalize(cls, value: str) -> str:
        return normalize_manifest_path(value)


class PermissionManifest:
    """Sidecar table mapping relative paths to executable bits."""

    def __init__(self, entries: dict[str, bool] | None = None) -> None:
        self._entries: dict[str, bool] = dict(entries or {})

    @classmethod
    def load(cls, path: Path) -> "PermissionManifest":
        try:
            with Path(path).open("rb") as handle:
                data = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise PermissionManifestError(f"Permission manifest '{path}' is not valid TOML: {exc}") from exc
        except OSError as exc:
            raise SwhidIOError(f"Failed to read permission manifest '{path}': {exc}") from exc

        return cls.from_records(data.get("file", []), source=str(path))

    @classmethod
    def from_records(cls, records: Iterable[object], *, source: str = "<memory>") -> "PermissionManifest":
        entries: dict[str, bool] = {}
        for raw in records:
            try:
                record = PermissionRecord.model_validate(raw)
            except ValidationError as exc:
                raise PermissionManifestError(f"Invalid record in permission manifest '{source}': {exc}") from exc
            if record.path in entries:
                raise PermissionManifestError(f"Permission manifest '{source}' lists '{record.path}' twice")
            entries[record.path] = record.executable
        return cls(entries)

    @classmethod
    def from_directory(cls, root: Path) -> "PermissionManifest":
        """Record the executable bit of every regular file below ``root``."""

        source = FilesystemPermissionsSource()
        entries: dict[str, bool] = {}
        root = Path(root)
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames.sort()
            for name in sorted(filenames):
                file_path = Path(dirpath) / name
                if not stat.S_ISREG(file_path.lstat().st_mode):
                    continue
                probe = source.executable_of(file_path)
                if not probe.is_known:
                    raise PermissionResolutionError(
                        f"Cannot record the executable bit of '{file_path}' on this platform"
                    )
                entries[file_path.relative_to(root).as_posix()] = probe is EntryExec.EXECUTABLE
        return cls(entries)

    def get(self, relative_path: str) -> bool | None:
        return self._entries.get(relative_path.replace("\\", "/"))

    def items(self) -> Iterable[tuple[str, bool]]:
        return self._entries.items()

    def __len__(self) -> int:
        return len(self._entries)

    def save(self, path: Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            "file": [{"path": name, "executable": executable} for name, executable in sorted(self._entries.items())]
        }
        with path.open("wb") as handle:
            toml_dump(payload, handle)


class ManifestPermissionsSource:
    """Answers from a :class:`PermissionManifest`; paths are taken relative to ``root``."""

    def __init__(self, manifest: PermissionManifest, root: Path | None = None) -> None:
        self.manifest = manifest
        self.root = Path(os.path.abspath(root)) if root is not None else None

    def executable_of(self, path: Path) -> EntryExec:
        relative = Path(path)
        if self.root is not None and relative.is_absolute():
            try:
                relative = relative.relative_to(self.root)
            except ValueError:
                return EntryExec.UNKNOWN
        executable = self.manifest.get(relative.as_posix())
        if executable is None:
            return EntryExec.UNKNOWN
        return EntryExec.known(executable)


def find_repository_root(start: Path) -> Path | None:
    """Return the closest directory at or above ``start`` holding a ``.git`` marker."""

    current = Path(os.path.abspath(start))
    while True:
        if (current / VCS_MARKER).exists():
            return current
        if current.parent == current:
            return None
        current = current.parent


class AutoPermissionsSource:
    """Uses the enclosing git index when there is one, the filesystem otherwise.

    The choice is made once, when the source is created. A ``.git`` marker
    that does not open as a repository is skipped and the search goes on
    from its parent.
    """

    def __init__(self, root: Path) -> None:
        self.inner: PermissionsSource = FilesystemPermissionsSource()
        self.kind = PermissionsSourceKind.FILESYSTEM

        repo_root = find_repository_root(root)
        while repo_root is not None:
            from .git import GitIndexPermissionsSource

            try:
                self.inner = GitIndexPermissionsSource(repo_root)
            except SwhidIOError as exc:
                logger.debug("ignoring unusable repository marker at '%s': %s", repo_root, exc)
                if repo_root.parent == repo_root:
                    break
                repo_root = find_repository_root(repo_root.parent)
                continue
            logger.debug("using git index of '%s' for executable bits", repo_root)
            self.kind = PermissionsSourceKind.GIT_INDEX
            return

        logger.debug("no usable repository above '%s'; using filesystem executable bits", root)

    def executable_of(self, path: Path) -> EntryExec:
        return self.inner.executable_of(path)


def make_permissions_source(
    kind: PermissionsSourceKind,
    root: Path,
    manifest_path: Path | None = None,
) -> PermissionsSource:
    """Build the permissions source selected by ``kind`` for a walk rooted at ``root``."""

    if kind is PermissionsSourceKind.AUTO:
        return AutoPermissionsSource(root)
    if kind is PermissionsSourceKind.FILESYSTEM:
        return FilesystemPermissionsSource()
    if kind is PermissionsSourceKind.HEURISTIC:
        return HeuristicPermissionsSource()
    if kind is PermissionsSourceKind.MANIFEST:
        if manifest_path is None:
            raise PermissionResolutionError(
                "A permission manifest path is required when the permissions source is 'manifest'"
            )
        return ManifestPermissionsSource(PermissionManifest.load(manifest_path), root)

    from .git import GitIndexPermissionsSource, GitTreePermissionsSource

    repo_root = find_repository_root(root)
    if repo_root is None:
        raise PermissionResolutionError(f"No git repository found at or above '{root}'")
    if kind is PermissionsSourceKind.GIT_INDEX:
        return GitIndexPermissionsSource(repo_root)
    return GitTreePermissionsSource(repo_root)
