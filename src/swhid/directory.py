"""Directory identifiers, built from explicit entries or from a tree on disk."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field

from .content import Content
from .core import Swhid
from .errors import DuplicateEntryNameError, InvalidByteInNameError, SwhidIOError, SymlinkLoopError
from .filesystem import (
    as_bytes_path,
    detect_entry_type,
    display,
    list_directory,
    read_bytes,
    read_link_bytes,
    stat_entry,
)
from .hashing import DIGEST_SIZE, hash_object
from .manifest import first_duplicate
from .models import EntryExec, EntryPerms, EntryType, ObjectType, PermissionPolicy, PermissionsSourceKind
from .permissions import PermissionsSource, make_permissions_source, resolve_file_permissions

logger = logging.getLogger(__name__)

_FORBIDDEN_NAME_BYTES = (0x00, 0x2F)


@dataclass(frozen=True, slots=True)
class Entry:
    """A named child of a directory: raw name, tree mode and child digest."""

    name: bytes
    mode: EntryPerms
    target: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", bytes(self.name))
        object.__setattr__(self, "mode", EntryPerms(self.mode))
        object.__setattr__(self, "target", bytes(self.target))
        if len(self.target) != DIGEST_SIZE:
            raise ValueError(f"entry target must be a {DIGEST_SIZE}-byte digest, got {len(self.target)} bytes")

    @property
    def is_dir(self) -> bool:
        return self.mode is EntryPerms.DIRECTORY

    @property
    def sort_key(self) -> bytes:
        """Name with a trailing ``/`` for directories, as git orders tree entries."""

        return self.name + b"/" if self.is_dir else self.name


@dataclass(frozen=True, slots=True)
class ManifestEntry:
    """Explicit ``(name, permission, target)`` triple supplied by a caller."""

    name: bytes
    perms: EntryPerms
    target: bytes

    def to_entry(self) -> Entry:
        return Entry(self.name, self.perms, self.target)


class Directory:
    """Sorted, duplicate-free list of entries."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Iterable[Entry] = ()) -> None:
        ordered = sorted(entries, key=lambda entry: entry.sort_key)

        duplicate = first_duplicate(entry.name for entry in ordered)
        if duplicate is not None:
            raise DuplicateEntryNameError(duplicate)

        for entry in ordered:
            for byte in _FORBIDDEN_NAME_BYTES:
                if byte in entry.name:
                    raise InvalidByteInNameError(byte, entry.name)

        self._entries: tuple[Entry, ...] = tuple(ordered)

    @classmethod
    def from_manifest_entries(cls, entries: Iterable[ManifestEntry]) -> "Directory":
        """Build a directory without touching the filesystem."""

        return cls(entry.to_entry() for entry in entries)

    @property
    def entries(self) -> tuple[Entry, ...]:
        return self._entries

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Directory):
            return NotImplemented
        return self._entries == other._entries

    def __hash__(self) -> int:
        return hash(self._entries)

    def __repr__(self) -> str:
        return f"Directory({list(self._entries)!r})"

    def manifest(self) -> bytes:
        out = bytearray()
        for entry in self._entries:
            out += b"%o " % int(entry.mode)
            out += entry.name
            out += b"\x00"
            out += entry.target
        return bytes(out)

    def swhid(self) -> Swhid:
        return Swhid(ObjectType.DIRECTORY, hash_object(ObjectType.DIRECTORY.header_label, self.manifest()))


class WalkOptions(BaseModel):
    """Options controlling how a tree on disk is traversed."""

    model_config = ConfigDict(frozen=True)

    follow_symlinks: bool = False
    exclude_suffixes: tuple[str, ...] = ()


class DirectoryBuildOptions(BaseModel):
    """Walk options plus the executable-bit strategy."""

    model_config = ConfigDict(frozen=True)

    permissions_source: PermissionsSourceKind = PermissionsSourceKind.AUTO
    permissions_policy: PermissionPolicy = PermissionPolicy.BEST_EFFORT
    permissions_manifest_path: Path | None = None
    walk_options: WalkOptions = Field(default_factory=WalkOptions)


class DiskDirectoryBuilder:
    """Hashes a directory tree on disk, children before parents.

    Excluded names are dropped before any I/O. Sockets, FIFOs and device
    nodes are skipped. With ``follow_symlinks`` a symlink is hashed as what it
    points to, and re-entering a directory that is already being walked
    raises :class:`SymlinkLoopError`.
    """

    def __init__(
        self,
        root: Path | str,
        options: DirectoryBuildOptions | None = None,
        *,
        permissions_source: PermissionsSource | None = None,
    ) -> None:
        self.options = options or DirectoryBuildOptions()
        self._root = os.path.abspath(as_bytes_path(root))
        self.root = Path(display(self._root))
        self._excludes = tuple(as_bytes_path(suffix) for suffix in self.options.walk_options.exclude_suffixes)
        if permissions_source is None:
            permissions_source = make_permissions_source(
                self.options.permissions_source,
                self.root,
                self.options.permissions_manifest_path,
            )
        self.permissions_source = permissions_source
        self._warnings: list[str] = []

    def build(self) -> Directory:
        st = stat_entry(self._root, follow_symlinks=True)
        if detect_entry_type(st) is not EntryType.DIRECTORY:
            raise SwhidIOError(f"'{self.root}' is not a directory")
        return self._build_directory(self._root, st, frozenset())

    def swhid(self) -> Swhid:
        return self.build().swhid()

    def pull_warnings(self) -> list[str]:
        warnings = list(self._warnings)
        self._warnings.clear()
        return warnings

    def _build_directory(self, path: bytes, st: os.stat_result, ancestors: frozenset) -> Directory:
        key = (st.st_dev, st.st_ino)
        if key in ancestors:
            raise SymlinkLoopError(display(path))
        ancestors = ancestors | {key}

        follow = self.options.walk_options.follow_symlinks
        entries: list[Entry] = []
        for name in sorted(list_directory(path)):
            if self._excludes and name.endswith(self._excludes):
                logger.debug("excluding '%s'", display(name))
                continue

            child = os.path.join(path, name)
            child_st = stat_entry(child, follow_symlinks=follow)
            kind = detect_entry_type(child_st)

            if kind is EntryType.DIRECTORY:
                subtree = self._build_directory(child, child_st, ancestors)
                entries.append(Entry(name, EntryPerms.DIRECTORY, subtree.swhid().digest))
            elif kind is EntryType.FILE:
                content = Content(read_bytes(child))
                entries.append(Entry(name, self._file_perms(child), content.swhid().digest))
            elif kind is EntryType.SYMLINK:
                content = Content(read_link_bytes(child))
                entries.append(Entry(name, EntryPerms.SYMLINK, content.swhid().digest))
            else:
                logger.debug("skipping special file '%s'", display(child))

        return Directory(entries)

    def _file_perms(self, path: bytes) -> EntryPerms:
        file_path = Path(display(path))
        probe = self.permissions_source.executable_of(file_path)
        policy = self.options.permissions_policy
        if probe is EntryExec.UNKNOWN and policy is PermissionPolicy.BEST_EFFORT:
            self._warnings.append(f"Executable bit of '{file_path}' is unknown; hashed as non-executable")
        return resolve_file_permissions(probe, policy, file_path)
