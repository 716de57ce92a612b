"""Filesystem helpers for the directory walker.

Names are handled as raw bytes (``os.fsencode``) so that file names which
are not valid in the host encoding still hash to the bytes stored on disk.
"""

from __future__ import annotations

import os
import stat
from pathlib import Path

from .errors import SwhidIOError
from .models import EntryType


def detect_entry_type(st: os.stat_result) -> EntryType:
    """Determine the ``EntryType`` described by a stat result."""

    if stat.S_ISLNK(st.st_mode):
        return EntryType.SYMLINK
    if stat.S_ISDIR(st.st_mode):
        return EntryType.DIRECTORY
    if stat.S_ISREG(st.st_mode):
        return EntryType.FILE
    return EntryType.OTHER


def stat_entry(path: bytes, *, follow_symlinks: bool) -> os.stat_result:
    try:
        return os.stat(path, follow_symlinks=follow_symlinks)
    except OSError as exc:
        raise SwhidIOError(f"Failed to read metadata for '{display(path)}': {exc}") from exc


def list_directory(path: bytes) -> list[bytes]:
    """Return the raw names found in ``path``."""

    try:
        with os.scandir(path) as entries:
            return [entry.name for entry in entries]
    except OSError as exc:
        raise SwhidIOError(f"Failed to read directory '{display(path)}': {exc}") from exc


def read_bytes(path: bytes) -> bytes:
    try:
        with open(path, "rb") as handle:
            return handle.read()
    except OSError as exc:
        raise SwhidIOError(f"Failed to read file '{display(path)}': {exc}") from exc


def read_link_bytes(path: bytes) -> bytes:
    """Return the raw target of the symlink at ``path``."""

    try:
        return os.readlink(path)
    except OSError as exc:
        raise SwhidIOError(f"Failed to read symlink '{display(path)}': {exc}") from exc


def as_bytes_path(path: Path | str | bytes) -> bytes:
    return os.fsencode(path)


def display(path: bytes) -> str:
    return os.fsdecode(path)
