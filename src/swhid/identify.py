"""Identify or verify an arbitrary path on disk."""

from __future__ import annotations

import logging
from pathlib import Path

from .content import Content
from .core import Swhid
from .directory import DirectoryBuildOptions, DiskDirectoryBuilder
from .errors import SwhidIOError
from .filesystem import as_bytes_path, detect_entry_type, read_bytes, stat_entry
from .models import EntryType, VerificationResult

logger = logging.getLogger(__name__)


class PathIdentifier:
    """Computes the content or directory SWHID of a path."""

    def __init__(self, options: DirectoryBuildOptions | None = None) -> None:
        self.options = options or DirectoryBuildOptions()
        self._warnings: list[str] = []

    def identify(self, path: Path) -> Swhid:
        raw = as_bytes_path(path)
        kind = detect_entry_type(stat_entry(raw, follow_symlinks=True))

        if kind is EntryType.FILE:
            return Content(read_bytes(raw)).swhid()
        if kind is EntryType.DIRECTORY:
            builder = DiskDirectoryBuilder(path, self.options)
            swhid = builder.swhid()
            self._warnings.extend(builder.pull_warnings())
            return swhid
        raise SwhidIOError(f"'{path}' is neither a regular file nor a directory")

    def verify(self, path: Path, expected: Swhid) -> VerificationResult:
        actual = self.identify(path)
        result = VerificationResult(path=Path(path), expected=expected, actual=actual)
        if not result.matches:
            logger.debug("'%s' hashes to %s, expected %s", path, actual, expected)
        return result

    def pull_warnings(self) -> list[str]:
        warnings = list(self._warnings)
        self._warnings.clear()
        return warnings
