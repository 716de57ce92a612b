"""Shared models and enums for swhid."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from pathlib import Path
from typing import TYPE_CHECKING

from .errors import InvalidObjectTypeError

if TYPE_CHECKING:
    from .core import Swhid


class ObjectType(str, Enum):
    """Kinds of objects a core SWHID can name."""

    CONTENT = "cnt"
    DIRECTORY = "dir"
    REVISION = "rev"
    RELEASE = "rel"
    SNAPSHOT = "snp"

    @property
    def tag(self) -> str:
        return self.value

    @property
    def header_label(self) -> str:
        """Label used in the ``<label> <length>\\0`` object header."""

        return _HEADER_LABELS[self]

    @classmethod
    def from_tag(cls, tag: str) -> "ObjectType":
        for member in cls:
            if member.value == tag:
                return member
        raise InvalidObjectTypeError(tag)


_HEADER_LABELS = {
    ObjectType.CONTENT: "blob",
    ObjectType.DIRECTORY: "tree",
    ObjectType.REVISION: "commit",
    ObjectType.RELEASE: "tag",
    ObjectType.SNAPSHOT: "snapshot",
}


class EntryPerms(IntEnum):
    """Tree modes allowed in a directory manifest."""

    FILE = 0o100644
    EXECUTABLE_FILE = 0o100755
    DIRECTORY = 0o040000
    SYMLINK = 0o120000
    REVISION_REF = 0o160000

    @classmethod
    def file(cls, executable: bool) -> "EntryPerms":
        return cls.EXECUTABLE_FILE if executable else cls.FILE

    @property
    def git_mode(self) -> str:
        """Six digit mode string as printed by ``git ls-tree``."""

        return f"{int(self):06o}"


class EntryType(str, Enum):
    """Kinds of filesystem entries met during a directory walk."""

    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    OTHER = "other"


class EntryExec(Enum):
    """Result of probing a file's executable bit."""

    EXECUTABLE = "executable"
    NOT_EXECUTABLE = "not_executable"
    UNKNOWN = "unknown"

    @classmethod
    def known(cls, executable: bool) -> "EntryExec":
        return cls.EXECUTABLE if executable else cls.NOT_EXECUTABLE

    @property
    def is_known(self) -> bool:
        return self is not EntryExec.UNKNOWN


class PermissionPolicy(str, Enum):
    """How an unknown executable bit is resolved."""

    STRICT = "strict"
    BEST_EFFORT = "best-effort"


class PermissionsSourceKind(str, Enum):
    """Strategies available to probe executable bits."""

    AUTO = "auto"
    FILESYSTEM = "filesystem"
    GIT_INDEX = "git-index"
    GIT_TREE = "git-tree"
    MANIFEST = "manifest"
    HEURISTIC = "heuristic"


@dataclass(frozen=True, slots=True)
class VerificationResult:
    """Outcome of checking a path against an expected identifier."""

    path: Path
    expected: "Swhid"
    actual: "Swhid"

    @property
    def matches(self) -> bool:
        return self.expected == self.actual
