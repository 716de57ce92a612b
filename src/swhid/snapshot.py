"""Snapshot identifiers: the full list of branches of a repository."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from .core import Swhid
from .errors import DuplicateBranchNameError, InvalidByteInNameError
from .hashing import DIGEST_SIZE, hash_object
from .manifest import first_duplicate
from .models import ObjectType


class TargetType(str, Enum):
    """Kinds of objects a snapshot branch can point to."""

    CONTENT = "content"
    DIRECTORY = "directory"
    REVISION = "revision"
    RELEASE = "release"
    SNAPSHOT = "snapshot"
    ALIAS = "alias"

    @property
    def label(self) -> bytes:
        return self.value.encode("ascii")


@dataclass(frozen=True, slots=True)
class BranchTarget:
    """What a branch points to; ``target`` is ``None`` for a dangling branch.

    For aliases ``target`` is the raw name of another branch, otherwise it is
    a 20-byte digest.
    """

    target_type: TargetType
    target: bytes | None = None

    def __post_init__(self) -> None:
        if self.target is None:
            return
        object.__setattr__(self, "target", bytes(self.target))
        if self.target_type is not TargetType.ALIAS and len(self.target) != DIGEST_SIZE:
            raise ValueError(
                f"{self.target_type.value} target must be a {DIGEST_SIZE}-byte digest, got {len(self.target)} bytes"
            )

    @classmethod
    def alias(cls, name: bytes | None) -> "BranchTarget":
        return cls(TargetType.ALIAS, name)

    @property
    def is_dangling(self) -> bool:
        return self.target is None

    @property
    def payload(self) -> bytes:
        return self.target or b""


@dataclass(frozen=True, slots=True)
class Branch:
    """A named reference inside a snapshot."""

    name: bytes
    target: BranchTarget


class Snapshot:
    """Sorted, duplicate-free list of branches."""

    __slots__ = ("_branches",)

    def __init__(self, branches: Iterable[Branch] = ()) -> None:
        ordered = sorted(branches, key=lambda branch: branch.name)

        duplicate = first_duplicate(branch.name for branch in ordered)
        if duplicate is not None:
            raise DuplicateBranchNameError(duplicate)

        for branch in ordered:
            if b"\x00" in branch.name:
                raise InvalidByteInNameError(0, branch.name)

        self._branches: tuple[Branch, ...] = tuple(ordered)

    @property
    def branches(self) -> tuple[Branch, ...]:
        return self._branches

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Snapshot):
            return NotImplemented
        return self._branches == other._branches

    def __hash__(self) -> int:
        return hash(self._branches)

    def __repr__(self) -> str:
        return f"Snapshot({list(self._branches)!r})"

    def manifest(self) -> bytes:
        out = bytearray()
        for branch in self._branches:
            payload = branch.target.payload
            out += branch.target.target_type.label
            out += b" "
            out += branch.name
            out += b"\x00"
            out += b"%d:" % len(payload)
            out += payload
        return bytes(out)

    def swhid(self) -> Swhid:
        return Swhid(ObjectType.SNAPSHOT, hash_object(ObjectType.SNAPSHOT.header_label, self.manifest()))
