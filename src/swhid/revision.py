"""Revision (commit) identifiers."""

from __future__ import annotations

from dataclasses import dataclass

from .core import Swhid
from .hashing import DIGEST_SIZE, hash_object
from .manifest import HeaderWriter
from .models import ObjectType


def _check_digest(value: bytes, what: str) -> None:
    if len(value) != DIGEST_SIZE:
        raise ValueError(f"{what} must be a {DIGEST_SIZE}-byte digest, got {len(value)} bytes")


@dataclass(frozen=True, slots=True, kw_only=True)
class Revision:
    """Facts about a VCS commit.

    ``author``/``committer`` are full identities such as
    ``b"Jane Doe <jane@example.org>"``; offsets are kept as raw bytes
    (``b"+0100"``, ``b"-0000"``) so unusual values survive unchanged.
    """

    directory: bytes
    parents: tuple[bytes, ...] = ()
    author: bytes
    author_timestamp: int
    author_timestamp_offset: bytes
    committer: bytes
    committer_timestamp: int
    committer_timestamp_offset: bytes
    extra_headers: tuple[tuple[bytes, bytes], ...] = ()
    message: bytes | None = None

    def __post_init__(self) -> None:
        _check_digest(self.directory, "directory")
        object.__setattr__(self, "parents", tuple(self.parents))
        for parent in self.parents:
            _check_digest(parent, "parent")
        object.__setattr__(self, "extra_headers", tuple((bytes(k), bytes(v)) for k, v in self.extra_headers))

    def manifest(self) -> bytes:
        writer = HeaderWriter()
        writer.push(b"tree", self.directory.hex().encode("ascii"))
        for parent in self.parents:
            writer.push(b"parent", parent.hex().encode("ascii"))
        writer.push_authorship(b"author", self.author, self.author_timestamp, self.author_timestamp_offset)
        writer.push_authorship(
            b"committer",
            self.committer,
            self.committer_timestamp,
            self.committer_timestamp_offset,
        )
        for key, value in self.extra_headers:
            writer.push(key, value)
        return writer.build(self.message)

    def swhid(self) -> Swhid:
        return Swhid(ObjectType.REVISION, hash_object(ObjectType.REVISION.header_label, self.manifest()))
