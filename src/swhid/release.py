"""Release (annotated tag) identifiers."""

from __future__ import annotations

from dataclasses import dataclass

from .core import Swhid
from .hashing import DIGEST_SIZE, hash_object
from .manifest import HeaderWriter
from .models import ObjectType

RELEASE_TARGET_TYPES = frozenset(
    {ObjectType.CONTENT, ObjectType.DIRECTORY, ObjectType.REVISION, ObjectType.RELEASE}
)


@dataclass(frozen=True, slots=True, kw_only=True)
class Release:
    """Facts about an annotated tag.

    The ``tagger`` line is written only when ``author``, ``author_timestamp``
    and ``author_timestamp_offset`` are all present; any partial combination
    is treated as no tagger at all.
    """

    target: bytes
    target_type: ObjectType
    name: bytes
    author: bytes | None = None
    author_timestamp: int | None = None
    author_timestamp_offset: bytes | None = None
    extra_headers: tuple[tuple[bytes, bytes], ...] = ()
    message: bytes | None = None

    def __post_init__(self) -> None:
        if len(self.target) != DIGEST_SIZE:
            raise ValueError(f"target must be a {DIGEST_SIZE}-byte digest, got {len(self.target)} bytes")
        if self.target_type not in RELEASE_TARGET_TYPES:
            raise ValueError(f"a release cannot target a {self.target_type.name.lower()}")
        object.__setattr__(self, "extra_headers", tuple((bytes(k), bytes(v)) for k, v in self.extra_headers))

    @property
    def has_author(self) -> bool:
        return (
            self.author is not None
            and self.author_timestamp is not None
            and self.author_timestamp_offset is not None
        )

    def manifest(self) -> bytes:
        writer = HeaderWriter()
        writer.push(b"object", self.target.hex().encode("ascii"))
        writer.push(b"type", self.target_type.header_label.encode("ascii"))
        writer.push(b"tag", self.name)
        if self.has_author:
            writer.push_authorship(
                b"tagger",
                self.author,  # type: ignore[arg-type]
                self.author_timestamp,  # type: ignore[arg-type]
                self.author_timestamp_offset,  # type: ignore[arg-type]
            )
        for key, value in self.extra_headers:
            writer.push(key, value)
        return writer.build(self.message)

    def swhid(self) -> Swhid:
        return Swhid(ObjectType.RELEASE, hash_object(ObjectType.RELEASE.header_label, self.manifest()))
