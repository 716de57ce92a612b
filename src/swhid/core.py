"""Core identifiers: ``swh:1:<type>:<hex digest>``."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import (
    InvalidDigestError,
    InvalidFormatError,
    InvalidSchemeError,
    InvalidVersionError,
)
from .hashing import DIGEST_SIZE
from .models import ObjectType

SCHEME = "swh"
VERSION = "1"

_HEX_DIGEST = re.compile(r"[0-9a-f]{40}")


@dataclass(frozen=True, slots=True)
class Swhid:
    """An object type paired with the 20-byte digest of its manifest."""

    object_type: ObjectType
    digest: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.object_type, ObjectType):
            raise TypeError(f"object_type must be an ObjectType, got {self.object_type!r}")
        if len(self.digest) != DIGEST_SIZE:
            raise ValueError(f"digest must be {DIGEST_SIZE} bytes, got {len(self.digest)}")
        object.__setattr__(self, "digest", bytes(self.digest))

    @property
    def digest_hex(self) -> str:
        return self.digest.hex()

    @classmethod
    def from_string(cls, text: str) -> "Swhid":
        """Parse a core identifier; every field is case sensitive."""

        parts = text.split(":")
        if len(parts) != 4:
            raise InvalidFormatError(text)

        scheme, version, tag, digest_hex = parts
        if scheme != SCHEME:
            raise InvalidSchemeError(scheme)
        if version != VERSION:
            raise InvalidVersionError(version)
        object_type = ObjectType.from_tag(tag)
        if not _HEX_DIGEST.fullmatch(digest_hex):
            raise InvalidDigestError(digest_hex)

        return cls(object_type, bytes.fromhex(digest_hex))

    def __str__(self) -> str:
        return f"{SCHEME}:{VERSION}:{self.object_type.tag}:{self.digest_hex}"
