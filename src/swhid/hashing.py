"""Object hashing shared by every SWHID object kind.

Each object is hashed as ``<label> <decimal length>\\0`` followed by its
manifest, exactly like a git loose object. The label must be the one
defined for the object kind (see :attr:`swhid.models.ObjectType.header_label`).

Digests use plain ``hashlib`` SHA-1, not the collision-detecting variant;
both agree on every input that is not a crafted collision.
"""

from __future__ import annotations

import hashlib

DIGEST_SIZE = 20


def object_header(label: str, length: int) -> bytes:
    """Return the ``<label> <length>\\0`` header for a payload of ``length`` bytes."""

    return b"%s %d\x00" % (label.encode("ascii"), length)


def hash_object(label: str, payload: bytes) -> bytes:
    """Return the 20-byte SHA-1 digest of ``payload`` under the ``label`` header."""

    hasher = hashlib.sha1()
    hasher.update(object_header(label, len(payload)))
    hasher.update(payload)
    return hasher.digest()
