"""Content (file contents) identifiers."""

from __future__ import annotations

from .core import Swhid
from .hashing import hash_object
from .models import ObjectType


class Content:
    """Wraps a byte buffer; its identifier is recomputed on every call."""

    __slots__ = ("_data",)

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._data = bytes(data)

    def __len__(self) -> int:
        return len(self._data)

    def swhid(self) -> Swhid:
        return Swhid(ObjectType.CONTENT, hash_object(ObjectType.CONTENT.header_label, self._data))
