"""Helpers shared by the manifest encoders."""

from __future__ import annotations

from typing import Hashable, Iterable, TypeVar

T = TypeVar("T", bound=Hashable)


class HeaderWriter:
    """Accumulates ``key value\\n`` lines followed by an optional message.

    Newlines inside a value are folded by inserting a space after each of
    them, so continuation lines never look like a new key.
    """

    def __init__(self) -> None:
        self._buffer = bytearray()

    def push(self, key: bytes, value: bytes) -> None:
        self._buffer += key
        self._buffer += b" "
        self._buffer += value.replace(b"\n", b"\n ")
        self._buffer += b"\n"

    def push_authorship(self, key: bytes, identity: bytes, timestamp: int, offset: bytes) -> None:
        self.push(key, b"%s %d %s" % (identity, timestamp, offset))

    def build(self, message: bytes | None) -> bytes:
        if message is not None:
            self._buffer += b"\n"
            self._buffer += message
        return bytes(self._buffer)


def first_duplicate(names: Iterable[T]) -> T | None:
    """Return the first name that was already seen earlier in ``names``."""

    seen: set[T] = set()
    for name in names:
        if name in seen:
            return name
        seen.add(name)
    return None
