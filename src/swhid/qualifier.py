"""Qualified identifiers: a core SWHID followed by ``;key=value`` annotations."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace

from .core import Swhid
from .errors import InvalidQualifierError, SwhidFormatError

MAX_RANGE_VALUE = 2**64 - 1

_RANGE = re.compile(r"([0-9]+)(?:-([0-9]+))?")


@dataclass(frozen=True, slots=True)
class LineRange:
    """``N`` or ``N-M`` line span (1-based, inclusive)."""

    start: int
    end: int | None = None

    def __str__(self) -> str:
        return str(self.start) if self.end is None else f"{self.start}-{self.end}"


@dataclass(frozen=True, slots=True)
class ByteRange:
    """``N`` or ``N-M`` byte span."""

    start: int
    end: int | None = None

    def __str__(self) -> str:
        return str(self.start) if self.end is None else f"{self.start}-{self.end}"


def parse_range(key: str, value: str) -> tuple[int, int | None]:
    match = _RANGE.fullmatch(value)
    if match is None:
        raise InvalidQualifierError(key, value, "expected N or N-M")
    start = int(match.group(1))
    end = int(match.group(2)) if match.group(2) is not None else None
    if start > MAX_RANGE_VALUE or (end is not None and end > MAX_RANGE_VALUE):
        raise InvalidQualifierError(key, value, "range bound does not fit in 64 bits")
    if end is not None and end < start:
        raise InvalidQualifierError(key, value, "range end is before its start")
    return start, end


def _parse_nested(key: str, value: str) -> Swhid:
    try:
        return Swhid.from_string(value)
    except SwhidFormatError as exc:
        raise InvalidQualifierError(key, value, str(exc)) from exc


@dataclass(frozen=True, slots=True)
class QualifiedSwhid:
    """A core identifier plus optional context.

    Unrecognized qualifiers are kept in ``others`` in the order they were
    read, and written back after the known ones.
    """

    core: Swhid
    origin: str | None = None
    visit: Swhid | None = None
    anchor: Swhid | None = None
    path: str | None = None
    lines: LineRange | None = None
    bytes: ByteRange | None = None
    others: tuple[tuple[str, str], ...] = ()

    def with_origin(self, origin: str) -> "QualifiedSwhid":
        return replace(self, origin=origin)

    def with_visit(self, visit: Swhid) -> "QualifiedSwhid":
        return replace(self, visit=visit)

    def with_anchor(self, anchor: Swhid) -> "QualifiedSwhid":
        return replace(self, anchor=anchor)

    def with_path(self, path: str) -> "QualifiedSwhid":
        return replace(self, path=path)

    def with_lines(self, start: int, end: int | None = None) -> "QualifiedSwhid":
        return replace(self, lines=LineRange(start, end))

    def with_bytes(self, start: int, end: int | None = None) -> "QualifiedSwhid":
        return replace(self, bytes=ByteRange(start, end))

    def with_qualifier(self, key: str, value: str) -> "QualifiedSwhid":
        return replace(self, others=self.others + ((key, value),))

    @classmethod
    def from_string(cls, text: str) -> "QualifiedSwhid":
        """Parse ``<core>[;key=value]*``.

        Empty items are ignored. When a known key appears more than once the
        last value is kept.
        """

        core_text, *items = text.split(";")
        core = Swhid.from_string(core_text)
        fields: dict[str, object] = {}
        others: list[tuple[str, str]] = []

        for item in items:
            if not item:
                continue
            key, sep, value = item.partition("=")
            if not sep:
                raise InvalidQualifierError(item, "", "missing '='")
            if not key:
                raise InvalidQualifierError(key, value, "empty key")

            if key == "origin":
                fields["origin"] = value
            elif key in ("visit", "anchor"):
                fields[key] = _parse_nested(key, value)
            elif key == "path":
                fields["path"] = value
            elif key == "lines":
                fields["lines"] = LineRange(*parse_range(key, value))
            elif key == "bytes":
                fields["bytes"] = ByteRange(*parse_range(key, value))
            else:
                others.append((key, value))

        return cls(core, others=tuple(others), **fields)  # type: ignore[arg-type]

    def __str__(self) -> str:
        parts = [str(self.core)]
        known = (
            ("origin", self.origin),
            ("visit", self.visit),
            ("anchor", self.anchor),
            ("path", self.path),
            ("lines", self.lines),
            ("bytes", self.bytes),
        )
        for key, value in known:
            if value is not None:
                parts.append(f"{key}={value}")
        parts.extend(f"{key}={value}" for key, value in self.others)
        return ";".join(parts)
