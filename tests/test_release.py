from __future__ import annotations

import pytest

from swhid.models import ObjectType
from swhid.release import Release

TREE = bytes.fromhex("0efb37b28c53c7e4fbd253bb04a4df14008f63fe")
IDENTITY = b"Test User <test@example.com>"


def _release(**overrides: object) -> Release:
    fields: dict[str, object] = dict(
        target=TREE,
        target_type=ObjectType.DIRECTORY,
        name=b"v1.0",
        author=IDENTITY,
        author_timestamp=1763027354,
        author_timestamp_offset=b"+0100",
        message=b"Test tag",
    )
    fields.update(overrides)
    return Release(**fields)  # type: ignore[arg-type]


def test_release_vector() -> None:
    release = _release()
    assert release.manifest() == (
        b"object 0efb37b28c53c7e4fbd253bb04a4df14008f63fe\n"
        b"type tree\n"
        b"tag v1.0\n"
        b"tagger Test User <test@example.com> 1763027354 +0100\n"
        b"\n"
        b"Test tag"
    )
    assert str(release.swhid()) == "swh:1:rel:46d326edb8bfc49b757ccd09930365595806bfc0"


@pytest.mark.parametrize(
    ("target_type", "label"),
    [
        (ObjectType.CONTENT, b"blob"),
        (ObjectType.DIRECTORY, b"tree"),
        (ObjectType.REVISION, b"commit"),
        (ObjectType.RELEASE, b"tag"),
    ],
)
def test_type_line_uses_object_label(target_type: ObjectType, label: bytes) -> None:
    assert b"\ntype " + label + b"\n" in _release(target_type=target_type).manifest()


@pytest.mark.parametrize(
    "missing",
    ["author", "author_timestamp", "author_timestamp_offset"],
)
def test_partial_tagger_is_omitted(missing: str) -> None:
    release = _release(**{missing: None})
    assert not release.has_author
    assert b"tagger" not in release.manifest()
    assert release.swhid() == _release(author=None, author_timestamp=None, author_timestamp_offset=None).swhid()


def test_extra_headers_follow_tagger() -> None:
    manifest = _release(extra_headers=((b"x-note", b"a\nb"),)).manifest()
    assert b"+0100\nx-note a\n b\n\nTest tag" in manifest


def test_release_cannot_target_snapshot() -> None:
    with pytest.raises(ValueError):
        _release(target_type=ObjectType.SNAPSHOT)


def test_release_target_length() -> None:
    with pytest.raises(ValueError):
        _release(target=b"\x01" * 10)
