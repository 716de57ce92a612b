from __future__ import annotations

import pytest

from swhid.core import Swhid
from swhid.errors import InvalidDigestError, InvalidQualifierError
from swhid.qualifier import ByteRange, LineRange, QualifiedSwhid, parse_range

CORE = "swh:1:cnt:b45ef6fec89518d314f546fd6c3025367b721684"
SNAPSHOT = "swh:1:snp:870148a17e00ea8bd84b727cd26104b8c6ac6a72"
REVISION = "swh:1:rev:07cde6575fb633ef9b5ecbe730e6eb97475a2fd9"


def test_round_trip_vector() -> None:
    text = f"{CORE};origin=https://example.org/repo.git;path=/src/lib.rs;lines=10-20"
    qualified = QualifiedSwhid.from_string(text)
    assert qualified.origin == "https://example.org/repo.git"
    assert qualified.path == "/src/lib.rs"
    assert qualified.lines == LineRange(10, 20)
    assert str(qualified) == text


def test_core_only() -> None:
    qualified = QualifiedSwhid.from_string(CORE)
    assert qualified.core == Swhid.from_string(CORE)
    assert str(qualified) == CORE


def test_nested_identifiers() -> None:
    qualified = QualifiedSwhid.from_string(f"{CORE};visit={SNAPSHOT};anchor={REVISION}")
    assert qualified.visit == Swhid.from_string(SNAPSHOT)
    assert qualified.anchor == Swhid.from_string(REVISION)


def test_canonical_order_is_applied() -> None:
    text = f"{CORE};x-custom=1;bytes=5;path=/a;anchor={REVISION};origin=o;lines=3"
    expected = f"{CORE};origin=o;anchor={REVISION};path=/a;lines=3;bytes=5;x-custom=1"
    assert str(QualifiedSwhid.from_string(text)) == expected


def test_unknown_keys_keep_their_order() -> None:
    qualified = QualifiedSwhid.from_string(f"{CORE};zeta=1;alpha=2;zeta=3")
    assert qualified.others == (("zeta", "1"), ("alpha", "2"), ("zeta", "3"))


def test_point_range() -> None:
    qualified = QualifiedSwhid.from_string(f"{CORE};lines=10")
    assert qualified.lines == LineRange(10, None)
    assert str(qualified.lines) == "10"


def test_byte_range() -> None:
    assert QualifiedSwhid.from_string(f"{CORE};bytes=0-99").bytes == ByteRange(0, 99)


def test_repeated_known_key_keeps_last_value() -> None:
    assert QualifiedSwhid.from_string(f"{CORE};origin=a;origin=b").origin == "b"


def test_empty_items_are_skipped() -> None:
    assert str(QualifiedSwhid.from_string(f"{CORE};;path=/x;")) == f"{CORE};path=/x"


def test_value_may_contain_equals_sign() -> None:
    qualified = QualifiedSwhid.from_string(f"{CORE};origin=https://h/?a=b")
    assert qualified.origin == "https://h/?a=b"


@pytest.mark.parametrize(
    "suffix",
    [
        "lines=20-10",
        "lines=",
        "lines=a-b",
        "lines=1-",
        "lines=-5",
        "bytes=1-2-3",
        "bytes=18446744073709551616",
        "visit=swh:1:snp:abc",
        "anchor=not-a-swhid",
        "=value",
        "origin",
    ],
)
def test_invalid_qualifiers(suffix: str) -> None:
    with pytest.raises(InvalidQualifierError):
        QualifiedSwhid.from_string(f"{CORE};{suffix}")


def test_invalid_core_is_reported() -> None:
    with pytest.raises(InvalidDigestError):
        QualifiedSwhid.from_string("swh:1:cnt:xyz;origin=o")


def test_largest_range_value_is_accepted() -> None:
    assert parse_range("bytes", "18446744073709551615") == (2**64 - 1, None)


def test_builders() -> None:
    core = Swhid.from_string(CORE)
    qualified = (
        QualifiedSwhid(core)
        .with_origin("https://example.org/repo.git")
        .with_path("/src/lib.rs")
        .with_lines(10, 20)
        .with_bytes(1)
        .with_visit(Swhid.from_string(SNAPSHOT))
        .with_anchor(Swhid.from_string(REVISION))
        .with_qualifier("x", "y")
    )
    assert str(qualified) == (
        f"{CORE};origin=https://example.org/repo.git;visit={SNAPSHOT};anchor={REVISION}"
        ";path=/src/lib.rs;lines=10-20;bytes=1;x=y"
    )
    assert QualifiedSwhid.from_string(str(qualified)) == qualified
