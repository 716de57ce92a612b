from __future__ import annotations

import pytest

from swhid.errors import DuplicateBranchNameError, InvalidByteInNameError
from swhid.snapshot import Branch, BranchTarget, Snapshot, TargetType

MAIN = Branch(b"refs/heads/main", BranchTarget(TargetType.REVISION, b"\x01" * 20))
DEVELOP = Branch(b"refs/heads/develop", BranchTarget(TargetType.REVISION, b"\x02" * 20))


def test_empty_snapshot_vector() -> None:
    assert str(Snapshot().swhid()) == "swh:1:snp:1a8893e6a86f444e8be8e7bda6cb34fb1735a00e"


def test_two_branches_vector_is_order_independent() -> None:
    expected = "swh:1:snp:870148a17e00ea8bd84b727cd26104b8c6ac6a72"
    assert str(Snapshot([MAIN, DEVELOP]).swhid()) == expected
    assert str(Snapshot([DEVELOP, MAIN]).swhid()) == expected
    assert Snapshot([MAIN, DEVELOP]) == Snapshot([DEVELOP, MAIN])


def test_alias_vector() -> None:
    head = Branch(b"HEAD", BranchTarget.alias(b"refs/heads/main"))
    snapshot = Snapshot([MAIN, DEVELOP, head])
    assert snapshot.manifest().startswith(b"alias HEAD\x0015:refs/heads/main")
    assert str(snapshot.swhid()) == "swh:1:snp:9ecd7950d10ed3d02bfcf9c4a534f173697ab9f3"


def test_branch_encoding() -> None:
    snapshot = Snapshot([MAIN])
    assert snapshot.manifest() == b"revision refs/heads/main\x0020:" + b"\x01" * 20


def test_dangling_targets_have_empty_payload() -> None:
    snapshot = Snapshot(
        [
            Branch(b"a", BranchTarget(TargetType.RELEASE)),
            Branch(b"b", BranchTarget.alias(None)),
        ]
    )
    assert snapshot.manifest() == b"release a\x000:alias b\x000:"
    assert all(branch.target.is_dangling for branch in snapshot.branches)


def test_duplicate_branches_are_rejected() -> None:
    other = Branch(b"refs/heads/main", BranchTarget(TargetType.CONTENT, b"\x03" * 20))
    with pytest.raises(DuplicateBranchNameError):
        Snapshot([MAIN, DEVELOP, other])


def test_nul_in_branch_name_is_rejected() -> None:
    with pytest.raises(InvalidByteInNameError):
        Snapshot([Branch(b"bad\x00name", BranchTarget(TargetType.REVISION, b"\x01" * 20))])


def test_slash_is_allowed_in_branch_names() -> None:
    assert Snapshot([MAIN]).branches[0].name == b"refs/heads/main"


def test_non_alias_targets_must_be_digests() -> None:
    with pytest.raises(ValueError):
        BranchTarget(TargetType.DIRECTORY, b"short")
