from __future__ import annotations

from pathlib import Path

import pytest
from dulwich.objects import Blob, Commit, Tag, Tree
from dulwich.repo import Repo

IDENTITY = b"Test User <test@example.com>"
TIMESTAMP = 1763027354
TIMEZONE = 3600


@pytest.fixture
def fake_home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    return home


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """Repository with one commit, one annotated tag, a ref to a tree and HEAD -> main."""

    root = tmp_path / "repo"
    root.mkdir()

    blob = Blob.from_string(b"test content")
    tree = Tree()
    tree.add(b"test.txt", 0o100644, blob.id)

    commit = Commit()
    commit.tree = tree.id
    commit.author = commit.committer = IDENTITY
    commit.author_time = commit.commit_time = TIMESTAMP
    commit.author_timezone = commit.commit_timezone = TIMEZONE
    commit.message = b"Test commit"

    tag = Tag()
    tag.object = (Tree, tree.id)
    tag.name = b"v1.0"
    tag.tagger = IDENTITY
    tag.tag_time = TIMESTAMP
    tag.tag_timezone = TIMEZONE
    tag.message = b"Test tag"

    with Repo.init(str(root)) as repo:
        for obj in (blob, tree, commit, tag):
            repo.object_store.add_object(obj)
        repo.refs[b"refs/heads/main"] = commit.id
        repo.refs[b"refs/heads/tree-branch"] = tree.id
        repo.refs[b"refs/tags/v1.0"] = tag.id
        repo.refs.set_symbolic_ref(b"HEAD", b"refs/heads/main")

    return root
