"""Git integration: executable bits from a repository and VCS facts for identifiers.

This is the only module that talks to dulwich. Objects are read as raw bytes
and their headers parsed here, so every header a commit or tag carries
(``encoding``, ``gpgsig``, ``mergetag``...) survives into the manifest.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dulwich.errors import NoIndexPresent, NotGitRepository
from dulwich.refs import SYMREF
from dulwich.repo import Repo

from .core import Swhid
from .errors import SwhidIOError
from .models import EntryExec, EntryPerms, ObjectType
from .release import Release
from .revision import Revision
from .snapshot import Branch, BranchTarget, Snapshot, TargetType

logger = logging.getLogger(__name__)

HEAD = b"HEAD"

_RELEASE_TARGETS = {
    b"blob": ObjectType.CONTENT,
    b"tree": ObjectType.DIRECTORY,
    b"commit": ObjectType.REVISION,
    b"tag": ObjectType.RELEASE,
}

_BRANCH_TARGETS = {
    b"blob": TargetType.CONTENT,
    b"tree": TargetType.DIRECTORY,
    b"commit": TargetType.REVISION,
    b"tag": TargetType.RELEASE,
}


def open_repo(path: Path | str) -> Repo:
    """Open the repository containing ``path``."""

    try:
        return Repo.discover(str(path))
    except NotGitRepository as exc:
        raise SwhidIOError(f"No git repository found at or above '{path}'") from exc
    except OSError as exc:
        raise SwhidIOError(f"Failed to open repository at '{path}': {exc}") from exc


def _relative_key(repo_root: Path, path: Path) -> bytes | None:
    try:
        relative = Path(os.path.abspath(path)).relative_to(repo_root)
    except ValueError:
        return None
    return os.fsencode(relative.as_posix())


class GitIndexPermissionsSource:
    """Answers from the modes staged in a repository's index.

    The index is read once, when the source is created.
    """

    def __init__(self, repo_root: Path) -> None:
        self._modes: dict[bytes, int] = {}
        with open_repo(repo_root) as repo:
            self.repo_root = Path(os.path.abspath(repo.path))
            try:
                index = repo.open_index()
            except NoIndexPresent as exc:
                raise SwhidIOError(f"Repository at '{self.repo_root}' has no index") from exc
            for path, entry in index.items():
                # conflicted entries carry one mode per stage
                mode = getattr(entry, "mode", None)
                if mode is not None:
                    self._modes[path] = mode
        logger.debug("read %d index entries from '%s'", len(self._modes), self.repo_root)

    def executable_of(self, path: Path) -> EntryExec:
        key = _relative_key(self.repo_root, path)
        if key is None or key not in self._modes:
            return EntryExec.UNKNOWN
        return EntryExec.known(self._modes[key] == EntryPerms.EXECUTABLE_FILE)


class GitTreePermissionsSource:
    """Answers from the tree committed at ``ref`` (``HEAD`` by default)."""

    def __init__(self, repo_root: Path, ref: bytes = HEAD) -> None:
        self.repo_root = Path(os.path.abspath(repo_root))
        self.ref = ref
        with open_repo(self.repo_root) as repo:
            try:
                commit = _peel(repo, repo.refs[ref])
            except KeyError:
                logger.debug("'%s' does not point to a commit yet", ref.decode("utf-8", "replace"))
                self._tree_id: bytes | None = None
            else:
                self._tree_id = commit.tree

    def executable_of(self, path: Path) -> EntryExec:
        key = _relative_key(self.repo_root, path)
        if key is None or self._tree_id is None:
            return EntryExec.UNKNOWN

        with open_repo(self.repo_root) as repo:
            mode, sha = 0, self._tree_id
            for segment in key.split(b"/"):
                try:
                    tree = repo[sha]
                    mode, sha = tree[segment]
                except (KeyError, TypeError, AttributeError):
                    return EntryExec.UNKNOWN
        return EntryExec.known(mode == EntryPerms.EXECUTABLE_FILE)


def _peel(repo: Repo, object_id: bytes):
    obj = repo[object_id]
    while obj.type_name == b"tag":
        obj = repo[obj.object[1]]
    if obj.type_name != b"commit":
        raise KeyError(object_id)
    return obj


def _load(repo: Repo, object_id: bytes):
    try:
        return repo[object_id]
    except KeyError as exc:
        raise SwhidIOError(f"Object {object_id.decode('ascii', 'replace')} is not in the repository") from exc


def resolve_object_id(repo: Repo, name: str | bytes) -> bytes:
    """Return the object id named by a hex id, a ref, a branch or a tag name."""

    raw = name.encode("utf-8") if isinstance(name, str) else name
    if len(raw) == 40:
        try:
            bytes.fromhex(raw.decode("ascii"))
        except ValueError:
            pass
        else:
            return raw.lower()

    for candidate in (raw, b"refs/tags/" + raw, b"refs/heads/" + raw):
        try:
            return repo.refs[candidate]
        except KeyError:
            continue
    raise SwhidIOError(f"Unknown revision or reference '{raw.decode('utf-8', 'replace')}'")


def _split_headers(raw: bytes) -> tuple[list[tuple[bytes, bytes]], bytes | None]:
    head, sep, message = raw.partition(b"\n\n")
    headers: list[tuple[bytes, bytes]] = []
    for line in head.split(b"\n"):
        if line.startswith(b" ") and headers:
            key, value = headers[-1]
            headers[-1] = (key, value + b"\n" + line[1:])
        else:
            key, _, value = line.partition(b" ")
            headers.append((key, value))
    return headers, (message if sep else None)


def _hex_digest(value: bytes) -> bytes:
    try:
        return bytes.fromhex(value.decode("ascii"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise ValueError(f"malformed object id in repository: {value!r}") from exc


def _authorship(value: bytes) -> tuple[bytes, int, bytes]:
    identity, timestamp, offset = value.rsplit(b" ", 2)
    return identity, int(timestamp), offset


def revision_from_git(repo: Repo, commit_id: bytes) -> Revision:
    """Extract the facts of the commit ``commit_id`` (annotated tags are peeled)."""

    obj = _load(repo, commit_id)
    while obj.type_name == b"tag":
        obj = _load(repo, obj.object[1])
    if obj.type_name != b"commit":
        raise SwhidIOError(f"Object {obj.id.decode('ascii')} is a {obj.type_name.decode('ascii')}, not a commit")

    headers, message = _split_headers(obj.as_raw_string())
    directory = b""
    parents: list[bytes] = []
    author = committer = None
    extra_headers: list[tuple[bytes, bytes]] = []
    for key, value in headers:
        if key == b"tree":
            directory = _hex_digest(value)
        elif key == b"parent":
            parents.append(_hex_digest(value))
        elif key == b"author":
            author = _authorship(value)
        elif key == b"committer":
            committer = _authorship(value)
        else:
            extra_headers.append((key, value))

    if author is None or committer is None:
        raise SwhidIOError(f"Commit {obj.id.decode('ascii')} lacks an author or committer")

    return Revision(
        directory=directory,
        parents=tuple(parents),
        author=author[0],
        author_timestamp=author[1],
        author_timestamp_offset=author[2],
        committer=committer[0],
        committer_timestamp=committer[1],
        committer_timestamp_offset=committer[2],
        extra_headers=tuple(extra_headers),
        message=message,
    )


def release_from_git(repo: Repo, tag_id: bytes) -> Release:
    """Extract the facts of the annotated tag object ``tag_id``."""

    obj = _load(repo, tag_id)
    if obj.type_name != b"tag":
        raise SwhidIOError(f"Object {obj.id.decode('ascii')} is not an annotated tag")

    headers, message = _split_headers(obj.as_raw_string())
    target = b""
    target_type = None
    name = b""
    tagger = None
    extra_headers: list[tuple[bytes, bytes]] = []
    for key, value in headers:
        if key == b"object":
            target = _hex_digest(value)
        elif key == b"type":
            target_type = _RELEASE_TARGETS.get(value)
        elif key == b"tag":
            name = value
        elif key == b"tagger":
            tagger = _authorship(value)
        else:
            extra_headers.append((key, value))

    if target_type is None:
        raise SwhidIOError(f"Tag {obj.id.decode('ascii')} has an unknown target type")

    return Release(
        target=target,
        target_type=target_type,
        name=name,
        author=tagger[0] if tagger else None,
        author_timestamp=tagger[1] if tagger else None,
        author_timestamp_offset=tagger[2] if tagger else None,
        extra_headers=tuple(extra_headers),
        message=message,
    )


def snapshot_from_git(repo: Repo) -> Snapshot:
    """Collect every reference (``HEAD`` included) into a snapshot."""

    branches: list[Branch] = []
    for name in sorted(repo.refs.allkeys()):
        raw = repo.refs.read_ref(name)
        if raw is None:
            continue
        if raw.startswith(SYMREF):
            branches.append(Branch(name, BranchTarget.alias(raw[len(SYMREF):].strip())))
            continue

        object_id = raw.strip()
        try:
            obj = repo[object_id]
        except KeyError:
            logger.debug("reference '%s' points to a missing object", name.decode("utf-8", "replace"))
            branches.append(Branch(name, BranchTarget(TargetType.REVISION)))
            continue
        branches.append(Branch(name, BranchTarget(_BRANCH_TARGETS[obj.type_name], _hex_digest(object_id))))
    return Snapshot(branches)


def head_commit(repo: Repo) -> bytes:
    try:
        return repo.head()
    except KeyError as exc:
        raise SwhidIOError("HEAD does not point to a commit") from exc


def tag_ids(repo: Repo) -> dict[bytes, bytes]:
    """Map tag names to the ids of annotated tag objects; lightweight tags are skipped."""

    tags: dict[bytes, bytes] = {}
    for name, object_id in sorted(repo.refs.as_dict(b"refs/tags").items()):
        try:
            obj = repo[object_id]
        except KeyError:
            continue
        if obj.type_name == b"tag":
            tags[name] = object_id
    return tags


def revision_swhid(repo_path: Path | str, commit: str | bytes | None = None) -> Swhid:
    with open_repo(repo_path) as repo:
        commit_id = head_commit(repo) if commit is None else resolve_object_id(repo, commit)
        return revision_from_git(repo, commit_id).swhid()


def release_swhid(repo_path: Path | str, tag: str | bytes) -> Swhid:
    with open_repo(repo_path) as repo:
        return release_from_git(repo, resolve_object_id(repo, tag)).swhid()


def snapshot_swhid(repo_path: Path | str) -> Swhid:
    with open_repo(repo_path) as repo:
        return snapshot_from_git(repo).swhid()
