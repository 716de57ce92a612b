"""Core package for the swhid project."""

import logging

from .cli import app, run
from .content import Content
from .core import Swhid
from .directory import (
    Directory,
    DirectoryBuildOptions,
    DiskDirectoryBuilder,
    Entry,
    ManifestEntry,
    WalkOptions,
)
from .errors import (
    DuplicateBranchNameError,
    DuplicateEntryNameError,
    InvalidByteInNameError,
    InvalidDigestError,
    InvalidFormatError,
    InvalidObjectTypeError,
    InvalidQualifierError,
    InvalidSchemeError,
    InvalidVersionError,
    PermissionManifestError,
    PermissionResolutionError,
    StructuralError,
    SwhidError,
    SwhidFormatError,
    SwhidIOError,
    SymlinkLoopError,
)
from .identify import PathIdentifier
from .models import (
    EntryExec,
    EntryPerms,
    ObjectType,
    PermissionPolicy,
    PermissionsSourceKind,
    VerificationResult,
)
from .permissions import PermissionManifest, make_permissions_source, resolve_file_permissions
from .qualifier import ByteRange, LineRange, QualifiedSwhid
from .release import Release
from .revision import Revision
from .snapshot import Branch, BranchTarget, Snapshot, TargetType

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Swhid",
    "ObjectType",
    "Content",
    "Directory",
    "Entry",
    "ManifestEntry",
    "DiskDirectoryBuilder",
    "DirectoryBuildOptions",
    "WalkOptions",
    "EntryPerms",
    "EntryExec",
    "PermissionPolicy",
    "PermissionsSourceKind",
    "PermissionManifest",
    "make_permissions_source",
    "resolve_file_permissions",
    "PathIdentifier",
    "VerificationResult",
    "Revision",
    "Release",
    "Snapshot",
    "Branch",
    "BranchTarget",
    "TargetType",
    "QualifiedSwhid",
    "LineRange",
    "ByteRange",
    "SwhidError",
    "SwhidFormatError",
    "InvalidSchemeError",
    "InvalidVersionError",
    "InvalidObjectTypeError",
    "InvalidDigestError",
    "InvalidFormatError",
    "InvalidQualifierError",
    "StructuralError",
    "DuplicateEntryNameError",
    "DuplicateBranchNameError",
    "InvalidByteInNameError",
    "PermissionResolutionError",
    "PermissionManifestError",
    "SwhidIOError",
    "SymlinkLoopError",
    "app",
    "run",
]
