"""Exception hierarchy for swhid."""

from __future__ import annotations


class SwhidError(Exception):
    """Base class for every error raised by swhid."""


class SwhidFormatError(SwhidError, ValueError):
    """Raised when an identifier string is malformed."""


class InvalidSchemeError(SwhidFormatError):
    def __init__(self, scheme: str) -> None:
        super().__init__(f"invalid URI scheme (expected 'swh'): {scheme!r}")
        self.scheme = scheme


class InvalidVersionError(SwhidFormatError):
    def __init__(self, version: str) -> None:
        super().__init__(f"unsupported SWHID version: {version!r}")
        self.version = version


class InvalidObjectTypeError(SwhidFormatError):
    def __init__(self, tag: str) -> None:
        super().__init__(f"invalid object type: {tag!r}")
        self.tag = tag


class InvalidDigestError(SwhidFormatError):
    def __init__(self, digest: str) -> None:
        super().__init__(f"invalid digest (expected 40 lowercase hex chars): {digest!r}")
        self.digest = digest


class InvalidFormatError(SwhidFormatError):
    def __init__(self, text: str) -> None:
        super().__init__(f"invalid SWHID format: {text!r}")
        self.text = text


class InvalidQualifierError(SwhidFormatError):
    def __init__(self, key: str, value: str, reason: str) -> None:
        super().__init__(f"invalid qualifier {key!r}={value!r}: {reason}")
        self.key = key
        self.value = value


class StructuralError(SwhidError, ValueError):
    """Raised when a directory or snapshot cannot be built from its children."""


class DuplicateEntryNameError(StructuralError):
    def __init__(self, name: bytes) -> None:
        super().__init__(f"duplicate directory entry name: {name!r}")
        self.name = name


class DuplicateBranchNameError(StructuralError):
    def __init__(self, name: bytes) -> None:
        super().__init__(f"duplicate snapshot branch name: {name!r}")
        self.name = name


class InvalidByteInNameError(StructuralError):
    def __init__(self, byte: int, name: bytes) -> None:
        super().__init__(f"invalid byte {bytes([byte])!r} in name {name!r}")
        self.byte = byte
        self.name = name


class PermissionResolutionError(SwhidError):
    """Raised when the executable bit of a file cannot be decided."""


class PermissionManifestError(PermissionResolutionError, ValueError):
    """Raised when a sidecar permission manifest is rejected at load time."""


class SwhidIOError(SwhidError):
    """Wraps failures reported by the filesystem or a repository."""


class SymlinkLoopError(SwhidIOError):
    def __init__(self, path: str) -> None:
        super().__init__(f"symlink loop detected while following '{path}'")
        self.path = path
