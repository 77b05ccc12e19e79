"""Exception hierarchy shared by the store, loader and command layer."""

from __future__ import annotations


class LurkError(Exception):
    """Base class for failures surfaced to callers."""


class DocumentNotFoundError(LurkError):
    def __init__(self, path) -> None:
        super().__init__(f"file does not exist: {path}")
        self.path = path


class DecodeError(LurkError):
    """The detected encoding could not decode the document without loss."""

    def __init__(self, path, encoding: str) -> None:
        super().__init__(f"could not decode {path} as {encoding}; the file may contain invalid bytes")
        self.path = path
        self.encoding = encoding


class StorageError(LurkError):
    """Reading a document or writing the config failed at the filesystem level."""


class LockFailure(LurkError):
    """The state store was left inconsistent by an earlier failed mutation."""
