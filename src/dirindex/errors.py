"""Failure kinds surfaced to callers of the index."""

from __future__ import annotations


class DirIndexError(Exception):
    """Base class for every failure that crosses the operation boundary."""

    kind = "error"


class MetadataError(DirIndexError):
    """A caller-specified path could not be read."""

    kind = "io"

    def __init__(self, path: str, reason: str, *, not_found: bool = False) -> None:
        super().__init__(f"IO error: {path}: {reason}")
        self.path = path
        self.reason = reason
        self.not_found = not_found


class StorageError(DirIndexError):
    kind = "storage"

    def __init__(self, reason: str) -> None:
        super().__init__(f"Database error: {reason}")


class LockPoisonedError(DirIndexError):
    """An earlier operation died while holding the index lock."""

    kind = "lock_poisoned"

    def __init__(self) -> None:
        super().__init__("Index lock poisoned")
