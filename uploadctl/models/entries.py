"""Engine-side models for one upload batch.

Entries, planned directories, and upload tasks are created when a batch is
submitted and discarded when it completes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, Optional, Protocol, runtime_checkable


@runtime_checkable
class ContentHandle(Protocol):
    """Readable content item (local file, in-memory buffer, ...)."""

    @property
    def name(self) -> str: ...

    @property
    def size(self) -> int: ...

    def open(self) -> BinaryIO: ...


def split_path(relative_path: str) -> list[str]:
    """Split a ``/`` separated relative path into segments."""
    return [part for part in relative_path.split("/") if part]


def parent_path(relative_path: str) -> str:
    """Return the parent directory path ("" for root-level items)."""
    parts = split_path(relative_path)
    return "/".join(parts[:-1])


def path_depth(relative_path: str) -> int:
    """Number of segments in a relative path."""
    return len(split_path(relative_path))


@dataclass(frozen=True)
class SourceEntry:
    """A content item plus its path relative to the upload root."""

    content_handle: ContentHandle
    relative_path: str
    byte_length: int

    @property
    def name(self) -> str:
        parts = split_path(self.relative_path)
        return parts[-1] if parts else self.content_handle.name

    @property
    def parent_path(self) -> str:
        return parent_path(self.relative_path)

    @property
    def is_root_level(self) -> bool:
        return "/" not in self.relative_path


@dataclass
class PlannedDirectory:
    """A directory implied by entry paths, awaiting remote creation."""

    relative_path: str
    parent_relative_path: str
    remote_id: Optional[str] = None

    @property
    def name(self) -> str:
        return split_path(self.relative_path)[-1]

    @property
    def depth(self) -> int:
        return path_depth(self.relative_path)

    @property
    def is_materialized(self) -> bool:
        return self.remote_id is not None


class PathMap:
    """Directory relative path -> remote folder ID.

    Entries are write-once. The map is frozen before workers start, after
    which it is only read.
    """

    ROOT = ""

    def __init__(self, root_id: str) -> None:
        self._ids: dict[str, str] = {self.ROOT: root_id}
        self._frozen = False

    @property
    def root_id(self) -> str:
        return self._ids[self.ROOT]

    @property
    def frozen(self) -> bool:
        return self._frozen

    def set(self, relative_path: str, remote_id: str) -> None:
        """Record the remote ID of a directory.

        Raises:
            ValueError: If the map is frozen or the path is already mapped.
        """
        if self._frozen:
            raise ValueError("PathMap is frozen")
        if relative_path in self._ids:
            raise ValueError(f"Path already mapped: {relative_path!r}")
        self._ids[relative_path] = remote_id

    def resolve(self, relative_path: str) -> Optional[str]:
        """Remote ID for a directory path, or None when unresolved."""
        return self._ids.get(relative_path)

    def freeze(self) -> None:
        self._frozen = True

    def as_dict(self) -> dict[str, str]:
        return dict(self._ids)

    def __contains__(self, relative_path: object) -> bool:
        return relative_path in self._ids

    def __len__(self) -> int:
        return len(self._ids)


@dataclass(frozen=True)
class UploadTask:
    """A file transfer bound to its (possibly unresolved) target folder."""

    index: int
    source_entry: SourceEntry
    target_directory_id: Optional[str]

    @property
    def is_resolved(self) -> bool:
        return self.target_directory_id is not None
