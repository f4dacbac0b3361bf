"""Common utilities for uploader modules."""

from __future__ import annotations

import io
import mimetypes
import os
import stat
import threading
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import BinaryIO, TypeVar

from uploadctl.core.exceptions import ValidationError
from uploadctl.models.entries import ContentHandle, SourceEntry, split_path
from uploadctl.uploaders.constants import DEFAULT_CONTENT_TYPE

T = TypeVar("T")


# =============================================================================
# Content Handles
# =============================================================================


class LocalContent:
    """Content handle backed by a local filesystem path."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"LocalContent({str(self.path)!r})"

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def size(self) -> int:
        return self.path.stat().st_size

    def is_regular_file(self) -> bool:
        """True for regular files; False for FIFOs, sockets, devices, dirs."""
        try:
            return stat.S_ISREG(os.stat(self.path).st_mode)
        except OSError:
            return False

    def open(self) -> BinaryIO:
        return self.path.open("rb")


class MemoryContent:
    """Content handle backed by an in-memory buffer."""

    def __init__(self, name: str, data: bytes = b"") -> None:
        self._name = name
        self.data = data

    def __repr__(self) -> str:
        return f"MemoryContent({self._name!r}, {len(self.data)} bytes)"

    @property
    def name(self) -> str:
        return self._name

    @property
    def size(self) -> int:
        return len(self.data)

    def open(self) -> BinaryIO:
        return io.BytesIO(self.data)


# =============================================================================
# Paths
# =============================================================================


def normalize_relative_path(path: str) -> str:
    """Normalize a relative path to ``/`` separated form.

    Backslashes become ``/``; empty and ``.`` segments are dropped.

    Raises:
        ValidationError: If the path is empty or walks above its root.
    """
    parts = [p for p in split_path(path.replace("\\", "/")) if p != "."]
    if not parts:
        raise ValidationError("Empty relative path", field="relative_path", value=path)
    if ".." in parts:
        raise ValidationError(
            "Relative path escapes upload root", field="relative_path", value=path
        )
    return "/".join(parts)


def batch_label(entries: Sequence[SourceEntry]) -> str:
    """Label for a batch: the single root folder name, or "N folders".

    Flat uploads (no entry inside a folder) get an empty label.
    """
    roots: list[str] = []
    for entry in entries:
        if entry.is_root_level:
            continue
        root = split_path(entry.relative_path)[0]
        if root not in roots:
            roots.append(root)

    if len(roots) <= 1:
        return roots[0] if roots else ""
    return f"{len(roots)} folders"


def guess_content_type(file_name: str) -> str:
    """MIME type from the file name, falling back to octet-stream."""
    content_type, _ = mimetypes.guess_type(file_name)
    return content_type or DEFAULT_CONTENT_TYPE


# =============================================================================
# Reads Under a Deadline
# =============================================================================


def call_with_timeout(fn: Callable[[], T], timeout: float, *, label: str = "call") -> T:
    """Run ``fn`` in a daemon thread and wait at most ``timeout`` seconds.

    Opening a FIFO blocks until a writer appears, so a stuck call is left
    behind in its daemon thread rather than joined.

    Raises:
        TimeoutError: If ``fn`` has not returned in time.
        Exception: Whatever ``fn`` raised.
    """
    outcome: dict[str, object] = {}
    done = threading.Event()

    def runner() -> None:
        try:
            outcome["value"] = fn()
        except Exception as e:
            outcome["error"] = e
        finally:
            done.set()

    thread = threading.Thread(target=runner, name=f"uploadctl-{label}", daemon=True)
    thread.start()

    if not done.wait(timeout):
        raise TimeoutError(f"{label} timed out after {timeout:g}s")
    if "error" in outcome:
        raise outcome["error"]  # type: ignore[misc]
    return outcome["value"]  # type: ignore[return-value]


def read_first_byte(handle: ContentHandle) -> bytes:
    """Read at most one byte from a content handle."""
    with handle.open() as f:
        return f.read(1)


def read_all(handle: ContentHandle) -> bytes:
    """Read a content handle fully into memory."""
    with handle.open() as f:
        return f.read()
