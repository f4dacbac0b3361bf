"""Entry collection for upload batches.

Normalizes the different input shapes into ``SourceEntry`` objects:

- a local file path becomes a root-level entry;
- a local directory path is walked recursively, and every leaf gets a path
  relative to the directory's parent (so it starts with the directory name);
- a ``(handle, relative_path)`` pair keeps its embedded relative path;
- a bare content handle becomes a root-level entry named after the handle.

Every candidate is probed by reading its first byte. Entries that fail the
probe (directory placeholders, FIFOs, sockets, vanished files) are skipped
and reported once, in aggregate.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from uploadctl.core.exceptions import UnreadableEntryError
from uploadctl.models.entries import ContentHandle, SourceEntry
from uploadctl.models.progress import Notification, NotificationLevel
from uploadctl.uploaders.common import (
    LocalContent,
    call_with_timeout,
    normalize_relative_path,
    read_first_byte,
)
from uploadctl.uploaders.constants import DEFAULT_PROBE_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

RawInput = Union[str, Path, ContentHandle, tuple[Union[ContentHandle, Path], str]]


@dataclass
class CollectionResult:
    """Readable entries and the paths that failed the probe."""

    entries: list[SourceEntry] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


class EntryCollector:
    """Turn raw inputs into probed ``SourceEntry`` objects."""

    def __init__(
        self,
        *,
        probe_timeout: float = DEFAULT_PROBE_TIMEOUT_SECONDS,
        skip_hidden: bool = False,
        notify: Callable[[Notification], None] | None = None,
    ) -> None:
        """Initialize the collector.

        Args:
            probe_timeout: Seconds allowed for the first-byte read.
            skip_hidden: Drop dot-files found while walking directories.
            notify: Receives the aggregate "entries skipped" notification.
        """
        self.probe_timeout = probe_timeout
        self.skip_hidden = skip_hidden
        self.notify = notify

    # =========================================================================
    # Public API
    # =========================================================================

    def collect(self, raw_inputs: Iterable[RawInput]) -> CollectionResult:
        """Expand, probe and classify every input.

        Args:
            raw_inputs: Paths, content handles, or ``(handle, relative_path)`` pairs.

        Returns:
            CollectionResult with valid entries in input order.
        """
        result = CollectionResult()

        for handle, relative_path in self._expand(raw_inputs):
            try:
                byte_length = self.probe(handle, relative_path)
            except UnreadableEntryError as e:
                logger.warning("Skipping unreadable entry: %s", e)
                result.skipped.append(relative_path)
                continue

            result.entries.append(
                SourceEntry(
                    content_handle=handle,
                    relative_path=relative_path,
                    byte_length=byte_length,
                )
            )

        if result.skipped:
            self._notify_skipped(len(result.skipped))

        logger.debug(
            "Collected %d entries (%d skipped)", len(result.entries), len(result.skipped)
        )
        return result

    def probe(self, handle: ContentHandle, relative_path: str) -> int:
        """Check that a handle can be read.

        Zero-byte entries pass; they are dealt with at transfer time.

        Returns:
            Size of the content in bytes.

        Raises:
            UnreadableEntryError: If the handle is not a regular readable item.
        """
        if isinstance(handle, LocalContent) and not handle.is_regular_file():
            raise UnreadableEntryError(relative_path, "not a regular file")

        try:
            size = handle.size
            call_with_timeout(
                lambda: read_first_byte(handle),
                self.probe_timeout,
                label="probe",
            )
        except Exception as e:
            raise UnreadableEntryError(relative_path, str(e) or type(e).__name__) from e

        return size

    # =========================================================================
    # Input Expansion
    # =========================================================================

    def _expand(self, raw_inputs: Iterable[RawInput]) -> Iterator[tuple[ContentHandle, str]]:
        for raw in raw_inputs:
            if isinstance(raw, tuple):
                handle, relative_path = raw
                if isinstance(handle, Path):
                    handle = LocalContent(handle)
                yield handle, normalize_relative_path(relative_path)
            elif isinstance(raw, (str, Path)):
                yield from self._expand_path(Path(raw).expanduser().absolute())
            else:
                yield raw, normalize_relative_path(raw.name)

    def _expand_path(self, path: Path) -> Iterator[tuple[ContentHandle, str]]:
        if not path.is_dir():
            yield LocalContent(path), path.name
            return

        # Walk without following directory symlinks; sort for stable order
        for dirpath, dirnames, filenames in os.walk(path):
            dirnames.sort()
            if self.skip_hidden:
                dirnames[:] = [d for d in dirnames if not d.startswith(".")]

            rel_dir = Path(dirpath).relative_to(path.parent)
            for filename in sorted(filenames):
                if self.skip_hidden and filename.startswith("."):
                    continue
                relative_path = (rel_dir / filename).as_posix()
                yield LocalContent(Path(dirpath) / filename), relative_path

    def _notify_skipped(self, count: int) -> None:
        if self.notify is None:
            return
        self.notify(
            Notification(
                icon="folder-open",
                title="Entries skipped",
                text=f"{count} unreadable folder/entry items were skipped.",
                level=NotificationLevel.WARNING,
            )
        )


def collect_entries(
    raw_inputs: Iterable[RawInput],
    *,
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT_SECONDS,
    notify: Callable[[Notification], None] | None = None,
) -> CollectionResult:
    """Collect entries with a default-configured ``EntryCollector``."""
    return EntryCollector(probe_timeout=probe_timeout, notify=notify).collect(raw_inputs)
