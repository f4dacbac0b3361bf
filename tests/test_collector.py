"""Tests for uploadctl.uploaders.collector."""

from __future__ import annotations

import io
import os
from pathlib import Path

import pytest

from uploadctl.core.exceptions import UnreadableEntryError, ValidationError
from uploadctl.uploaders.collector import EntryCollector, collect_entries
from uploadctl.uploaders.common import LocalContent, MemoryContent


class BrokenContent:
    """Handle whose content cannot be opened."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.size = 10

    def open(self) -> io.BytesIO:
        raise OSError("permission denied")


# =============================================================================
# Input Shapes
# =============================================================================


class TestInputShapes:
    """Tests for the different raw input forms."""

    def test_single_file_is_root_level(self, temp_dir: Path):
        path = temp_dir / "report.pdf"
        path.write_bytes(b"%PDF")

        result = collect_entries([path])

        assert [e.relative_path for e in result.entries] == ["report.pdf"]
        assert result.entries[0].byte_length == 4
        assert result.entries[0].is_root_level

    def test_directory_paths_start_with_directory_name(self, temp_dir: Path):
        root = temp_dir / "photos"
        (root / "2024").mkdir(parents=True)
        (root / "a.jpg").write_bytes(b"a")
        (root / "2024" / "b.jpg").write_bytes(b"bb")

        result = collect_entries([str(root)])

        paths = sorted(e.relative_path for e in result.entries)
        assert paths == ["photos/2024/b.jpg", "photos/a.jpg"]

    def test_pair_keeps_embedded_path(self):
        handle = MemoryContent("y.txt", b"data")

        result = collect_entries([(handle, "docs\\notes/./y.txt")])

        assert result.entries[0].relative_path == "docs/notes/y.txt"
        assert result.entries[0].content_handle is handle

    def test_pair_with_local_path(self, temp_dir: Path):
        path = temp_dir / "x.txt"
        path.write_text("x")

        result = collect_entries([(path, "a/x.txt")])

        assert isinstance(result.entries[0].content_handle, LocalContent)
        assert result.entries[0].relative_path == "a/x.txt"

    def test_bare_handle_uses_its_name(self):
        result = collect_entries([MemoryContent("solo.bin", b"1")])

        assert result.entries[0].relative_path == "solo.bin"

    def test_parent_escape_rejected(self):
        with pytest.raises(ValidationError):
            collect_entries([(MemoryContent("x", b"1"), "../x")])

    def test_skip_hidden(self, temp_dir: Path):
        root = temp_dir / "proj"
        (root / ".git").mkdir(parents=True)
        (root / ".git" / "HEAD").write_text("ref")
        (root / ".env").write_text("secret")
        (root / "main.py").write_text("print()")

        result = EntryCollector(skip_hidden=True).collect([root])

        assert [e.relative_path for e in result.entries] == ["proj/main.py"]


# =============================================================================
# Readability Probe
# =============================================================================


class TestProbe:
    """Tests for the first-byte readability probe."""

    def test_zero_byte_entries_are_kept(self):
        result = collect_entries([MemoryContent("empty.txt", b"")])

        assert len(result.entries) == 1
        assert result.entries[0].byte_length == 0
        assert result.skipped == []

    def test_unreadable_entry_is_skipped(self):
        result = collect_entries([BrokenContent("locked.txt"), MemoryContent("ok.txt", b"1")])

        assert [e.relative_path for e in result.entries] == ["ok.txt"]
        assert result.skipped == ["locked.txt"]

    def test_probe_raises_unreadable_entry_error(self):
        with pytest.raises(UnreadableEntryError) as exc_info:
            EntryCollector().probe(BrokenContent("locked.txt"), "dir/locked.txt")

        assert exc_info.value.file_path == "dir/locked.txt"

    def test_vanished_local_file_is_skipped(self, temp_dir: Path):
        result = collect_entries([(temp_dir / "gone.txt", "gone.txt")])

        assert result.entries == []
        assert result.skipped == ["gone.txt"]

    @pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="requires FIFOs")
    def test_fifo_is_skipped_without_blocking(self, temp_dir: Path):
        fifo = temp_dir / "pipe"
        os.mkfifo(fifo)

        result = collect_entries([(fifo, "pipe")], probe_timeout=0.5)

        assert result.entries == []
        assert result.skipped == ["pipe"]

    def test_one_aggregate_notification(self):
        notifications = []

        collect_entries(
            [BrokenContent("a"), BrokenContent("b"), BrokenContent("c")],
            notify=notifications.append,
        )

        assert len(notifications) == 1
        assert notifications[0].text == "3 unreadable folder/entry items were skipped."

    def test_no_notification_when_nothing_skipped(self):
        notifications = []

        collect_entries([MemoryContent("a", b"1")], notify=notifications.append)

        assert notifications == []
