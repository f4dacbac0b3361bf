"""Tests for uploadctl.uploaders.common and the entry models."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest
from conftest import make_entry

from uploadctl.core.exceptions import ValidationError
from uploadctl.models.entries import ContentHandle, PathMap, PlannedDirectory, parent_path
from uploadctl.uploaders.common import (
    LocalContent,
    MemoryContent,
    batch_label,
    call_with_timeout,
    guess_content_type,
    normalize_relative_path,
    read_all,
    read_first_byte,
)

# =============================================================================
# Content Handles
# =============================================================================


class TestContentHandles:
    """Tests for LocalContent and MemoryContent."""

    def test_memory_content(self):
        handle = MemoryContent("a.bin", b"abc")

        assert handle.name == "a.bin"
        assert handle.size == 3
        assert read_all(handle) == b"abc"
        assert read_first_byte(handle) == b"a"
        assert isinstance(handle, ContentHandle)

    def test_local_content(self, temp_dir: Path):
        path = temp_dir / "data.csv"
        path.write_bytes(b"1,2\n")
        handle = LocalContent(path)

        assert handle.name == "data.csv"
        assert handle.size == 4
        assert handle.is_regular_file()
        assert read_all(handle) == b"1,2\n"

    def test_local_directory_is_not_regular(self, temp_dir: Path):
        assert not LocalContent(temp_dir).is_regular_file()

    def test_missing_local_file_is_not_regular(self, temp_dir: Path):
        assert not LocalContent(temp_dir / "missing").is_regular_file()


# =============================================================================
# Paths
# =============================================================================


class TestNormalizeRelativePath:
    """Tests for normalize_relative_path."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("a/b/c.txt", "a/b/c.txt"),
            ("a\\b\\c.txt", "a/b/c.txt"),
            ("/a//b/./c.txt", "a/b/c.txt"),
            ("c.txt", "c.txt"),
        ],
    )
    def test_normalizes(self, raw: str, expected: str):
        assert normalize_relative_path(raw) == expected

    @pytest.mark.parametrize("raw", ["", "/", "./."])
    def test_empty_raises(self, raw: str):
        with pytest.raises(ValidationError):
            normalize_relative_path(raw)

    def test_parent_segment_raises(self):
        with pytest.raises(ValidationError):
            normalize_relative_path("a/../../etc/passwd")

    def test_parent_path(self):
        assert parent_path("a/b/c.txt") == "a/b"
        assert parent_path("c.txt") == ""


class TestBatchLabel:
    """Tests for batch_label."""

    def test_flat_upload_has_no_label(self):
        assert batch_label([make_entry("a.txt"), make_entry("b.txt")]) == ""

    def test_single_root_folder(self):
        entries = [make_entry("photos/a.jpg"), make_entry("photos/2024/b.jpg"), make_entry("x.txt")]
        assert batch_label(entries) == "photos"

    def test_several_root_folders(self):
        entries = [make_entry("a/1"), make_entry("b/2"), make_entry("c/3"), make_entry("a/4")]
        assert batch_label(entries) == "3 folders"


class TestGuessContentType:
    """Tests for guess_content_type."""

    def test_known_extension(self):
        assert guess_content_type("notes.txt") == "text/plain"

    def test_unknown_extension(self):
        assert guess_content_type("blob.zzz-unknown") == "application/octet-stream"


# =============================================================================
# Deadlines
# =============================================================================


class TestCallWithTimeout:
    """Tests for call_with_timeout."""

    def test_returns_value(self):
        assert call_with_timeout(lambda: 42, 1) == 42

    def test_reraises_error(self):
        def fail():
            raise OSError("nope")

        with pytest.raises(OSError, match="nope"):
            call_with_timeout(fail, 1)

    def test_times_out(self):
        blocker = threading.Event()
        try:
            with pytest.raises(TimeoutError):
                call_with_timeout(lambda: blocker.wait(5), 0.1, label="probe")
        finally:
            blocker.set()


# =============================================================================
# PathMap
# =============================================================================


class TestPathMap:
    """Tests for PathMap."""

    def test_root_is_empty_path(self):
        path_map = PathMap("root-id")

        assert path_map.root_id == "root-id"
        assert path_map.resolve("") == "root-id"
        assert "" in path_map

    def test_write_once(self):
        path_map = PathMap("r")
        path_map.set("a", "1")

        with pytest.raises(ValueError):
            path_map.set("a", "2")
        assert path_map.resolve("a") == "1"

    def test_frozen_rejects_writes(self):
        path_map = PathMap("r")
        path_map.freeze()

        with pytest.raises(ValueError):
            path_map.set("a", "1")
        assert len(path_map) == 1

    def test_planned_directory_name(self):
        planned = PlannedDirectory("a/b/c", "a/b")

        assert planned.name == "c"
        assert planned.depth == 3
