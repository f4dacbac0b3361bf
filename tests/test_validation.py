"""Tests for uploadctl.core.validation module."""

from __future__ import annotations

from pathlib import Path

import pytest

from uploadctl.core.exceptions import InvalidURLError, PathValidationError, ValidationError
from uploadctl.core.validation import (
    MAX_WORKERS,
    validate_folder_id,
    validate_path_exists,
    validate_server_url,
    validate_timeout,
    validate_workers,
)

# =============================================================================
# URL Validation Tests
# =============================================================================


class TestValidateServerUrl:
    """Tests for validate_server_url."""

    def test_valid_https_url(self):
        assert validate_server_url("https://cloud.example.org") == "https://cloud.example.org"

    def test_valid_http_url(self):
        assert validate_server_url("http://localhost:8080") == "http://localhost:8080"

    def test_strips_trailing_slash(self):
        assert validate_server_url("https://cloud.example.org/") == "https://cloud.example.org"
        assert validate_server_url("https://cloud.example.org///") == "https://cloud.example.org"

    def test_strips_whitespace(self):
        assert validate_server_url("  https://cloud.example.org  ") == "https://cloud.example.org"

    def test_empty_url_raises(self):
        with pytest.raises(InvalidURLError):
            validate_server_url("")
        with pytest.raises(InvalidURLError):
            validate_server_url("   ")

    def test_missing_scheme_raises(self):
        with pytest.raises(InvalidURLError):
            validate_server_url("cloud.example.org")

    def test_ftp_scheme_raises(self):
        with pytest.raises(InvalidURLError):
            validate_server_url("ftp://cloud.example.org")

    def test_missing_host_raises(self):
        with pytest.raises(InvalidURLError):
            validate_server_url("https://")


# =============================================================================
# Numeric Validation Tests
# =============================================================================


class TestValidateWorkers:
    """Tests for validate_workers."""

    def test_valid_range(self):
        assert validate_workers(1) == 1
        assert validate_workers(10) == 10
        assert validate_workers(MAX_WORKERS) == MAX_WORKERS

    @pytest.mark.parametrize("workers", [0, -1, MAX_WORKERS + 1])
    def test_out_of_range(self, workers: int):
        with pytest.raises(ValidationError) as exc_info:
            validate_workers(workers)
        assert exc_info.value.details["field"] == "workers"


class TestValidateTimeout:
    """Tests for validate_timeout."""

    def test_positive(self):
        assert validate_timeout(0.5) == 0.5

    def test_zero_raises_with_field_name(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_timeout(0, "stall_timeout")
        assert exc_info.value.details["field"] == "stall_timeout"


# =============================================================================
# Path and Identifier Validation Tests
# =============================================================================


class TestValidatePathExists:
    """Tests for validate_path_exists."""

    def test_existing_path(self, temp_dir: Path):
        assert validate_path_exists(str(temp_dir)) == temp_dir

    def test_missing_path(self, temp_dir: Path):
        with pytest.raises(PathValidationError):
            validate_path_exists(temp_dir / "missing")


class TestValidateFolderId:
    """Tests for validate_folder_id."""

    def test_strips_whitespace(self):
        assert validate_folder_id("  abc123 ") == "abc123"

    @pytest.mark.parametrize("value", ["", "   ", None])
    def test_empty_raises(self, value):
        with pytest.raises(ValidationError):
            validate_folder_id(value)

    def test_slash_raises(self):
        with pytest.raises(ValidationError):
            validate_folder_id("a/b")
