"""Tests for uploadctl CLI commands."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from uploadctl.cli.main import cli
from uploadctl.core.config import Config, Profile
from uploadctl.core.exceptions import AuthenticationError, ServerUnreachableError
from uploadctl.models.progress import BatchSummary, FailureKind, TaskOutcome, TaskResult
from uploadctl.models.remote import RemoteFolder


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def config() -> Config:
    return Config(
        default_profile="default",
        profiles={
            "default": Profile(
                url="https://cloud.example.org",
                default_folder="home-1",
                workers=4,
                stall_timeout=60,
            )
        },
    )


@pytest.fixture
def upload_dir(temp_dir: Path) -> Path:
    root = temp_dir / "photos"
    root.mkdir()
    (root / "a.jpg").write_bytes(b"a")
    return root


def _summary(**overrides) -> BatchSummary:
    fields = dict(
        success=True,
        total=1,
        succeeded=1,
        failed=0,
        duration=0.2,
        batch_id="b1",
        label="photos",
    )
    fields.update(overrides)
    return BatchSummary(**fields)


# =============================================================================
# Basic CLI Tests
# =============================================================================


class TestCLIBasics:
    """Tests for basic CLI functionality."""

    def test_cli_help(self, runner: CliRunner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "uploadctl" in result.output
        assert "upload" in result.output
        assert "folder" in result.output
        assert "config" in result.output

    def test_cli_version(self, runner: CliRunner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "uploadctl" in result.output

    def test_upload_help(self, runner: CliRunner):
        result = runner.invoke(cli, ["upload", "--help"])
        assert result.exit_code == 0
        assert "--folder" in result.output
        assert "--workers" in result.output
        assert "--stall-timeout" in result.output

    def test_folder_help(self, runner: CliRunner):
        result = runner.invoke(cli, ["folder", "--help"])
        assert result.exit_code == 0
        assert "list" in result.output
        assert "create" in result.output

    def test_health_help(self, runner: CliRunner):
        result = runner.invoke(cli, ["health", "--help"])
        assert result.exit_code == 0
        assert "ping" in result.output


# =============================================================================
# Upload Command Tests
# =============================================================================


class TestUploadCommand:
    """Tests for the upload command."""

    def _invoke(self, runner: CliRunner, config: Config, args: list[str], summary: BatchSummary):
        with patch("uploadctl.cli.common.Config.load", return_value=config):
            with patch("uploadctl.services.uploads.UploadService") as mock_cls:
                mock_cls.return_value.upload.return_value = summary
                result = runner.invoke(cli, ["upload", *args])
        return result, mock_cls

    def test_success_exit_zero(self, runner: CliRunner, config: Config, upload_dir: Path):
        result, mock_cls = self._invoke(runner, config, [str(upload_dir), "-q"], _summary())

        assert result.exit_code == 0
        _, kwargs = mock_cls.call_args
        assert kwargs["current_folder_id"] == "home-1"
        call = mock_cls.return_value.upload.call_args
        assert call.args[0] == [upload_dir]
        assert call.args[1] is None
        assert call.kwargs["workers"] == 4
        assert call.kwargs["stall_timeout"] == 60

    def test_options_override_profile(self, runner: CliRunner, config: Config, upload_dir: Path):
        result, mock_cls = self._invoke(
            runner,
            config,
            [str(upload_dir), "-q", "--folder", "dest", "-w", "2", "--hard-timeout", "300"],
            _summary(),
        )

        assert result.exit_code == 0
        call = mock_cls.return_value.upload.call_args
        assert call.args[1] == "dest"
        assert call.kwargs["workers"] == 2
        assert call.kwargs["hard_timeout"] == 300

    def test_partial_failure_exit_one(self, runner: CliRunner, config: Config, upload_dir: Path):
        summary = _summary(
            success=False,
            total=2,
            succeeded=1,
            failed=1,
            errors=["photos/b.jpg: HTTP 500"],
            results=[
                TaskResult(0, "photos/a.jpg", TaskOutcome.SUCCEEDED),
                TaskResult(1, "photos/b.jpg", TaskOutcome.FAILED, FailureKind.SERVER, "HTTP 500"),
            ],
        )

        result, _ = self._invoke(runner, config, [str(upload_dir)], summary)

        assert result.exit_code == 1

    def test_quota_stop_exit_six(self, runner: CliRunner, config: Config, upload_dir: Path):
        summary = _summary(success=False, total=5, succeeded=2, failed=1, quota_stopped=True, not_started=2)

        result, _ = self._invoke(runner, config, [str(upload_dir), "-q"], summary)

        assert result.exit_code == 6

    def test_json_output(self, runner: CliRunner, config: Config, upload_dir: Path):
        result, _ = self._invoke(runner, config, [str(upload_dir), "-o", "json"], _summary())

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["batch_id"] == "b1"
        assert data["succeeded"] == 1
        assert data["quota_stopped"] is False

    def test_missing_path(self, runner: CliRunner, config: Config, temp_dir: Path):
        result, mock_cls = self._invoke(runner, config, [str(temp_dir / "nope")], _summary())

        assert result.exit_code == 1
        mock_cls.return_value.upload.assert_not_called()

    def test_invalid_workers(self, runner: CliRunner, config: Config, upload_dir: Path):
        result, _ = self._invoke(runner, config, [str(upload_dir), "-w", "0"], _summary())

        assert result.exit_code == 1

    def test_missing_profile(self, runner: CliRunner, upload_dir: Path):
        result, _ = self._invoke(runner, Config(), [str(upload_dir)], _summary())

        assert result.exit_code == 1

    def test_auth_error_exit_two(self, runner: CliRunner, config: Config, upload_dir: Path):
        with patch("uploadctl.cli.common.Config.load", return_value=config):
            with patch("uploadctl.services.uploads.UploadService") as mock_cls:
                mock_cls.return_value.upload.side_effect = AuthenticationError(
                    "https://cloud.example.org", "bad token"
                )
                result = runner.invoke(cli, ["upload", str(upload_dir), "-q"])

        assert result.exit_code == 2


# =============================================================================
# Health and Folder Command Tests
# =============================================================================


class TestHealthPing:
    """Tests for health ping."""

    def test_ping_json(self, runner: CliRunner, config: Config):
        client = MagicMock()
        client.token = "tok"
        client.ping.return_value = {
            "url": "https://cloud.example.org",
            "status": "ok",
            "folders": 1,
            "home_folder": "home-1",
            "latency_ms": 12,
        }

        with patch("uploadctl.cli.common.Config.load", return_value=config):
            with patch("uploadctl.cli.common.Context.get_client", return_value=client):
                result = runner.invoke(cli, ["health", "ping", "-o", "json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["home_folder"] == "home-1"
        assert data["authenticated"] is True

    def test_ping_unreachable_exit_three(self, runner: CliRunner, config: Config):
        client = MagicMock()
        client.ping.side_effect = ServerUnreachableError("https://cloud.example.org")

        with patch("uploadctl.cli.common.Config.load", return_value=config):
            with patch("uploadctl.cli.common.Context.get_client", return_value=client):
                result = runner.invoke(cli, ["health", "ping"])

        assert result.exit_code == 3


class TestFolderCommands:
    """Tests for folder commands."""

    def test_list_quiet_prints_ids(self, runner: CliRunner, config: Config):
        client = MagicMock()
        client.list_root_folders.return_value = [RemoteFolder(id="h"), RemoteFolder(id="s")]

        with patch("uploadctl.cli.common.Config.load", return_value=config):
            with patch("uploadctl.cli.common.Context.get_client", return_value=client):
                result = runner.invoke(cli, ["folder", "list", "-q"])

        assert result.exit_code == 0
        assert result.output.split() == ["h", "s"]

    def test_create_under_home(self, runner: CliRunner, config: Config):
        client = MagicMock()
        client.home_folder_id.return_value = "home"
        client.create_directory.return_value = RemoteFolder(id="n1", name="reports")

        with patch("uploadctl.cli.common.Config.load", return_value=config):
            with patch("uploadctl.cli.common.Context.get_client", return_value=client):
                result = runner.invoke(cli, ["folder", "create", "reports", "-q"])

        assert result.exit_code == 0
        client.create_directory.assert_called_once_with("reports", "home")
        assert result.output.strip() == "n1"
