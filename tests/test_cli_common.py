"""Tests for CLI common helpers."""

from __future__ import annotations

from unittest.mock import patch

import click
import pytest

from uploadctl.cli.common import Context, ExitCode, handle_errors
from uploadctl.core.client import StorageClient
from uploadctl.core.config import Config, Profile
from uploadctl.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    NetworkError,
    ValidationError,
)


class TestContextGetClient:
    """Tests for Context.get_client."""

    def test_builds_client_from_profile_and_env_token(self, monkeypatch):
        monkeypatch.setenv("UPLOADCTL_TOKEN", "secret")
        ctx = Context()
        ctx.config = Config(
            profiles={
                "default": Profile(url="https://cloud.example.org/", timeout=12, verify_ssl=False)
            }
        )

        client = ctx.get_client()

        assert isinstance(client, StorageClient)
        assert client.base_url == "https://cloud.example.org"
        assert client.token == "secret"
        assert client.timeout == 12
        assert client.verify_ssl is False
        assert ctx.get_client() is client

    def test_named_profile(self):
        ctx = Context()
        ctx.config = Config(
            profiles={
                "default": Profile(url="https://a.example.org"),
                "dev": Profile(url="https://b.example.org"),
            }
        )
        ctx.profile_name = "dev"

        assert ctx.get_client().base_url == "https://b.example.org"

    def test_get_profile_loads_config_once(self):
        profile = Profile(url="https://cloud.example.org", workers=3)
        ctx = Context()
        config = Config(profiles={"default": profile})

        with patch("uploadctl.cli.common.Config.load", return_value=config) as load:
            assert ctx.get_profile().workers == 3
            assert ctx.get_profile() is profile

        load.assert_called_once_with()

    def test_missing_profile_is_configuration_error(self):
        ctx = Context()
        ctx.config = Config()

        with pytest.raises(ConfigurationError, match="config init"):
            ctx.get_client()


class TestHandleErrors:
    """Tests for the handle_errors decorator."""

    @pytest.mark.parametrize(
        "error, code",
        [
            (AuthenticationError("https://x", "expired"), ExitCode.AUTH_ERROR),
            (NetworkError("https://x", "reset"), ExitCode.NETWORK_ERROR),
            (ValidationError("bad input"), ExitCode.GENERAL_ERROR),
            (RuntimeError("boom"), ExitCode.GENERAL_ERROR),
        ],
    )
    def test_exit_codes(self, error: Exception, code: int):
        @handle_errors
        def command() -> None:
            raise error

        with pytest.raises(SystemExit) as exc_info:
            command()

        assert exc_info.value.code == code

    def test_click_exceptions_pass_through(self):
        @handle_errors
        def command() -> None:
            raise click.UsageError("wrong")

        with pytest.raises(click.UsageError):
            command()

    def test_return_value_passes_through(self):
        @handle_errors
        def command() -> str:
            return "ok"

        assert command() == "ok"
