"""Configuration management for uploadctl.

Supports YAML profiles and environment variable overrides.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from uploadctl.core.exceptions import ConfigurationError, ProfileNotFoundError
from uploadctl.core.timeouts import DEFAULT_HTTP_TIMEOUT_SECONDS, DEFAULT_STALL_TIMEOUT_SECONDS
from uploadctl.uploaders.constants import DEFAULT_UPLOAD_WORKERS

# =============================================================================
# Constants
# =============================================================================

CONFIG_DIR = Path.home() / ".config" / "uploadctl"
CONFIG_FILE = CONFIG_DIR / "config.yaml"

# Environment variable names
ENV_URL = "UPLOADCTL_URL"
ENV_TOKEN = "UPLOADCTL_TOKEN"
ENV_PROFILE = "UPLOADCTL_PROFILE"
ENV_VERIFY_SSL = "UPLOADCTL_VERIFY_SSL"
ENV_TIMEOUT = "UPLOADCTL_TIMEOUT"


# =============================================================================
# Profile
# =============================================================================


@dataclass
class Profile:
    """Configuration profile for a storage server."""

    url: str
    verify_ssl: bool = True
    timeout: int = DEFAULT_HTTP_TIMEOUT_SECONDS
    default_folder: Optional[str] = None
    workers: int = DEFAULT_UPLOAD_WORKERS
    stall_timeout: float = DEFAULT_STALL_TIMEOUT_SECONDS
    hard_timeout: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: dict[str, Any] = {
            "url": self.url,
            "verify_ssl": self.verify_ssl,
            "timeout": self.timeout,
            "default_folder": self.default_folder,
            "workers": self.workers,
            "stall_timeout": self.stall_timeout,
        }
        if self.hard_timeout is not None:
            data["hard_timeout"] = self.hard_timeout
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Profile":
        """Create from dictionary."""
        return cls(
            url=data.get("url", ""),
            verify_ssl=data.get("verify_ssl", True),
            timeout=data.get("timeout", DEFAULT_HTTP_TIMEOUT_SECONDS),
            default_folder=data.get("default_folder"),
            workers=data.get("workers", DEFAULT_UPLOAD_WORKERS),
            stall_timeout=data.get("stall_timeout", DEFAULT_STALL_TIMEOUT_SECONDS),
            hard_timeout=data.get("hard_timeout"),
        )


# =============================================================================
# Config
# =============================================================================


@dataclass
class Config:
    """Application configuration."""

    default_profile: str = "default"
    output_format: str = "table"
    profiles: dict[str, Profile] = field(default_factory=dict)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Config":
        """Load config from file with environment variable overrides.

        Priority (highest to lowest):
        1. Environment variables
        2. Config file
        3. Defaults

        Args:
            config_path: Optional path to config file.

        Returns:
            Loaded configuration.

        Raises:
            ConfigurationError: If the file exists but cannot be parsed.
        """
        path = config_path or CONFIG_FILE
        config = cls()

        if path.exists():
            try:
                with open(path) as f:
                    data = yaml.safe_load(f) or {}

                config.default_profile = data.get("default_profile", "default")
                config.output_format = data.get("output_format", "table")

                for name, pdata in (data.get("profiles") or {}).items():
                    config.profiles[name] = Profile.from_dict(pdata or {})
            except Exception as e:
                raise ConfigurationError(f"Failed to load config: {e}")

        # Environment variable overrides
        if url := os.getenv(ENV_URL):
            verify_ssl = os.getenv(ENV_VERIFY_SSL, "true").lower() in ("true", "1", "yes")
            try:
                timeout = int(os.getenv(ENV_TIMEOUT, str(DEFAULT_HTTP_TIMEOUT_SECONDS)))
            except ValueError:
                raise ConfigurationError(
                    "Timeout must be an integer", field=ENV_TIMEOUT, value=os.getenv(ENV_TIMEOUT)
                )

            base = config.profiles.get("default")
            config.profiles["default"] = Profile(
                url=url,
                verify_ssl=verify_ssl,
                timeout=timeout,
                default_folder=base.default_folder if base else None,
                workers=base.workers if base else DEFAULT_UPLOAD_WORKERS,
                stall_timeout=base.stall_timeout if base else DEFAULT_STALL_TIMEOUT_SECONDS,
                hard_timeout=base.hard_timeout if base else None,
            )

        if profile := os.getenv(ENV_PROFILE):
            config.default_profile = profile

        return config

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save config to file (tokens are never written).

        Args:
            config_path: Optional path to config file.
        """
        path = config_path or CONFIG_FILE
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "default_profile": self.default_profile,
            "output_format": self.output_format,
            "profiles": {name: p.to_dict() for name, p in self.profiles.items()},
        }

        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def get_profile(self, name: Optional[str] = None) -> Profile:
        """Get profile by name or default.

        Raises:
            ProfileNotFoundError: If profile doesn't exist.
        """
        name = name or self.default_profile
        if name not in self.profiles:
            raise ProfileNotFoundError(name)
        return self.profiles[name]

    def has_profile(self, name: str) -> bool:
        """Check if profile exists."""
        return name in self.profiles

    def add_profile(
        self,
        name: str,
        url: str,
        verify_ssl: bool = True,
        timeout: int = DEFAULT_HTTP_TIMEOUT_SECONDS,
        default_folder: Optional[str] = None,
        workers: int = DEFAULT_UPLOAD_WORKERS,
    ) -> Profile:
        """Add or update a profile.

        Returns:
            Created profile.
        """
        profile = Profile(
            url=url,
            verify_ssl=verify_ssl,
            timeout=timeout,
            default_folder=default_folder,
            workers=workers,
        )
        self.profiles[name] = profile
        return profile

    def remove_profile(self, name: str) -> bool:
        """Remove a profile.

        Returns:
            True if removed, False if didn't exist.
        """
        if name in self.profiles:
            del self.profiles[name]
            return True
        return False

    def set_default_profile(self, name: str) -> None:
        """Set the default profile.

        Raises:
            ProfileNotFoundError: If profile doesn't exist.
        """
        if name not in self.profiles:
            raise ProfileNotFoundError(name)
        self.default_profile = name


def get_token() -> Optional[str]:
    """Get the bearer token from the environment.

    Returns:
        Token if set, None otherwise.
    """
    return os.getenv(ENV_TOKEN)
