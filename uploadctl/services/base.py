"""Base service with common methods for all storage services."""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from uploadctl.core.client import StorageClient


class BaseService:
    """Base service class with common functionality."""

    def __init__(self, client: "StorageClient") -> None:
        """Initialize service with storage client.

        Args:
            client: StorageClient instance
        """
        self.client = client

    def _get(self, path: str, **kwargs: Any) -> Any:
        """Execute GET request and return JSON data.

        Args:
            path: API endpoint path
            **kwargs: Additional request parameters

        Returns:
            Parsed JSON response data
        """
        resp = self.client.get(path, **kwargs)
        return resp.json()

    def _build_path(self, *parts: str) -> str:
        """Build API path from parts.

        Args:
            *parts: Path segments

        Returns:
            Joined path string
        """
        return "/" + "/".join(p.strip("/") for p in parts if p)
