"""Input validation helpers for uploadctl."""

from __future__ import annotations

from pathlib import Path
from urllib.parse import urlparse

from uploadctl.core.exceptions import InvalidURLError, PathValidationError, ValidationError

MAX_WORKERS = 64


def validate_server_url(url: str) -> str:
    """Validate and normalize a server URL.

    Args:
        url: URL string as typed by the user.

    Returns:
        URL without trailing slash.

    Raises:
        InvalidURLError: If the URL has no http(s) scheme or no host.
    """
    if not url or not url.strip():
        raise InvalidURLError(url, "URL is empty")

    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise InvalidURLError(url, "scheme must be http or https")
    if not parsed.netloc:
        raise InvalidURLError(url, "missing host")

    return url.rstrip("/")


def validate_workers(workers: int) -> int:
    """Validate worker pool width (1..MAX_WORKERS)."""
    if workers < 1 or workers > MAX_WORKERS:
        raise ValidationError(
            f"Workers must be between 1 and {MAX_WORKERS}",
            field="workers",
            value=workers,
        )
    return workers


def validate_timeout(timeout: float, field: str = "timeout") -> float:
    """Validate a positive timeout in seconds."""
    if timeout <= 0:
        raise ValidationError("Timeout must be positive", field=field, value=timeout)
    return timeout


def validate_path_exists(path: str | Path) -> Path:
    """Validate that a local path exists.

    Returns:
        Expanded path.

    Raises:
        PathValidationError: If the path does not exist.
    """
    p = Path(path).expanduser()
    if not p.exists():
        raise PathValidationError(str(path), "does not exist")
    return p


def validate_folder_id(folder_id: str) -> str:
    """Validate a remote folder identifier (non-empty, no path separators)."""
    value = (folder_id or "").strip()
    if not value:
        raise ValidationError("Folder ID is empty", field="folder_id", value=folder_id)
    if "/" in value:
        raise ValidationError(
            "Folder ID must not contain '/'", field="folder_id", value=folder_id
        )
    return value
