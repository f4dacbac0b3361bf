"""Exception hierarchy for uploadctl.

Provides typed exceptions for different failure modes with clear error messages.
"""

from __future__ import annotations

from typing import Any


class UploadCtlError(Exception):
    """Base exception for all uploadctl errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(UploadCtlError):
    """Error in configuration (missing, invalid, or malformed)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class ProfileNotFoundError(ConfigurationError):
    """Requested profile does not exist."""

    def __init__(self, profile: str):
        super().__init__(f"Profile not found: {profile}", field="profile", value=profile)
        self.profile = profile


# =============================================================================
# Validation Errors
# =============================================================================


class ValidationError(UploadCtlError):
    """Input validation failed."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = repr(value)
        super().__init__(message, details)
        self.field = field
        self.value = value


class InvalidURLError(ValidationError):
    """Invalid URL format."""

    def __init__(self, url: str, reason: str = ""):
        msg = f"Invalid URL: {url}"
        if reason:
            msg = f"{msg} - {reason}"
        super().__init__(msg, field="url", value=url)
        self.url = url
        self.reason = reason


class PathValidationError(ValidationError):
    """Path validation failed."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Invalid path: {path} - {reason}", field="path", value=path)
        self.path = path
        self.reason = reason


# =============================================================================
# Connection Errors
# =============================================================================


class ConnectionError(UploadCtlError):
    """Base class for connection-related errors."""

    def __init__(self, message: str, url: str | None = None):
        details = {"url": url} if url else {}
        super().__init__(message, details)
        self.url = url


class NetworkError(ConnectionError):
    """Network-level error (DNS, TCP, TLS, dropped connection)."""

    def __init__(self, url: str, cause: str | None = None):
        msg = f"Network error connecting to {url}"
        if cause:
            msg = f"{msg}: {cause}"
        super().__init__(msg, url)
        self.cause = cause


class ServerUnreachableError(ConnectionError):
    """Server is not reachable."""

    def __init__(self, url: str):
        super().__init__(f"Server unreachable: {url}", url)


class TimeoutError(ConnectionError):
    """Request timed out."""

    def __init__(self, url: str, timeout: float):
        super().__init__(f"Request timed out after {timeout:g}s: {url}", url)
        self.timeout = timeout


# =============================================================================
# Authentication / Server Errors
# =============================================================================


class AuthenticationError(UploadCtlError):
    """Authentication failed."""

    def __init__(self, url: str | None = None, reason: str = ""):
        msg = "Authentication failed"
        if url:
            msg = f"{msg} for {url}"
        if reason:
            msg = f"{msg}: {reason}"
        details = {"url": url} if url else {}
        super().__init__(msg, details)
        self.url = url
        self.reason = reason


class ResourceNotFoundError(UploadCtlError):
    """Requested remote resource does not exist."""

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            {"resource_type": resource_type, "resource_id": resource_id},
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ServerError(UploadCtlError):
    """Structured failure response from the storage server."""

    def __init__(self, status_code: int, message: str = "", path: str | None = None):
        msg = f"HTTP {status_code}"
        if message:
            msg = f"{msg}: {message}"
        details: dict[str, Any] = {"status_code": status_code}
        if path:
            details["path"] = path
        super().__init__(msg, details)
        self.status_code = status_code
        self.path = path


# =============================================================================
# Operation Errors
# =============================================================================


class OperationError(UploadCtlError):
    """Error during an operation."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        full_details = {"operation": operation}
        if details:
            full_details.update(details)
        super().__init__(message, full_details)
        self.operation = operation


class UploadError(OperationError):
    """Error during upload."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        full_details = details or {}
        if file_path:
            full_details["file"] = file_path
        super().__init__("upload", message, full_details)
        self.file_path = file_path


class UploadInProgressError(UploadError):
    """A batch is already running on this service."""

    def __init__(self) -> None:
        super().__init__("Upload already in progress")


class UnreadableEntryError(UploadError):
    """Entry failed the readability probe at collection time."""

    def __init__(self, file_path: str, reason: str = ""):
        msg = f"Unreadable entry: {file_path}"
        if reason:
            msg = f"{msg} - {reason}"
        super().__init__(msg, file_path)
        self.reason = reason


class DirectoryCreateError(UploadError):
    """Remote create-directory call failed."""

    def __init__(self, directory: str, reason: str = ""):
        msg = f"Failed to create directory {directory}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg, details={"directory": directory})
        self.directory = directory
        self.reason = reason


class DirectoryUnresolvedError(UploadError):
    """File's parent directory has no remote id."""

    def __init__(self, file_path: str, directory: str):
        super().__init__(
            f"Directory unresolved: {directory or '/'}",
            file_path,
            {"directory": directory},
        )
        self.directory = directory


class TransferTimeoutError(UploadError):
    """Watchdog detected a non-responsive transfer."""

    def __init__(self, file_path: str, message: str, elapsed: float | None = None):
        details: dict[str, Any] = {}
        if elapsed is not None:
            details["elapsed"] = f"{elapsed:.1f}s"
        super().__init__(message, file_path, details)
        self.elapsed = elapsed


class StallTimeoutError(TransferTimeoutError):
    """No progress within the stall window."""


class HardTimeoutError(TransferTimeoutError):
    """Transfer exceeded its wall-clock bound."""


class QuotaExceededError(UploadError):
    """Storage limit reached on the server."""

    def __init__(self, file_path: str, message: str = "Storage quota exceeded"):
        super().__init__(message, file_path)


class ContentReadError(UploadError):
    """Content could not be materialized for the outgoing request."""

    def __init__(self, file_path: str, reason: str = ""):
        msg = f"Cannot read content of {file_path}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg, file_path)
        self.reason = reason


class TransferAborted(UploadError):
    """Transfer was cancelled by its watchdog."""

    def __init__(self, file_path: str | None = None):
        super().__init__("Transfer aborted", file_path)
