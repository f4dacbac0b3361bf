"""Shared constants for the upload engine.

Timeouts live in ``uploadctl.core.timeouts``; they are re-exported here so the
engine has one place to import its defaults from.
"""

from uploadctl.core.timeouts import (
    DEFAULT_PROBE_TIMEOUT_SECONDS,
    DEFAULT_STALL_TIMEOUT_SECONDS,
    DEFAULT_TRANSFER_TIMEOUT_SECONDS,
    DEFAULT_ZERO_BYTE_READ_TIMEOUT_SECONDS,
    DEFAULT_ZERO_BYTE_TRANSFER_TIMEOUT_SECONDS,
    MIN_HARD_TIMEOUT_SECONDS,
)

# =============================================================================
# Scheduler Defaults
# =============================================================================

# Parallel transfer workers per batch
DEFAULT_UPLOAD_WORKERS = 10

# Per-file progress updates are forwarded in steps of this many percent
PROGRESS_UPDATE_STEP_PERCENT = 10

# Per-file statuses sent to observers; only "uploading" is throttled
UPLOADING_STATUS = "uploading"
DONE_STATUS = "done"
ERROR_STATUS = "error"

# Body stream chunk size for transfers
TRANSFER_CHUNK_SIZE = 64 * 1024

# =============================================================================
# Server Protocol
# =============================================================================

FOLDERS_ENDPOINT = "/api/folders"
UPLOAD_ENDPOINT = "/api/files/upload"

# Quota signals on a failed transfer
QUOTA_ERROR_TYPE = "QuotaExceeded"
HTTP_INSUFFICIENT_STORAGE = 507

DEFAULT_CONTENT_TYPE = "application/octet-stream"

__all__ = [
    "DEFAULT_PROBE_TIMEOUT_SECONDS",
    "DEFAULT_STALL_TIMEOUT_SECONDS",
    "DEFAULT_TRANSFER_TIMEOUT_SECONDS",
    "DEFAULT_ZERO_BYTE_READ_TIMEOUT_SECONDS",
    "DEFAULT_ZERO_BYTE_TRANSFER_TIMEOUT_SECONDS",
    "MIN_HARD_TIMEOUT_SECONDS",
    "DEFAULT_UPLOAD_WORKERS",
    "PROGRESS_UPDATE_STEP_PERCENT",
    "UPLOADING_STATUS",
    "DONE_STATUS",
    "ERROR_STATUS",
    "TRANSFER_CHUNK_SIZE",
    "FOLDERS_ENDPOINT",
    "UPLOAD_ENDPOINT",
    "QUOTA_ERROR_TYPE",
    "HTTP_INSUFFICIENT_STORAGE",
    "DEFAULT_CONTENT_TYPE",
]
