"""Data models for uploadctl.

Provides Pydantic models for server payloads and dataclasses for the upload
engine's batch state.
"""

from __future__ import annotations

from .base import BaseModel
from .entries import (
    ContentHandle,
    PathMap,
    PlannedDirectory,
    SourceEntry,
    UploadTask,
    parent_path,
    path_depth,
    split_path,
)
from .progress import (
    BatchState,
    BatchSummary,
    FailureKind,
    Notification,
    NotificationLevel,
    OperationPhase,
    OperationResult,
    Progress,
    TaskOutcome,
    TaskResult,
    TransferResult,
    UploadProgress,
)
from .remote import RemoteFile, RemoteFolder

__all__ = [
    # Base
    "BaseModel",
    # Server payloads
    "RemoteFolder",
    "RemoteFile",
    # Entries
    "ContentHandle",
    "SourceEntry",
    "PlannedDirectory",
    "PathMap",
    "UploadTask",
    "split_path",
    "parent_path",
    "path_depth",
    # Progress
    "OperationPhase",
    "Progress",
    "UploadProgress",
    "TaskOutcome",
    "FailureKind",
    "TransferResult",
    "TaskResult",
    "BatchState",
    "Notification",
    "NotificationLevel",
    "OperationResult",
    "BatchSummary",
]
