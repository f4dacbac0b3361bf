"""Progress models for tracking upload batches.

Provides dataclasses for batch state, per-task results and batch summaries.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, List, Optional


class OperationPhase(Enum):
    """Operation phases for progress tracking."""

    COLLECTING = "collecting"
    CREATING_FOLDERS = "creating_folders"
    UPLOADING = "uploading"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass
class Progress:
    """Base progress information."""

    phase: OperationPhase
    current: int = 0
    total: int = 0
    message: str = ""
    success: bool = True
    errors: List[str] = field(default_factory=list)

    @property
    def percent(self) -> float:
        """Calculate completion percentage."""
        if self.total == 0:
            return 0.0
        return (self.current / self.total) * 100

    @property
    def is_complete(self) -> bool:
        """Check if operation is complete."""
        return self.phase == OperationPhase.COMPLETE


@dataclass
class UploadProgress(Progress):
    """Phase-level progress of an upload batch."""

    batch_id: str = ""


# =============================================================================
# Per-transfer and per-task results
# =============================================================================


class TaskOutcome(Enum):
    """Terminal state of one upload task."""

    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED = "failed"
    QUOTA_EXCEEDED = "quota_exceeded"


class FailureKind(Enum):
    """Why a task failed."""

    DIRECTORY_UNRESOLVED = "directory_unresolved"
    STALL_TIMEOUT = "stall_timeout"
    HARD_TIMEOUT = "hard_timeout"
    TIMEOUT = "timeout"
    NETWORK = "network"
    SERVER = "server"
    QUOTA_EXCEEDED = "quota_exceeded"
    CLIENT = "client"


@dataclass(frozen=True)
class TransferResult:
    """Resolution of a single transfer call."""

    ok: bool
    data: Any = None
    status: Optional[int] = None
    is_timeout: bool = False
    timeout_kind: Optional[FailureKind] = None
    error_msg: Optional[str] = None
    is_quota_error: bool = False

    @classmethod
    def success(cls, data: Any = None, status: Optional[int] = None) -> "TransferResult":
        return cls(ok=True, data=data, status=status)

    @classmethod
    def timeout(cls, kind: FailureKind, message: str) -> "TransferResult":
        return cls(ok=False, is_timeout=True, timeout_kind=kind, error_msg=message)

    @classmethod
    def failure(
        cls,
        message: Optional[str] = None,
        status: Optional[int] = None,
        is_quota_error: bool = False,
    ) -> "TransferResult":
        return cls(ok=False, status=status, error_msg=message, is_quota_error=is_quota_error)

    @property
    def failure_kind(self) -> Optional[FailureKind]:
        """Classify a failed transfer."""
        if self.ok:
            return None
        if self.is_quota_error:
            return FailureKind.QUOTA_EXCEEDED
        if self.is_timeout:
            return self.timeout_kind or FailureKind.TIMEOUT
        if self.status is not None:
            return FailureKind.SERVER
        return FailureKind.NETWORK


@dataclass(frozen=True)
class TaskResult:
    """Terminal result of one upload task."""

    index: int
    relative_path: str
    outcome: TaskOutcome
    failure: Optional[FailureKind] = None
    reason: str = ""
    duration: float = 0.0
    data: Any = None

    @property
    def counts_as_success(self) -> bool:
        """Skipped placeholders are reported as successes."""
        return self.outcome in (TaskOutcome.SUCCEEDED, TaskOutcome.SKIPPED)


# =============================================================================
# Batch state and notifications
# =============================================================================


@dataclass
class BatchState:
    """Counters for one batch, owned by the progress aggregator."""

    batch_id: str
    total_files: int
    completed_count: int = 0
    succeeded_count: int = 0
    label: str = ""

    @property
    def percent(self) -> float:
        if self.total_files == 0:
            return 0.0
        return (self.completed_count / self.total_files) * 100

    @property
    def failed_count(self) -> int:
        return self.completed_count - self.succeeded_count

    def snapshot(self) -> "BatchState":
        """Independent copy safe to hand to observers."""
        return replace(self)


class NotificationLevel(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """One-off user-facing message (skipped entries, quota, timeouts)."""

    icon: str
    title: str
    text: str
    level: NotificationLevel = NotificationLevel.WARNING


# =============================================================================
# Summaries
# =============================================================================


@dataclass
class OperationResult:
    """Generic operation result."""

    success: bool
    total: int
    succeeded: int
    failed: int
    duration: float
    errors: List[str] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        """Calculate success rate percentage."""
        if self.total == 0:
            return 100.0
        return (self.succeeded / self.total) * 100


@dataclass
class BatchSummary(OperationResult):
    """Final tally of an upload batch."""

    batch_id: str = ""
    label: str = ""
    quota_stopped: bool = False
    skipped: int = 0
    not_started: int = 0
    entries_skipped: List[str] = field(default_factory=list)
    directories_created: int = 0
    directories_failed: int = 0
    results: List[TaskResult] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return self.total

    @property
    def succeeded_count(self) -> int:
        return self.succeeded

    def to_dict(self) -> dict[str, Any]:
        """Summary fields for JSON output."""
        return {
            "batch_id": self.batch_id,
            "label": self.label,
            "total_files": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped": self.skipped,
            "not_started": self.not_started,
            "quota_stopped": self.quota_stopped,
            "entries_skipped": len(self.entries_skipped),
            "directories_created": self.directories_created,
            "directories_failed": self.directories_failed,
            "duration": round(self.duration, 2),
            "errors": self.errors,
        }
