"""Upload engine for uploadctl.

This package provides the pieces of a hierarchical upload batch:
- Entry collection and readability probing
- Directory planning and depth-ordered materialization
- Bounded-width scheduling with per-transfer stall/hard timeouts
- Batch progress aggregation and the quota guard

These are internal implementation details. Use `UploadService` from
`uploadctl.services.uploads` as the public API.
"""

from uploadctl.uploaders.aggregator import (
    BatchObserver,
    LoggingObserver,
    ProgressAggregator,
    QuotaGuard,
)
from uploadctl.uploaders.collector import CollectionResult, EntryCollector, collect_entries
from uploadctl.uploaders.common import (
    LocalContent,
    MemoryContent,
    batch_label,
    guess_content_type,
    normalize_relative_path,
)
from uploadctl.uploaders.constants import (
    DEFAULT_STALL_TIMEOUT_SECONDS,
    DEFAULT_UPLOAD_WORKERS,
)
from uploadctl.uploaders.directories import (
    DirectoryMaterializer,
    MaterializationResult,
    materialize_directories,
    plan_directories,
)
from uploadctl.uploaders.scheduler import UploadScheduler, build_tasks
from uploadctl.uploaders.watchdog import TransferWatchdog, classify_failure

__all__ = [
    # Constants
    "DEFAULT_STALL_TIMEOUT_SECONDS",
    "DEFAULT_UPLOAD_WORKERS",
    # Content and paths
    "LocalContent",
    "MemoryContent",
    "batch_label",
    "guess_content_type",
    "normalize_relative_path",
    # Collection
    "CollectionResult",
    "EntryCollector",
    "collect_entries",
    # Directories
    "DirectoryMaterializer",
    "MaterializationResult",
    "materialize_directories",
    "plan_directories",
    # Scheduling
    "UploadScheduler",
    "build_tasks",
    "TransferWatchdog",
    "classify_failure",
    # Progress
    "BatchObserver",
    "LoggingObserver",
    "ProgressAggregator",
    "QuotaGuard",
]
