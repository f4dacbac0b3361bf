"""Bounded-width upload scheduler.

A fixed pool of workers pulls tasks from one shared cursor. Each worker loops:
check the quota guard, claim the next index, run the task, report it to the
aggregator. Task failures never escape the loop; they become ``TaskResult``
values.

This is an internal implementation detail. Use `UploadService` from
`uploadctl.services.uploads` as the public API.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Optional

from uploadctl.core.exceptions import (
    ContentReadError,
    DirectoryUnresolvedError,
    HardTimeoutError,
    QuotaExceededError,
    StallTimeoutError,
    TransferTimeoutError,
    UploadError,
)
from uploadctl.models.entries import ContentHandle, PathMap, SourceEntry, UploadTask
from uploadctl.models.progress import (
    FailureKind,
    Notification,
    NotificationLevel,
    TaskOutcome,
    TaskResult,
    TransferResult,
)
from uploadctl.uploaders.aggregator import ProgressAggregator, QuotaGuard
from uploadctl.uploaders.common import MemoryContent, call_with_timeout, read_all
from uploadctl.uploaders.constants import (
    DEFAULT_STALL_TIMEOUT_SECONDS,
    DEFAULT_TRANSFER_TIMEOUT_SECONDS,
    DEFAULT_UPLOAD_WORKERS,
    DEFAULT_ZERO_BYTE_READ_TIMEOUT_SECONDS,
    DEFAULT_ZERO_BYTE_TRANSFER_TIMEOUT_SECONDS,
    DONE_STATUS,
    ERROR_STATUS,
    UPLOADING_STATUS,
)
from uploadctl.uploaders.watchdog import ProgressFn, TransferWatchdog

logger = logging.getLogger(__name__)

# (handle, target_directory_id, file_name, on_progress, cancel, timeout)
TransferCall = Callable[
    [ContentHandle, str, str, ProgressFn, threading.Event, float], TransferResult
]


def build_tasks(entries: Sequence[SourceEntry], path_map: PathMap) -> list[UploadTask]:
    """Pair each entry with its target directory from the path map.

    Entries whose parent directory is missing from the map get an unresolved
    task; the scheduler fails them without a transfer.
    """
    return [
        UploadTask(
            index=i,
            source_entry=entry,
            target_directory_id=path_map.resolve(entry.parent_path),
        )
        for i, entry in enumerate(entries)
    ]


class UploadScheduler:
    """Run upload tasks on a fixed-width worker pool."""

    def __init__(
        self,
        transfer: TransferCall,
        aggregator: ProgressAggregator,
        quota_guard: Optional[QuotaGuard] = None,
        *,
        concurrency: int = DEFAULT_UPLOAD_WORKERS,
        stall_timeout: float = DEFAULT_STALL_TIMEOUT_SECONDS,
        hard_timeout: Optional[float] = None,
        transfer_timeout: float = DEFAULT_TRANSFER_TIMEOUT_SECONDS,
        zero_byte_transfer_timeout: float = DEFAULT_ZERO_BYTE_TRANSFER_TIMEOUT_SECONDS,
        zero_byte_read_timeout: float = DEFAULT_ZERO_BYTE_READ_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the scheduler.

        Args:
            transfer: Performs one upload; see ``TransferCall``.
            aggregator: Receives per-task completions and notifications.
            quota_guard: Shared stop flag; a fresh one is created if None.
            concurrency: Maximum parallel transfers.
            stall_timeout: Watchdog stall window in seconds.
            hard_timeout: Watchdog wall-clock bound; derived if None.
            transfer_timeout: Transport timeout for non-empty files.
            zero_byte_transfer_timeout: Transport timeout for empty files.
            zero_byte_read_timeout: Deadline for reading an empty file eagerly.
        """
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")

        self.transfer = transfer
        self.aggregator = aggregator
        self.quota_guard = quota_guard or QuotaGuard()
        self.concurrency = concurrency
        self.stall_timeout = stall_timeout
        self.hard_timeout = hard_timeout
        self.transfer_timeout = transfer_timeout
        self.zero_byte_transfer_timeout = zero_byte_transfer_timeout
        self.zero_byte_read_timeout = zero_byte_read_timeout

        self._cursor = 0
        self._cursor_lock = threading.Lock()

    # =========================================================================
    # Pool
    # =========================================================================

    def run(self, tasks: Sequence[UploadTask], batch_id: str) -> list[TaskResult]:
        """Run every task that gets admitted and wait for the pool to drain.

        Args:
            tasks: Tasks in claim order.
            batch_id: Aggregator batch to report into.

        Returns:
            Results of the tasks that ran, in task order. Tasks never claimed
            because of a quota stop have no result.
        """
        if not tasks:
            return []

        with self._cursor_lock:
            self._cursor = 0

        results: list[Optional[TaskResult]] = [None] * len(tasks)
        workers = min(self.concurrency, len(tasks))
        logger.debug("Starting %d upload workers for %d tasks", workers, len(tasks))

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="uploadctl") as executor:
            futures = [
                executor.submit(self._worker, tasks, batch_id, results) for _ in range(workers)
            ]
            wait(futures)
            for future in futures:
                # Surface programming errors in the loop itself
                future.result()

        return [r for r in results if r is not None]

    def _claim(self, count: int) -> Optional[int]:
        with self._cursor_lock:
            if self._cursor >= count:
                return None
            index = self._cursor
            self._cursor += 1
            return index

    def _worker(
        self,
        tasks: Sequence[UploadTask],
        batch_id: str,
        results: list[Optional[TaskResult]],
    ) -> None:
        while not self.quota_guard.is_set:
            index = self._claim(len(tasks))
            if index is None:
                return
            result = self.execute(tasks[index], batch_id)
            results[index] = result
            self.aggregator.file_completed(batch_id, result.counts_as_success)

    # =========================================================================
    # Single Task
    # =========================================================================

    def execute(self, task: UploadTask, batch_id: str) -> TaskResult:
        """Run one task to its terminal result. Never raises."""
        start = time.monotonic()
        entry = task.source_entry
        logger.debug("Upload start: %s", entry.relative_path)

        try:
            result = self._execute(task, batch_id, start)
        except Exception as e:
            logger.exception("Unexpected error uploading %s", entry.relative_path)
            result = TaskResult(
                index=task.index,
                relative_path=entry.relative_path,
                outcome=TaskOutcome.FAILED,
                failure=FailureKind.CLIENT,
                reason=str(e) or type(e).__name__,
                duration=time.monotonic() - start,
            )

        logger.debug(
            "Upload end: %s -> %s (%.2fs)",
            entry.relative_path,
            result.outcome.value,
            result.duration,
        )
        return result

    def _execute(self, task: UploadTask, batch_id: str, start: float) -> TaskResult:
        entry = task.source_entry

        if task.target_directory_id is None:
            error = DirectoryUnresolvedError(entry.relative_path, entry.parent_path)
            logger.warning("%s", error)
            return self._failed(task, FailureKind.DIRECTORY_UNRESOLVED, error, start)

        handle: ContentHandle = entry.content_handle
        timeout = self.transfer_timeout

        if entry.byte_length == 0:
            try:
                data = call_with_timeout(
                    lambda: read_all(entry.content_handle),
                    self.zero_byte_read_timeout,
                    label="read",
                )
            except Exception as e:
                error = ContentReadError(entry.relative_path, str(e) or type(e).__name__)
                logger.warning("Skipping empty entry: %s", error.message)
                return TaskResult(
                    index=task.index,
                    relative_path=entry.relative_path,
                    outcome=TaskOutcome.SKIPPED,
                    failure=FailureKind.CLIENT,
                    reason=error.message,
                    duration=time.monotonic() - start,
                )
            handle = MemoryContent(entry.name, data)
            timeout = self.zero_byte_transfer_timeout

        size = entry.byte_length

        def on_progress(bytes_sent: int) -> None:
            percent = 100.0 if size <= 0 else min(100.0, bytes_sent * 100.0 / size)
            self.aggregator.update_file(
                batch_id, entry.name, percent, UPLOADING_STATUS, entry.relative_path
            )

        target_id = task.target_directory_id
        watchdog = TransferWatchdog(self.stall_timeout, self.hard_timeout, label=entry.relative_path)
        transfer_result = watchdog.run(
            lambda progress, cancel: self.transfer(
                handle, target_id, entry.name, progress, cancel, timeout
            ),
            on_progress,
        )
        return self._from_transfer(task, transfer_result, batch_id, start, watchdog.elapsed)

    def _from_transfer(
        self,
        task: UploadTask,
        transfer_result: TransferResult,
        batch_id: str,
        start: float,
        elapsed: float,
    ) -> TaskResult:
        entry = task.source_entry

        if transfer_result.ok:
            self.aggregator.update_file(
                batch_id, entry.name, 100, DONE_STATUS, entry.relative_path
            )
            return TaskResult(
                index=task.index,
                relative_path=entry.relative_path,
                outcome=TaskOutcome.SUCCEEDED,
                duration=time.monotonic() - start,
                data=transfer_result.data,
            )

        message = transfer_result.error_msg or "Upload failed"
        kind = transfer_result.failure_kind
        self.aggregator.update_file(batch_id, entry.name, 100, ERROR_STATUS, entry.relative_path)

        if kind == FailureKind.QUOTA_EXCEEDED:
            quota_error = QuotaExceededError(entry.relative_path, message)
            if self.quota_guard.trip(entry.name):
                self.aggregator.notify(
                    Notification(
                        icon="hard-drive",
                        title="Storage quota exceeded",
                        text=f"Upload stopped at {entry.name}: {message}",
                        level=NotificationLevel.ERROR,
                    )
                )
            return TaskResult(
                index=task.index,
                relative_path=entry.relative_path,
                outcome=TaskOutcome.QUOTA_EXCEEDED,
                failure=kind,
                reason=quota_error.message,
                duration=time.monotonic() - start,
            )

        error: UploadError
        if transfer_result.is_timeout:
            timeout_cls = {
                FailureKind.STALL_TIMEOUT: StallTimeoutError,
                FailureKind.HARD_TIMEOUT: HardTimeoutError,
            }.get(kind, TransferTimeoutError)
            error = timeout_cls(entry.relative_path, message, elapsed)
            logger.warning("%s: %s after %.1fs", entry.relative_path, message, elapsed)
            self.aggregator.notify(
                Notification(
                    icon="clock",
                    title="Upload timed out",
                    text=f"{entry.name}: {message}",
                    level=NotificationLevel.WARNING,
                )
            )
        else:
            error = UploadError(message, entry.relative_path)
            logger.error("Upload failed: %s: %s", entry.relative_path, message)

        return self._failed(task, kind or FailureKind.CLIENT, error, start)

    @staticmethod
    def _failed(
        task: UploadTask, kind: FailureKind, error: UploadError, start: float
    ) -> TaskResult:
        return TaskResult(
            index=task.index,
            relative_path=task.source_entry.relative_path,
            outcome=TaskOutcome.FAILED,
            failure=kind,
            reason=error.message,
            duration=time.monotonic() - start,
        )
