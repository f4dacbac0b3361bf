"""Upload service for hierarchical batch uploads.

Provides UploadService, the public entry point of the upload engine. One call
to ``upload`` runs a full batch:

1. Collect and probe entries (files, directory trees, handles with paths)
2. Plan and create the implied remote directories, parents first
3. Upload every file on a bounded worker pool with stall/hard timeouts
4. Report progress to an observer and return a BatchSummary
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable
from typing import Any, Optional

from uploadctl.core.exceptions import UploadInProgressError
from uploadctl.core.logging import get_audit_logger, log_context
from uploadctl.core.validation import validate_timeout, validate_workers
from uploadctl.models.progress import (
    BatchSummary,
    OperationPhase,
    TaskOutcome,
    TaskResult,
    UploadProgress,
)
from uploadctl.uploaders.aggregator import BatchObserver, ProgressAggregator, QuotaGuard
from uploadctl.uploaders.collector import EntryCollector, RawInput
from uploadctl.uploaders.common import batch_label
from uploadctl.uploaders.constants import DEFAULT_STALL_TIMEOUT_SECONDS, DEFAULT_UPLOAD_WORKERS
from uploadctl.uploaders.directories import DirectoryMaterializer, plan_directories
from uploadctl.uploaders.scheduler import UploadScheduler, build_tasks

from .base import BaseService
from .folders import FolderService

logger = logging.getLogger(__name__)


class UploadService(BaseService):
    """Service for hierarchical upload batches.

    One service instance runs at most one batch at a time.
    """

    def __init__(
        self,
        client: Any,
        *,
        observer: Optional[BatchObserver] = None,
        current_folder_id: Optional[str] = None,
    ) -> None:
        """Initialize the service.

        Args:
            client: StorageClient instance.
            observer: Default batch observer (logging observer if None).
            current_folder_id: Folder used as root when no target is given.
        """
        super().__init__(client)
        self.observer = observer
        self.current_folder_id = current_folder_id
        self.folders = FolderService(client)
        self._state_lock = threading.Lock()
        self._is_uploading = False

    @property
    def is_uploading(self) -> bool:
        return self._is_uploading

    def upload(
        self,
        inputs: Iterable[RawInput],
        target_folder_id: Optional[str] = None,
        *,
        workers: int = DEFAULT_UPLOAD_WORKERS,
        stall_timeout: float = DEFAULT_STALL_TIMEOUT_SECONDS,
        hard_timeout: Optional[float] = None,
        observer: Optional[BatchObserver] = None,
        on_reload: Optional[Callable[[], None]] = None,
        progress_callback: Optional[Callable[[UploadProgress], None]] = None,
    ) -> BatchSummary:
        """Upload files and directory trees into a remote folder.

        Args:
            inputs: Local paths, content handles, or ``(handle, relative_path)`` pairs.
            target_folder_id: Remote root; defaults to the current, then home folder.
            workers: Parallel transfers (default: 10).
            stall_timeout: Seconds without progress before a transfer is aborted.
            hard_timeout: Wall-clock bound per transfer; derived if None.
            observer: Batch observer for this call (overrides the default).
            on_reload: Called once after the batch drains.
            progress_callback: Optional callback for phase-level progress.

        Returns:
            BatchSummary with per-task results.

        Raises:
            UploadInProgressError: If a batch is already running.
        """
        validate_workers(workers)
        validate_timeout(stall_timeout, "stall_timeout")
        if hard_timeout is not None:
            validate_timeout(hard_timeout, "hard_timeout")

        with self._state_lock:
            if self._is_uploading:
                raise UploadInProgressError()
            self._is_uploading = True

        try:
            return self._run_batch(
                list(inputs),
                target_folder_id,
                workers=workers,
                stall_timeout=stall_timeout,
                hard_timeout=hard_timeout,
                observer=observer or self.observer,
                on_reload=on_reload,
                progress_callback=progress_callback,
            )
        finally:
            with self._state_lock:
                self._is_uploading = False

    def _run_batch(
        self,
        inputs: list[RawInput],
        target_folder_id: Optional[str],
        *,
        workers: int,
        stall_timeout: float,
        hard_timeout: Optional[float],
        observer: Optional[BatchObserver],
        on_reload: Optional[Callable[[], None]],
        progress_callback: Optional[Callable[[UploadProgress], None]],
    ) -> BatchSummary:
        start_time = time.time()
        aggregator = ProgressAggregator(observer)

        def report(phase: OperationPhase, **kwargs: Any) -> None:
            if progress_callback:
                progress_callback(UploadProgress(phase=phase, **kwargs))

        # Phase 1: Collect entries
        report(OperationPhase.COLLECTING, message="Reading entries...")
        collection = EntryCollector(notify=aggregator.notify).collect(inputs)
        entries = collection.entries

        if not entries:
            report(OperationPhase.ERROR, success=False, message="Nothing to upload")
            return BatchSummary(
                success=False,
                total=0,
                succeeded=0,
                failed=0,
                duration=time.time() - start_time,
                errors=["No readable entries to upload"],
                entries_skipped=collection.skipped,
            )

        root_id = self.folders.resolve_root(target_folder_id, self.current_folder_id)
        label = batch_label(entries)
        batch_id = aggregator.start(len(entries), label)
        quota_guard = QuotaGuard()
        results: list[TaskResult] = []
        directories_created = 0
        directory_errors: list[str] = []

        try:
            with log_context("upload_batch", logger, batch=batch_id, files=len(entries)):
                # Phase 2: Create directories, parents before children
                planned = plan_directories(entries)
                report(
                    OperationPhase.CREATING_FOLDERS,
                    total=len(planned),
                    batch_id=batch_id,
                    message=f"Creating {len(planned)} folders...",
                )
                materialization = DirectoryMaterializer(self.folders.create).materialize(
                    planned, root_id
                )
                directories_created = len(materialization.created)
                directory_errors = [e.message for e in materialization.failed]

                # Phase 3: Upload files
                tasks = build_tasks(entries, materialization.path_map)
                report(
                    OperationPhase.UPLOADING,
                    total=len(tasks),
                    batch_id=batch_id,
                    message=f"Uploading {len(tasks)} files...",
                )
                scheduler = UploadScheduler(
                    self.client.transfer,
                    aggregator,
                    quota_guard,
                    concurrency=workers,
                    stall_timeout=stall_timeout,
                    hard_timeout=hard_timeout,
                )
                results = scheduler.run(tasks, batch_id)
        finally:
            aggregator.finish(batch_id)

        summary = self._summarize(
            results,
            total=len(entries),
            batch_id=batch_id,
            label=label,
            quota_stopped=quota_guard.is_set,
            entries_skipped=collection.skipped,
            directories_created=directories_created,
            directory_errors=directory_errors,
            duration=time.time() - start_time,
        )

        get_audit_logger().log_batch(
            summary.to_dict(),
            success=summary.success,
            server=self.client.base_url,
            folder=root_id,
        )

        if on_reload is not None:
            on_reload()

        report(
            OperationPhase.COMPLETE if summary.success else OperationPhase.ERROR,
            current=summary.succeeded + summary.failed,
            total=summary.total,
            batch_id=batch_id,
            success=summary.success,
            message=(
                "Upload complete!"
                if summary.success
                else f"Upload completed with {summary.failed} failures"
            ),
            errors=summary.errors,
        )

        if not summary.success:
            logger.warning("Upload completed with %s failures", summary.failed)

        return summary

    @staticmethod
    def _summarize(
        results: list[TaskResult],
        *,
        total: int,
        batch_id: str,
        label: str,
        quota_stopped: bool,
        entries_skipped: list[str],
        directories_created: int,
        directory_errors: list[str],
        duration: float,
    ) -> BatchSummary:
        succeeded = sum(1 for r in results if r.counts_as_success)
        failed = len(results) - succeeded
        skipped = sum(1 for r in results if r.outcome == TaskOutcome.SKIPPED)
        errors = directory_errors + [
            f"{r.relative_path}: {r.reason}" for r in results if not r.counts_as_success
        ]

        return BatchSummary(
            success=failed == 0 and not quota_stopped and len(results) == total,
            total=total,
            succeeded=succeeded,
            failed=failed,
            duration=duration,
            errors=errors,
            batch_id=batch_id,
            label=label,
            quota_stopped=quota_stopped,
            skipped=skipped,
            not_started=total - len(results),
            entries_skipped=entries_skipped,
            directories_created=directories_created,
            directories_failed=len(directory_errors),
            results=results,
        )
