"""Batch progress aggregation and the quota guard.

``ProgressAggregator`` owns the ``BatchState`` counters of every running batch
and forwards snapshots to a ``BatchObserver``. Counter updates happen under a
single lock; observer calls are made after the lock is released, each with
the snapshot taken at the time of the increment.

``QuotaGuard`` is the set-once stop flag shared by all workers of a batch.
"""

from __future__ import annotations

import logging
import threading
import uuid
from typing import Optional, Protocol

from uploadctl.models.progress import BatchState, Notification, NotificationLevel
from uploadctl.uploaders.constants import PROGRESS_UPDATE_STEP_PERCENT, UPLOADING_STATUS

logger = logging.getLogger(__name__)


# =============================================================================
# Observer Interface
# =============================================================================


class BatchObserver(Protocol):
    """Receiver of batch progress events."""

    def start_batch(self, total: int, label: str) -> Optional[str]: ...

    def update_file(self, batch_id: str, file_name: str, percent: int, status: str) -> None: ...

    def file_completed(self, batch_id: str, ok: bool, state: BatchState) -> None: ...

    def finish_batch(self, batch_id: str, succeeded: int, total: int) -> None: ...

    def add_notification(self, notification: Notification) -> None: ...


class LoggingObserver:
    """Observer that writes batch events to the log."""

    def start_batch(self, total: int, label: str) -> Optional[str]:
        logger.info("Upload started: %d files%s", total, f" ({label})" if label else "")
        return None

    def update_file(self, batch_id: str, file_name: str, percent: int, status: str) -> None:
        logger.debug("[%s] %s: %d%% %s", batch_id, file_name, percent, status)

    def file_completed(self, batch_id: str, ok: bool, state: BatchState) -> None:
        logger.debug(
            "[%s] %d/%d complete (%d ok)",
            batch_id,
            state.completed_count,
            state.total_files,
            state.succeeded_count,
        )

    def finish_batch(self, batch_id: str, succeeded: int, total: int) -> None:
        logger.info("[%s] Upload finished: %d/%d succeeded", batch_id, succeeded, total)

    def add_notification(self, notification: Notification) -> None:
        level = {
            NotificationLevel.INFO: logging.INFO,
            NotificationLevel.WARNING: logging.WARNING,
            NotificationLevel.ERROR: logging.ERROR,
        }[notification.level]
        logger.log(level, "%s: %s", notification.title, notification.text)


# =============================================================================
# Aggregator
# =============================================================================


class ProgressAggregator:
    """Thread-safe batch counters with observer fan-out."""

    def __init__(self, observer: Optional[BatchObserver] = None) -> None:
        self.observer: BatchObserver = observer or LoggingObserver()
        self._lock = threading.Lock()
        self._batches: dict[str, BatchState] = {}
        self._finished: set[str] = set()
        self._file_steps: dict[tuple[str, str], int] = {}

    def start(self, total_files: int, label: str = "") -> str:
        """Register a batch and announce it.

        Returns:
            Batch ID (the observer's, if it assigns one).
        """
        batch_id = self._call("start_batch", total_files, label) or uuid.uuid4().hex[:12]
        with self._lock:
            self._batches[batch_id] = BatchState(
                batch_id=batch_id, total_files=total_files, label=label
            )
        return batch_id

    def state(self, batch_id: str) -> BatchState:
        """Snapshot of a batch's counters."""
        with self._lock:
            return self._batches[batch_id].snapshot()

    def file_completed(self, batch_id: str, succeeded: bool) -> BatchState:
        """Count one terminal task.

        Returns:
            Post-increment snapshot (also passed to the observer).
        """
        with self._lock:
            batch = self._batches[batch_id]
            batch.completed_count += 1
            if succeeded:
                batch.succeeded_count += 1
            snapshot = batch.snapshot()

        self._call("file_completed", batch_id, succeeded, snapshot)
        return snapshot

    def update_file(
        self,
        batch_id: str,
        file_name: str,
        percent: float,
        status: str = UPLOADING_STATUS,
        file_key: Optional[str] = None,
    ) -> None:
        """Forward per-file progress.

        "uploading" updates are throttled to 10% steps, with 100% forwarded
        once. Any other status is terminal and always forwarded.

        Args:
            batch_id: Batch the file belongs to.
            file_name: Name shown to the observer.
            percent: Progress, 0-100.
            status: "uploading", "done" or "error".
            file_key: Throttle key, e.g. the relative path; defaults to ``file_name``.
        """
        step = PROGRESS_UPDATE_STEP_PERCENT
        bucket = 100 if percent >= 100 else int(percent // step) * step
        key = (batch_id, file_key or file_name)
        with self._lock:
            if status == UPLOADING_STATUS:
                last = self._file_steps.get(key, -1)
                if bucket <= last:
                    return
            self._file_steps[key] = 100 if status != UPLOADING_STATUS else bucket

        self._call("update_file", batch_id, file_name, bucket, status)

    def finish(self, batch_id: str) -> BatchState:
        """Close a batch. Only the first call reaches the observer.

        Returns:
            Final snapshot.
        """
        with self._lock:
            batch = self._batches[batch_id]
            first = batch_id not in self._finished
            self._finished.add(batch_id)
            snapshot = batch.snapshot()
            for key in [k for k in self._file_steps if k[0] == batch_id]:
                del self._file_steps[key]

        if first:
            self._call(
                "finish_batch", batch_id, snapshot.succeeded_count, snapshot.total_files
            )
        return snapshot

    def notify(self, notification: Notification) -> None:
        self._call("add_notification", notification)

    def _call(self, method: str, *args):
        try:
            return getattr(self.observer, method)(*args)
        except Exception:
            # Observer errors must not take down a worker
            logger.exception("Observer %s failed", method)
            return None


# =============================================================================
# Quota Guard
# =============================================================================


class QuotaGuard:
    """Set-once stop flag for a batch.

    Readers never block; ``trip`` records the first file that hit the quota.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._first_file: Optional[str] = None

    @property
    def is_set(self) -> bool:
        return self._event.is_set()

    @property
    def first_file(self) -> Optional[str]:
        return self._first_file

    def trip(self, file_name: str) -> bool:
        """Set the flag.

        Returns:
            True for the call that set it first.
        """
        with self._lock:
            if self._event.is_set():
                return False
            self._first_file = file_name
            self._event.set()
        logger.warning("Storage quota exceeded at %s; no further uploads will start", file_name)
        return True
