"""Stall and hard-timeout supervision for a single transfer.

Two timers run while a transfer is in flight:

- the stall timer is restarted on every progress event and fires when the
  transfer has gone quiet for a full stall window;
- the hard timer is started once and fires after a fixed wall-clock bound,
  however much progress the transfer keeps reporting.

Whichever terminal event comes first (transfer result, stall, hard timeout)
is the one returned; later events are ignored. When a timer fires, the
watchdog sets the cancel event so the transfer stops at its next chunk, and
``run`` returns without waiting for it to unwind.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from collections.abc import Callable
from typing import Any, Optional

from uploadctl.core.exceptions import TransferAborted
from uploadctl.core.timeouts import derive_hard_timeout
from uploadctl.models.progress import FailureKind, TransferResult
from uploadctl.uploaders.constants import (
    DEFAULT_STALL_TIMEOUT_SECONDS,
    HTTP_INSUFFICIENT_STORAGE,
    QUOTA_ERROR_TYPE,
)

logger = logging.getLogger(__name__)

ProgressFn = Callable[[int], None]
TransferFn = Callable[[ProgressFn, threading.Event], TransferResult]


class TransferWatchdog:
    """Supervise one transfer call with a stall timer and a hard timer."""

    def __init__(
        self,
        stall_timeout: float = DEFAULT_STALL_TIMEOUT_SECONDS,
        hard_timeout: Optional[float] = None,
        *,
        label: str = "",
    ) -> None:
        """Initialize the watchdog.

        Args:
            stall_timeout: Seconds without progress before aborting.
            hard_timeout: Wall-clock bound; derived from ``stall_timeout`` if None.
            label: Name used in log and abort messages.
        """
        self.stall_timeout = stall_timeout
        self.hard_timeout = (
            hard_timeout if hard_timeout is not None else derive_hard_timeout(stall_timeout)
        )
        self.label = label
        self.cancel = threading.Event()

        self._lock = threading.Lock()
        self._result: Optional[TransferResult] = None
        self._error: Optional[Exception] = None
        self._settled = threading.Event()
        self._stall_timer: Optional[threading.Timer] = None
        self._hard_timer: Optional[threading.Timer] = None
        self._stall_generation = 0
        self._started_at: Optional[float] = None
        self._on_progress: Optional[ProgressFn] = None

    # =========================================================================
    # State
    # =========================================================================

    @property
    def result(self) -> Optional[TransferResult]:
        return self._result

    @property
    def is_resolved(self) -> bool:
        return self._result is not None

    @property
    def elapsed(self) -> float:
        if self._started_at is None:
            return 0.0
        return time.monotonic() - self._started_at

    # =========================================================================
    # Running a Transfer
    # =========================================================================

    def run(self, transfer: TransferFn, on_progress: Optional[ProgressFn] = None) -> TransferResult:
        """Run ``transfer`` under supervision.

        The transfer runs on a helper thread; this call returns as soon as a
        terminal event settles it. A transfer that ignores the cancel event
        is left to unwind on its own.

        Args:
            transfer: Called with ``(progress_callback, cancel_event)``.
            on_progress: Receives bytes-transferred updates while not resolved.

        Returns:
            The first terminal result.

        Raises:
            Exception: Whatever ``transfer`` raised, if that settled it first.
        """
        self._on_progress = on_progress
        self._start()

        worker = threading.Thread(
            target=self._run_transfer,
            args=(transfer,),
            name=f"uploadctl-transfer-{self.label}",
            daemon=True,
        )
        worker.start()
        self._settled.wait()

        with self._lock:
            result, error = self._result, self._error
        if result is None:
            raise error or TransferAborted(self.label)
        return result

    def _run_transfer(self, transfer: TransferFn) -> None:
        try:
            result = transfer(self.progress, self.cancel)
        except TransferAborted:
            result = TransferResult.timeout(
                FailureKind.TIMEOUT, f"Upload aborted/stalled: {self.label}"
            )
        except Exception as e:
            with self._lock:
                if not self._settled.is_set():
                    self._error = e
                    self._settle()
            return
        self.resolve(result)

    def progress(self, bytes_transferred: int) -> None:
        """Progress event: restart the stall timer and forward the update."""
        with self._lock:
            if self._settled.is_set():
                return
            self._restart_stall_timer()

        if self._on_progress is not None:
            self._on_progress(bytes_transferred)

    def resolve(self, result: TransferResult) -> bool:
        """Record a terminal result unless one is already recorded.

        Returns:
            True if this call settled the transfer.
        """
        with self._lock:
            if self._settled.is_set():
                return False
            self._result = result
            self._settle()
        return True

    def _settle(self) -> None:
        # Caller holds self._lock
        self._cancel_timers()
        self._settled.set()

    # =========================================================================
    # Timers
    # =========================================================================

    def _start(self) -> None:
        with self._lock:
            self._started_at = time.monotonic()
            self._restart_stall_timer()
            self._hard_timer = threading.Timer(self.hard_timeout, self._on_hard_timeout)
            self._hard_timer.daemon = True
            self._hard_timer.start()

    def _restart_stall_timer(self) -> None:
        # Caller holds self._lock
        if self._stall_timer is not None:
            self._stall_timer.cancel()
        self._stall_generation += 1
        self._stall_timer = threading.Timer(
            self.stall_timeout, self._on_stall_timeout, args=(self._stall_generation,)
        )
        self._stall_timer.daemon = True
        self._stall_timer.start()

    def _cancel_timers(self) -> None:
        if self._stall_timer is not None:
            self._stall_timer.cancel()
            self._stall_timer = None
        if self._hard_timer is not None:
            self._hard_timer.cancel()
            self._hard_timer = None

    def _on_stall_timeout(self, generation: int) -> None:
        with self._lock:
            # A progress event restarted the timer after this one fired
            if generation != self._stall_generation:
                return
        message = f"Upload stalled for {self.stall_timeout:g}s"
        if self.resolve(TransferResult.timeout(FailureKind.STALL_TIMEOUT, message)):
            logger.info("%s: %s", self.label, message)
            self.cancel.set()

    def _on_hard_timeout(self) -> None:
        message = f"Upload hard timeout after {self.hard_timeout:g}s"
        if self.resolve(TransferResult.timeout(FailureKind.HARD_TIMEOUT, message)):
            logger.info("%s: %s", self.label, message)
            self.cancel.set()


# =============================================================================
# Failure Classification
# =============================================================================


def classify_failure(status: Optional[int], body: str) -> TransferResult:
    """Build the failure result for a non-2xx transfer response.

    Quota is signalled either by ``error_type == "QuotaExceeded"`` in a JSON
    body or by HTTP 507. The message is the body's ``error`` field when there
    is one, else the raw body text.

    Args:
        status: HTTP status code.
        body: Response body text.

    Returns:
        Failed TransferResult.
    """
    payload: Any = None
    try:
        payload = json.loads(body) if body else None
    except ValueError:
        payload = None

    error_type = None
    message = body or (f"HTTP {status}" if status is not None else "Upload failed")
    if isinstance(payload, dict):
        error_type = payload.get("error_type")
        if payload.get("error"):
            message = str(payload["error"])

    is_quota = error_type == QUOTA_ERROR_TYPE or status == HTTP_INSUFFICIENT_STORAGE
    return TransferResult.failure(message, status=status, is_quota_error=is_quota)
