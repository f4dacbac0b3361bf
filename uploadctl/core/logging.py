"""Logging utilities for uploadctl.

Module loggers go through the standard ``logging`` tree under ``uploadctl``.
Batch runs are bracketed by ``log_context`` and recorded once on the
``uploadctl.audit`` logger when they finish.
"""

from __future__ import annotations

import logging
import sys
import time
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Generator, Optional

# =============================================================================
# Constants
# =============================================================================

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
AUDIT_LOGGER_NAME = "uploadctl.audit"

# Transport libraries log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


# =============================================================================
# Logger Setup
# =============================================================================


def setup_logging(
    level: int = logging.WARNING,
    *,
    quiet: bool = False,
    verbose: bool = False,
) -> None:
    """Configure root logging for the CLI.

    Args:
        level: Base logging level.
        quiet: Only show errors.
        verbose: Show debug messages, including per-file upload events.
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stderr,
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


# =============================================================================
# Operation Timing
# =============================================================================


class LogContext:
    """Log the start, end and duration of one named operation."""

    def __init__(
        self,
        operation: str,
        logger: Optional[logging.Logger] = None,
        **fields: Any,
    ) -> None:
        """Initialize the context.

        Args:
            operation: Name shown in the log lines, e.g. ``upload_batch``.
            logger: Logger to write to; defaults to this module's.
            **fields: Key/value pairs appended to the start line.
        """
        self.operation = operation
        self.logger = logger or logging.getLogger(__name__)
        self.fields = fields
        self._started: Optional[float] = None

    @property
    def elapsed(self) -> float:
        """Seconds since the operation started, 0 before it has."""
        if self._started is None:
            return 0.0
        return time.monotonic() - self._started

    def __enter__(self) -> "LogContext":
        """Log the start line and start the clock."""
        self._started = time.monotonic()
        details = ", ".join(f"{k}={v}" for k, v in self.fields.items())
        self.logger.info("Starting %s (%s)", self.operation, details)
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Log completion, or the failure that ended the operation.

        Exceptions are never suppressed.
        """
        if exc_type is not None:
            self.logger.error("%s failed after %.2fs: %s", self.operation, self.elapsed, exc_val)
        else:
            self.logger.info("%s completed in %.2fs", self.operation, self.elapsed)


@contextmanager
def log_context(
    operation: str,
    logger: Optional[logging.Logger] = None,
    **fields: Any,
) -> Generator[LogContext, None, None]:
    """Bracket a block with start/finish log lines.

    Args:
        operation: Name of the operation.
        logger: Logger instance.
        **fields: Context fields for the start line.

    Yields:
        The active LogContext.
    """
    with LogContext(operation, logger, **fields) as ctx:
        yield ctx


# =============================================================================
# Audit Logger
# =============================================================================


class AuditLogger:
    """One audit record per finished upload batch."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        """Initialize the audit logger.

        Args:
            logger: Destination logger; defaults to ``uploadctl.audit``.
        """
        self.logger = logger or logging.getLogger(AUDIT_LOGGER_NAME)

    def log_batch(
        self,
        summary: dict[str, Any],
        *,
        success: bool,
        server: Optional[str] = None,
        folder: Optional[str] = None,
    ) -> dict[str, Any]:
        """Record a finished batch.

        Failed batches (including quota stops) are logged at WARNING.

        Args:
            summary: ``BatchSummary.to_dict()`` output.
            success: Whether every file in the batch counted as uploaded.
            server: Storage server URL.
            folder: Remote folder the batch was uploaded into.

        Returns:
            The record that was logged.
        """
        record: dict[str, Any] = {
            "timestamp": datetime.now().isoformat(),
            "operation": "upload",
            "batch_id": summary.get("batch_id"),
            "success": success,
            "total_files": summary.get("total_files", 0),
            "succeeded": summary.get("succeeded", 0),
            "failed": summary.get("failed", 0),
            "quota_stopped": bool(summary.get("quota_stopped")),
        }
        if server:
            record["server"] = server
        if folder:
            record["folder"] = folder

        level = logging.INFO if record["success"] else logging.WARNING
        self.logger.log(level, "AUDIT: %s", record)
        return record


def get_audit_logger() -> AuditLogger:
    """Get the audit logger instance."""
    return AuditLogger()
