"""Upload command for uploadctl."""

from __future__ import annotations

from typing import Optional

import click
from rich.progress import Progress, TaskID

from uploadctl.cli.common import Context, ExitCode, global_options, handle_errors
from uploadctl.core.output import (
    OutputFormat,
    create_progress,
    print_error,
    print_output,
    print_success,
    print_table,
    print_warning,
)
from uploadctl.core.validation import validate_path_exists, validate_timeout, validate_workers
from uploadctl.models.progress import BatchState, BatchSummary, Notification, NotificationLevel


class RichBatchObserver:
    """Batch observer that drives a Rich progress bar."""

    def __init__(self, progress: Progress) -> None:
        self.progress = progress
        self._task_id: Optional[TaskID] = None

    def start_batch(self, total: int, label: str) -> Optional[str]:
        description = f"Uploading {label}" if label else "Uploading"
        self._task_id = self.progress.add_task(description, total=total, current="")
        return None

    def update_file(self, batch_id: str, file_name: str, percent: int, status: str) -> None:
        if self._task_id is not None:
            self.progress.update(self._task_id, current=f"{file_name} {percent}%")

    def file_completed(self, batch_id: str, ok: bool, state: BatchState) -> None:
        if self._task_id is not None:
            self.progress.update(self._task_id, completed=state.completed_count)

    def finish_batch(self, batch_id: str, succeeded: int, total: int) -> None:
        if self._task_id is not None:
            self.progress.update(
                self._task_id, current=f"{succeeded}/{total} succeeded"
            )

    def add_notification(self, notification: Notification) -> None:
        if notification.level == NotificationLevel.ERROR:
            print_error(f"{notification.title}: {notification.text}")
        else:
            print_warning(f"{notification.title}: {notification.text}")


@click.command("upload")
@click.argument("paths", nargs=-1, required=True, type=click.Path())
@click.option("--folder", "-f", "folder_id", default=None, help="Target folder ID")
@click.option("--workers", "-w", type=int, default=None, help="Parallel transfers")
@click.option("--stall-timeout", type=float, default=None, help="Abort after N seconds without progress")
@click.option("--hard-timeout", type=float, default=None, help="Abort any transfer after N seconds")
@global_options
@handle_errors
def upload(
    ctx: Context,
    paths: tuple[str, ...],
    folder_id: Optional[str],
    workers: Optional[int],
    stall_timeout: Optional[float],
    hard_timeout: Optional[float],
) -> None:
    """Upload files and directories, recreating the directory tree remotely.

    Directories are created before any file inside them is sent. Uploads
    stop admitting new files once the server reports the storage quota
    is exhausted.

    Example:
        uploadctl upload ./photos report.pdf --folder 42
    """
    from uploadctl.services.uploads import UploadService

    profile = ctx.get_profile()

    sources = [validate_path_exists(p) for p in paths]
    workers = validate_workers(workers if workers is not None else profile.workers)
    stall = validate_timeout(
        stall_timeout if stall_timeout is not None else profile.stall_timeout, "stall_timeout"
    )
    hard = hard_timeout if hard_timeout is not None else profile.hard_timeout

    client = ctx.get_client()
    service = UploadService(client, current_folder_id=profile.default_folder)
    show_progress = ctx.output_format == OutputFormat.TABLE and not ctx.quiet

    if show_progress:
        with create_progress() as progress:
            summary = service.upload(
                sources,
                folder_id,
                workers=workers,
                stall_timeout=stall,
                hard_timeout=hard,
                observer=RichBatchObserver(progress),
            )
    else:
        summary = service.upload(
            sources,
            folder_id,
            workers=workers,
            stall_timeout=stall,
            hard_timeout=hard,
        )

    _print_summary(ctx, summary)

    if summary.quota_stopped:
        raise SystemExit(ExitCode.QUOTA_STOPPED)
    if not summary.success:
        raise SystemExit(ExitCode.GENERAL_ERROR)


def _print_summary(ctx: Context, summary: BatchSummary) -> None:
    if ctx.output_format == OutputFormat.JSON:
        print_output(summary.to_dict(), format=OutputFormat.JSON)
        return

    if summary.success:
        if not ctx.quiet:
            print_success(
                f"Uploaded {summary.succeeded}/{summary.total} files in {summary.duration:.1f}s"
            )
        return

    failed_rows = [
        {"path": r.relative_path, "outcome": r.outcome.value, "reason": r.reason}
        for r in summary.results
        if not r.counts_as_success
    ]
    if failed_rows and not ctx.quiet:
        print_table(
            failed_rows, ["path", "outcome", "reason"], title="Failed uploads", limit=20
        )

    if summary.quota_stopped:
        print_error(
            f"Storage quota exceeded: {summary.succeeded}/{summary.total} uploaded, "
            f"{summary.not_started} not started"
        )
    else:
        print_error(
            f"Upload completed with errors: {summary.failed}/{summary.total} files failed"
        )
    for error in summary.errors[:5]:
        click.echo(f"  - {error}", err=True)
    if len(summary.errors) > 5:
        click.echo(f"  ... and {len(summary.errors) - 5} more errors", err=True)
