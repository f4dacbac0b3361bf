"""Pytest configuration and fixtures for uploadctl tests."""

from __future__ import annotations

import tempfile
import threading
from pathlib import Path
from typing import Any, Callable, Generator, Optional

import pytest

from uploadctl.models.entries import PathMap, SourceEntry
from uploadctl.models.progress import BatchState, Notification, TransferResult
from uploadctl.models.remote import RemoteFolder
from uploadctl.uploaders.common import MemoryContent


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's environment out of config loading."""
    for name in (
        "UPLOADCTL_URL",
        "UPLOADCTL_TOKEN",
        "UPLOADCTL_PROFILE",
        "UPLOADCTL_VERIFY_SSL",
        "UPLOADCTL_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_config_yaml() -> str:
    """Sample config YAML content."""
    return """
default_profile: test
output_format: table

profiles:
  test:
    url: https://cloud-test.example.org
    verify_ssl: false
    timeout: 30
    default_folder: home-1
    workers: 4
    stall_timeout: 60

  production:
    url: https://cloud.example.org
    verify_ssl: true
    timeout: 60
"""


# =============================================================================
# Engine Fakes
# =============================================================================


def make_entry(relative_path: str, data: bytes = b"x") -> SourceEntry:
    """Build an in-memory source entry."""
    name = relative_path.rsplit("/", 1)[-1]
    return SourceEntry(
        content_handle=MemoryContent(name, data),
        relative_path=relative_path,
        byte_length=len(data),
    )


class RecordingObserver:
    """Batch observer that records every event."""

    def __init__(self) -> None:
        self.started: list[tuple[int, str]] = []
        self.updates: list[tuple[str, str, int, str]] = []
        self.completed: list[tuple[bool, BatchState]] = []
        self.finished: list[tuple[str, int, int]] = []
        self.notifications: list[Notification] = []
        self._lock = threading.Lock()

    def start_batch(self, total: int, label: str) -> Optional[str]:
        self.started.append((total, label))
        return "batch-1"

    def update_file(self, batch_id: str, file_name: str, percent: int, status: str) -> None:
        with self._lock:
            self.updates.append((batch_id, file_name, percent, status))

    def file_completed(self, batch_id: str, ok: bool, state: BatchState) -> None:
        with self._lock:
            self.completed.append((ok, state))

    def finish_batch(self, batch_id: str, succeeded: int, total: int) -> None:
        self.finished.append((batch_id, succeeded, total))

    def add_notification(self, notification: Notification) -> None:
        with self._lock:
            self.notifications.append(notification)


class FakeTransfer:
    """Transfer callable with scripted results and in-flight tracking."""

    def __init__(
        self,
        results: Optional[dict[str, TransferResult]] = None,
        delay: float = 0.0,
        behavior: Optional[Callable[..., TransferResult]] = None,
    ) -> None:
        self.results = results or {}
        self.delay = delay
        self.behavior = behavior
        self.calls: list[dict[str, Any]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def __call__(self, handle, target_directory_id, file_name, on_progress, cancel, timeout):
        with self._lock:
            self.calls.append(
                {
                    "name": file_name,
                    "target": target_directory_id,
                    "timeout": timeout,
                    "data": handle.open().read(),
                }
            )
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.behavior is not None:
                return self.behavior(handle, target_directory_id, file_name, on_progress, cancel, timeout)
            if self.delay:
                cancel.wait(self.delay)
            on_progress(handle.size)
            return self.results.get(file_name, TransferResult.success({"id": file_name}, 201))
        finally:
            with self._lock:
                self.in_flight -= 1

    @property
    def names(self) -> list[str]:
        return [c["name"] for c in self.calls]


class FakeDirectoryCreator:
    """create_directory stand-in that records calls in order."""

    def __init__(self, fail: Optional[set[str]] = None) -> None:
        self.fail = fail or set()
        self.calls: list[tuple[str, str]] = []

    def __call__(self, name: str, parent_id: str) -> RemoteFolder:
        from uploadctl.core.exceptions import ServerError

        self.calls.append((name, parent_id))
        if name in self.fail:
            raise ServerError(500, f"cannot create {name}")
        return RemoteFolder(id=f"{parent_id}/{name}", name=name, parent_id=parent_id)


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def root_map() -> PathMap:
    path_map = PathMap("root")
    path_map.freeze()
    return path_map
