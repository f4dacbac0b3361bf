"""Directory planning and materialization.

The planner derives every directory implied by the entry paths and orders
them by depth so parents come before children. The materializer creates them
remotely, one at a time and in that order, filling a ``PathMap`` that the
scheduler reads once all directories are done.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field

from uploadctl.core.exceptions import DirectoryCreateError
from uploadctl.models.entries import PathMap, PlannedDirectory, SourceEntry, split_path
from uploadctl.models.remote import RemoteFolder

logger = logging.getLogger(__name__)

CreateDirectoryFn = Callable[[str, str], RemoteFolder]


# =============================================================================
# Planning
# =============================================================================


def plan_directories(entries: Iterable[SourceEntry]) -> list[PlannedDirectory]:
    """Derive the directory creation plan from entry paths.

    Every proper prefix of every relative path becomes one planned directory.
    The result is sorted by depth, then by path, so each parent precedes its
    children.

    Args:
        entries: Collected source entries.

    Returns:
        Unique planned directories in creation order.
    """
    paths: set[str] = set()
    for entry in entries:
        parts = split_path(entry.relative_path)
        for i in range(1, len(parts)):
            paths.add("/".join(parts[:i]))

    ordered = sorted(paths, key=lambda p: (len(split_path(p)), p))
    planned = []
    for path in ordered:
        parts = split_path(path)
        planned.append(
            PlannedDirectory(relative_path=path, parent_relative_path="/".join(parts[:-1]))
        )
    return planned


# =============================================================================
# Materialization
# =============================================================================


@dataclass
class MaterializationResult:
    """Outcome of the directory phase."""

    path_map: PathMap
    created: list[PlannedDirectory] = field(default_factory=list)
    failed: list[DirectoryCreateError] = field(default_factory=list)


class DirectoryMaterializer:
    """Create planned directories remotely in depth order."""

    def __init__(
        self,
        create_directory: CreateDirectoryFn,
        *,
        on_directory: Callable[[PlannedDirectory, bool], None] | None = None,
    ) -> None:
        """Initialize the materializer.

        Args:
            create_directory: Remote call taking ``(name, parent_id)``.
            on_directory: Called after each directory with its success flag.
        """
        self.create_directory = create_directory
        self.on_directory = on_directory

    def materialize(
        self,
        planned: Sequence[PlannedDirectory],
        root_id: str,
    ) -> MaterializationResult:
        """Create every planned directory and build the path map.

        Failures are logged and do not stop the phase. A directory whose
        parent could not be created is not sent to the server at all; it is
        recorded as failed so the files below it fail to resolve.

        Args:
            planned: Output of ``plan_directories``.
            root_id: Remote ID of the upload root.

        Returns:
            MaterializationResult with a frozen path map.
        """
        result = MaterializationResult(path_map=PathMap(root_id))
        path_map = result.path_map

        for directory in planned:
            parent_id = path_map.resolve(directory.parent_relative_path)
            if parent_id is None:
                error = DirectoryCreateError(
                    directory.relative_path,
                    f"parent {directory.parent_relative_path!r} unresolved",
                )
                logger.warning("%s", error)
                result.failed.append(error)
                self._report(directory, False)
                continue

            try:
                folder = self.create_directory(directory.name, parent_id)
            except Exception as e:
                error = DirectoryCreateError(directory.relative_path, str(e) or type(e).__name__)
                logger.error("%s", error)
                result.failed.append(error)
                self._report(directory, False)
                continue

            directory.remote_id = folder.id
            path_map.set(directory.relative_path, folder.id)
            result.created.append(directory)
            logger.debug("Created folder: %s -> %s", directory.relative_path, folder.id)
            self._report(directory, True)

        path_map.freeze()
        return result

    def _report(self, directory: PlannedDirectory, ok: bool) -> None:
        if self.on_directory is not None:
            self.on_directory(directory, ok)


def materialize_directories(
    planned: Sequence[PlannedDirectory],
    root_id: str,
    create_directory: CreateDirectoryFn,
) -> PathMap:
    """Create directories and return the resulting path map."""
    return DirectoryMaterializer(create_directory).materialize(planned, root_id).path_map
