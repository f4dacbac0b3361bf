"""Folder service for remote folder lookups and creation."""

from __future__ import annotations

import logging
from typing import Optional

from uploadctl.core.validation import validate_folder_id
from uploadctl.models.remote import RemoteFolder
from uploadctl.uploaders.constants import FOLDERS_ENDPOINT

from .base import BaseService

logger = logging.getLogger(__name__)


class FolderService(BaseService):
    """Service for remote folder operations."""

    def list_root(self) -> list[RemoteFolder]:
        """List top-level folders.

        Returns:
            Folders in server order; the first one is the home folder.
        """
        return self.client.list_root_folders()

    def home_folder_id(self) -> str:
        """ID of the user's home folder."""
        return self.client.home_folder_id()

    def get(self, folder_id: str) -> RemoteFolder:
        """Get a single folder.

        Raises:
            ResourceNotFoundError: If the folder does not exist.
        """
        folder_id = validate_folder_id(folder_id)
        data = self._get(self._build_path(FOLDERS_ENDPOINT, folder_id))
        return RemoteFolder.model_validate(data)

    def create(self, name: str, parent_id: str) -> RemoteFolder:
        """Create a folder under ``parent_id``."""
        folder = self.client.create_directory(name, validate_folder_id(parent_id))
        logger.debug("Created folder %s (%s) under %s", name, folder.id, parent_id)
        return folder

    def resolve_root(
        self,
        target_folder_id: Optional[str] = None,
        current_folder_id: Optional[str] = None,
    ) -> str:
        """Pick the upload root: explicit target, then current folder, then home.

        Returns:
            Remote folder ID.
        """
        if target_folder_id:
            return validate_folder_id(target_folder_id)
        if current_folder_id:
            return validate_folder_id(current_folder_id)
        return self.home_folder_id()
