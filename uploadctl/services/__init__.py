"""Service layer for storage operations.

Provides service classes that encapsulate the storage REST API operations.
"""

from __future__ import annotations

from .base import BaseService
from .folders import FolderService
from .uploads import UploadService

__all__ = [
    "BaseService",
    "FolderService",
    "UploadService",
]
