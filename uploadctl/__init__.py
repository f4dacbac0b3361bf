"""uploadctl - Hierarchical concurrent uploads to a folder-based storage server.

This package provides a command-line interface and library for uploading
local files and directory trees, supporting:
- Remote folder trees recreated parents-first
- Bounded parallel transfers with stall and hard timeouts
- Fail-fast handling of storage quota errors
- Batch progress reporting and summaries
"""

__version__ = "0.1.0"

from uploadctl.core.client import StorageClient
from uploadctl.core.config import Config, Profile
from uploadctl.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ConnectionError,
    NetworkError,
    ResourceNotFoundError,
    UploadCtlError,
    UploadError,
    ValidationError,
)

__all__ = [
    "__version__",
    "StorageClient",
    "Config",
    "Profile",
    "UploadCtlError",
    "AuthenticationError",
    "ConfigurationError",
    "ConnectionError",
    "NetworkError",
    "ResourceNotFoundError",
    "UploadError",
    "ValidationError",
]
