"""Core modules for uploadctl."""

from uploadctl.core.client import StorageClient
from uploadctl.core.config import CONFIG_DIR, CONFIG_FILE, Config, Profile
from uploadctl.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ConnectionError,
    NetworkError,
    OperationError,
    ResourceNotFoundError,
    ServerError,
    UploadCtlError,
    UploadError,
    ValidationError,
)
from uploadctl.core.logging import get_audit_logger, log_context, setup_logging
from uploadctl.core.output import (
    OutputFormat,
    console,
    print_error,
    print_output,
    print_success,
    print_table,
    print_warning,
)
from uploadctl.core.validation import (
    validate_folder_id,
    validate_path_exists,
    validate_server_url,
    validate_timeout,
    validate_workers,
)

__all__ = [
    # Exceptions
    "UploadCtlError",
    "AuthenticationError",
    "ConfigurationError",
    "ConnectionError",
    "NetworkError",
    "ResourceNotFoundError",
    "ServerError",
    "ValidationError",
    "OperationError",
    "UploadError",
    # Validation
    "validate_server_url",
    "validate_folder_id",
    "validate_path_exists",
    "validate_timeout",
    "validate_workers",
    # Config
    "Config",
    "Profile",
    "CONFIG_DIR",
    "CONFIG_FILE",
    # Client
    "StorageClient",
    # Output
    "OutputFormat",
    "print_output",
    "print_table",
    "print_error",
    "print_warning",
    "print_success",
    "console",
    # Logging
    "get_audit_logger",
    "log_context",
    "setup_logging",
]
