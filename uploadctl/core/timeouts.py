"""Timeout defaults shared by the client, config and upload engine."""

# Plain API calls (folder creation, listing, ping)
DEFAULT_HTTP_TIMEOUT_SECONDS = 30

# Transport timeout for a single file transfer request
DEFAULT_TRANSFER_TIMEOUT_SECONDS = 10.0

# Transport timeout for zero-byte files (likely special files)
DEFAULT_ZERO_BYTE_TRANSFER_TIMEOUT_SECONDS = 3.0

# Eager read of zero-byte content before sending
DEFAULT_ZERO_BYTE_READ_TIMEOUT_SECONDS = 2.0

# Readability probe at collection time
DEFAULT_PROBE_TIMEOUT_SECONDS = 2.0

# Watchdog: reset on every progress event
DEFAULT_STALL_TIMEOUT_SECONDS = 120.0

# Watchdog: floor for the non-resettable bound
MIN_HARD_TIMEOUT_SECONDS = 180.0


def derive_hard_timeout(stall_timeout: float, floor: float = MIN_HARD_TIMEOUT_SECONDS) -> float:
    """Hard bound for a transfer: twice the stall window, never below ``floor``."""
    return max(stall_timeout * 2, floor)
