# ==============================================
# Error Taxonomy
# ==============================================
#
# HeapStatsError
# ├── ConfigurationError   → bad arguments / missing file / bad config.
# │                          No analysis is attempted.
# ├── ProviderInitError    → snapshot or runtime resolver failed to load.
# │                          Aborts before any aggregation state exists.
# ├── HeapProviderError    → provider failed mid-enumeration.
# │                          Enumeration stops, report still emitted.
# ├── PerObjectError       → one object could not be read.
# │   └── HeapReadError      Counted as a skip, never aborts the run.
# └── ReportWriteError     → one output artifact could not be written.
#                            Logged and recorded, other artifacts proceed.
#
# ==============================================

from typing import Optional


class HeapStatsError(Exception):
    """Base class for every error raised by heapstats."""


class ConfigurationError(HeapStatsError):
    """Invalid invocation or configuration."""


class ProviderInitError(HeapStatsError):
    """The heap snapshot (or its runtime type metadata) could not be opened."""


class HeapProviderError(HeapStatsError):
    """The provider failed while enumerating objects."""


class PerObjectError(HeapStatsError):
    """
    A single object could not be classified or read.

    Args:
        address: Heap address of the offending object
        message: Human-readable description
    """

    def __init__(self, address: int, message: str = ""):
        self.address = address
        super().__init__(f"0x{address:x}: {message}" if message else f"0x{address:x}")


class HeapReadError(PerObjectError):
    """Memory backing an object (value, length, size) was unreadable."""


class ReportWriteError(HeapStatsError):
    """
    An output artifact could not be written.

    Args:
        path: File that failed
        cause: Underlying OS error, if any
    """

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"Failed to write {path}{detail}")
