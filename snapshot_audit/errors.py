"""
Exceptions for the snapshot audit package.
"""


class SnapshotAuditError(RuntimeError):
    """Base class for fatal audit failures."""


class ConfigurationError(SnapshotAuditError):
    """Raised when required configuration is missing or malformed."""


class FetchError(SnapshotAuditError):
    """Raised when a query service is unreachable or rejects a request."""

    def __init__(self, operation: str, original_error: Exception):
        super().__init__(f"Error fetching {operation}: {original_error}")
        self.operation = operation
        self.original_error = original_error


class CacheReadError(SnapshotAuditError):
    """Raised when a cache file exists but cannot be read."""


class EventParseError(SnapshotAuditError):
    """Raised when an audit record is not a snapshot create/delete event."""
