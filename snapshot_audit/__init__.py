"""
Snapshot audit package.

Correlates CloudTrail CreateSnapshot/DeleteSnapshot events with current EBS
volume and EC2 instance state and reports snapshots that were never deleted.
"""

from . import cache, config, correlator, fetcher, models, reporting, services, topology
from .correlator import classify_event, correlate, find_orphan_ids, truncate_display
from .errors import (
    CacheReadError,
    ConfigurationError,
    EventParseError,
    FetchError,
    SnapshotAuditError,
)
from .models import (
    AuditCounters,
    AuditWindow,
    Bucket,
    CorrelatedRow,
    CorrelationResult,
    Event,
    EventKind,
    InstanceName,
    OrphanRecord,
    VolumeAttachment,
)

__all__ = [
    "AuditCounters",
    "AuditWindow",
    "Bucket",
    "CacheReadError",
    "ConfigurationError",
    "CorrelatedRow",
    "CorrelationResult",
    "Event",
    "EventKind",
    "EventParseError",
    "FetchError",
    "InstanceName",
    "OrphanRecord",
    "SnapshotAuditError",
    "VolumeAttachment",
    "cache",
    "classify_event",
    "config",
    "correlate",
    "correlator",
    "fetcher",
    "find_orphan_ids",
    "models",
    "reporting",
    "services",
    "topology",
    "truncate_display",
]
