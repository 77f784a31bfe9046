"""
Data model for the snapshot audit.

Events are historical records from the audit log. Volume attachments and
instance names are CURRENT inventory state, so a volume that was attached when
a snapshot was taken can legitimately show up as detached (or vanish) here.
The provider exposes no historical topology; the skew is reported as-is.

The compact TIME column only swaps the T for a space and cuts at the first
'.', so a zone suffix survives when CloudTrail sends whole seconds
('2025-01-02 03:04:05Z') and goes away with the fraction otherwise.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Optional

from .config import SUMMARY_DATE_FORMAT
from .constants import CREATE_SNAPSHOT_EVENT, DELETE_SNAPSHOT_EVENT
from .errors import EventParseError


class EventKind(Enum):
    """Operation recorded by a snapshot audit event."""

    CREATE = CREATE_SNAPSHOT_EVENT
    DELETE = DELETE_SNAPSHOT_EVENT

    @property
    def short_label(self) -> str:
        """Return the label used in the event log table."""
        return "Create" if self is EventKind.CREATE else "Delete"


class Bucket(Enum):
    """Classification buckets for events."""

    CREATE_SUCCESS = "create-success"
    CREATE_FAILURE = "create-failure"
    DELETE_SUCCESS = "delete-success"
    DELETE_FAILURE = "delete-failure"
    UNCLASSIFIED = "unclassified"


def _dig(payload: dict, *keys: str) -> Any:
    current: Any = payload
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def _resolve_identity(user_identity: Optional[dict]) -> Optional[str]:
    if not user_identity:
        return None
    return (
        _dig(user_identity, "sessionContext", "sessionIssuer", "userName")
        or user_identity.get("userName")
        or user_identity.get("principalId")
    )


@dataclass(frozen=True)
class Event:
    """One CreateSnapshot or DeleteSnapshot audit record."""

    kind: EventKind
    event_time: str
    event_id: str
    identity: Optional[str] = None
    volume_id: Optional[str] = None
    snapshot_id: Optional[str] = None
    error_code: Optional[str] = None
    return_value: Optional[bool] = None
    status: Optional[str] = None

    @classmethod
    def from_cloudtrail_event(cls, detail: dict) -> "Event":
        """Build an Event from a decoded CloudTrail event document."""
        event_name = detail.get("eventName")
        try:
            kind = EventKind(event_name)
        except ValueError as exc:
            raise EventParseError(
                f"Unexpected event {event_name!r} (eventID {detail.get('eventID')})"
            ) from exc

        request = detail.get("requestParameters") or {}
        response = detail.get("responseElements") or {}
        if kind is EventKind.CREATE:
            snapshot_id = response.get("snapshotId")
        else:
            snapshot_id = request.get("snapshotId")

        return cls(
            kind=kind,
            event_time=detail.get("eventTime", ""),
            event_id=detail.get("eventID", ""),
            identity=_resolve_identity(detail.get("userIdentity")),
            volume_id=request.get("volumeId") or None,
            snapshot_id=snapshot_id,
            error_code=detail.get("errorCode"),
            return_value=response.get("_return"),
            status=response.get("status"),
        )

    @classmethod
    def from_cloudtrail_record(cls, record: dict) -> "Event":
        """Build an Event from a LookupEvents record (JSON string in CloudTrailEvent)."""
        raw = record.get("CloudTrailEvent")
        if raw is None:
            raise EventParseError(f"Record {record.get('EventId')} has no CloudTrailEvent payload")
        try:
            detail = json.loads(raw) if isinstance(raw, str) else raw
        except json.JSONDecodeError as exc:
            raise EventParseError(
                f"Record {record.get('EventId')} has malformed CloudTrailEvent JSON"
            ) from exc
        return cls.from_cloudtrail_event(detail)

    @property
    def result_label(self) -> str:
        """Return the outcome shown in the RESULT column."""
        if self.error_code:
            return self.error_code
        if self.return_value is True:
            return "OK"
        if self.status:
            return self.status
        return "OK"

    @property
    def compact_time(self) -> str:
        """Return event time with a space for the T and fractional seconds removed."""
        day, _, clock = self.event_time.partition("T")
        return f"{day} {clock.split('.')[0]}".strip()


@dataclass(frozen=True)
class VolumeAttachment:
    """Current attachment of a volume (first attachment only)."""

    volume_id: str
    instance_id: Optional[str] = None

    def to_cache(self) -> dict:
        return {"v": self.volume_id, "i": self.instance_id}

    @classmethod
    def from_cache(cls, item: dict) -> "VolumeAttachment":
        return cls(volume_id=item.get("v"), instance_id=item.get("i"))


@dataclass(frozen=True)
class InstanceName:
    """Current Name tag of an instance."""

    instance_id: str
    name: Optional[str] = None

    def to_cache(self) -> dict:
        return {"i": self.instance_id, "n": self.name}

    @classmethod
    def from_cache(cls, item: dict) -> "InstanceName":
        return cls(instance_id=item.get("i"), name=item.get("n"))


@dataclass(frozen=True)
class CorrelatedRow:
    """Rendering-ready projection of one event."""

    sequence: int
    time: str
    event: str
    identity: str
    snapshot_id: str
    volume_id: str
    instance_id: str
    instance_name: str
    result: str
    event_id: str

    def as_columns(self) -> list[str]:
        """Return the row in table column order."""
        return [
            str(self.sequence),
            self.time,
            self.event,
            self.identity,
            self.snapshot_id,
            self.volume_id,
            self.instance_id,
            self.instance_name,
            self.result,
            self.event_id,
        ]


@dataclass(frozen=True)
class OrphanRecord:
    """A created snapshot with no matching successful delete in the window."""

    snapshot_id: str
    created_at: str
    volume_id: str
    instance_id: str
    instance_name: str


@dataclass(frozen=True)
class AuditCounters:
    """Summary counters for one correlation run."""

    total_events: int = 0
    create_success: int = 0
    create_failure: int = 0
    delete_success: int = 0
    delete_failure: int = 0
    unclassified: int = 0
    unique_instances: int = 0
    orphans: int = 0


@dataclass(frozen=True)
class CorrelationResult:
    """Output of the correlator."""

    rows: list[CorrelatedRow] = field(default_factory=list)
    counters: AuditCounters = field(default_factory=AuditCounters)
    orphans: list[OrphanRecord] = field(default_factory=list)
    # Parallel to rows
    buckets: list[Bucket] = field(default_factory=list)
    elapsed_days: Optional[int] = None
    date_range: str = ""


@dataclass(frozen=True)
class AuditWindow:
    """Audit period; an end of None means 'now'."""

    start: date
    end: Optional[date] = None

    @property
    def end_label(self) -> str:
        return self.end.isoformat() if self.end else "now"

    def effective_end(self, today: date) -> date:
        return self.end or today

    def elapsed_days(self, today: date) -> int:
        """Whole calendar days between start and end (or today)."""
        return (self.effective_end(today) - self.start).days

    def describe(self, today: date) -> str:
        """Return 'dd/mm/yy - dd/mm/yy (N days)'."""
        start = self.start.strftime(SUMMARY_DATE_FORMAT)
        end = self.effective_end(today).strftime(SUMMARY_DATE_FORMAT)
        return f"{start} - {end} ({self.elapsed_days(today)} days)"
