"""
Event correlation and orphan detection.

Pure functions over (events, volume->instance lookup, instance->name lookup).
An orphan is a successfully created snapshot whose id never appears in a
successful delete anywhere in the fetched window. Relative timestamps are
ignored, so deletes that fell outside the audit-log retention surface as
orphans too.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Iterable, Mapping, Optional

from .constants import DETACHED, DISPLAY_WIDTH, ELLIPSIS, MISSING
from .models import (
    AuditCounters,
    AuditWindow,
    Bucket,
    CorrelatedRow,
    CorrelationResult,
    Event,
    EventKind,
    OrphanRecord,
)


def truncate_display(value: str, width: int = DISPLAY_WIDTH) -> str:
    """Truncate value to width characters, ending in '...' when cut."""
    if len(value) <= width:
        return value
    return value[: width - len(ELLIPSIS)] + ELLIPSIS


def classify_event(event: Event) -> Bucket:
    """Place an event in exactly one bucket.

    Success is checked before failure. A create with neither a snapshot id
    nor an error code, or a delete with neither a requested snapshot id nor
    an error code, is UNCLASSIFIED.
    """
    if event.kind is EventKind.CREATE:
        if event.snapshot_id:
            return Bucket.CREATE_SUCCESS
        if event.error_code:
            return Bucket.CREATE_FAILURE
        return Bucket.UNCLASSIFIED

    if event.snapshot_id and not event.error_code:
        return Bucket.DELETE_SUCCESS
    if event.error_code:
        return Bucket.DELETE_FAILURE
    return Bucket.UNCLASSIFIED


def sort_events(events: Iterable[Event]) -> list[Event]:
    """Stable sort by event time ascending."""
    return sorted(events, key=lambda event: event.event_time)


def index_creates(events: Iterable[Event]) -> dict[str, Event]:
    """Map snapshot id to its create-success event. Last occurrence wins."""
    creates: dict[str, Event] = {}
    for event in events:
        if classify_event(event) is Bucket.CREATE_SUCCESS:
            creates[event.snapshot_id] = event
    return creates


def deleted_snapshot_ids(events: Iterable[Event]) -> set[str]:
    """Return snapshot ids of every successful delete."""
    return {
        event.snapshot_id for event in events if classify_event(event) is Bucket.DELETE_SUCCESS
    }


def find_orphan_ids(events: Iterable[Event]) -> list[str]:
    """Created-but-never-deleted snapshot ids, sorted."""
    events = list(events)
    return sorted(set(index_creates(events)) - deleted_snapshot_ids(events))


def resolve_instance(
    volume_id: Optional[str],
    volume_to_instance: Mapping[str, str],
    instance_to_name: Mapping[str, str],
) -> tuple[str, str]:
    """Return (instance id, instance name) for a volume, using '-' for gaps."""
    instance_id = volume_to_instance.get(volume_id, MISSING) if volume_id else MISSING
    if instance_id in (MISSING, DETACHED):
        return instance_id, MISSING
    return instance_id, instance_to_name.get(instance_id, MISSING)


def build_row(
    sequence: int,
    event: Event,
    volume_to_instance: Mapping[str, str],
    instance_to_name: Mapping[str, str],
) -> CorrelatedRow:
    instance_id, instance_name = resolve_instance(
        event.volume_id, volume_to_instance, instance_to_name
    )
    return CorrelatedRow(
        sequence=sequence,
        time=event.compact_time,
        event=event.kind.short_label,
        identity=truncate_display(event.identity or MISSING),
        snapshot_id=event.snapshot_id or MISSING,
        volume_id=event.volume_id or MISSING,
        instance_id=instance_id,
        instance_name=truncate_display(instance_name),
        result=event.result_label,
        event_id=event.event_id or MISSING,
    )


def correlate(
    events: Iterable[Event],
    volume_to_instance: Mapping[str, str],
    instance_to_name: Mapping[str, str],
    window: Optional[AuditWindow] = None,
    today: Optional[date] = None,
) -> CorrelationResult:
    """Classify, resolve and count events and compute the orphan list.

    When window is given, the elapsed day count and date range label are
    computed against today (defaults to the current UTC date).
    """
    ordered = sort_events(events)
    buckets = [classify_event(event) for event in ordered]

    creates_by_snapshot = index_creates(ordered)
    orphan_ids = find_orphan_ids(ordered)

    rows = [
        build_row(sequence, event, volume_to_instance, instance_to_name)
        for sequence, event in enumerate(ordered, start=1)
    ]

    orphans = []
    for snapshot_id in orphan_ids:
        created = creates_by_snapshot[snapshot_id]
        instance_id, instance_name = resolve_instance(
            created.volume_id, volume_to_instance, instance_to_name
        )
        orphans.append(
            OrphanRecord(
                snapshot_id=snapshot_id,
                created_at=created.event_time,
                volume_id=created.volume_id or MISSING,
                instance_id=instance_id,
                instance_name=instance_name,
            )
        )

    counters = AuditCounters(
        total_events=len(ordered),
        create_success=buckets.count(Bucket.CREATE_SUCCESS),
        create_failure=buckets.count(Bucket.CREATE_FAILURE),
        delete_success=buckets.count(Bucket.DELETE_SUCCESS),
        delete_failure=buckets.count(Bucket.DELETE_FAILURE),
        unclassified=buckets.count(Bucket.UNCLASSIFIED),
        unique_instances=len(instance_to_name),
        orphans=len(orphans),
    )
    elapsed_days = None
    date_range = ""
    if window is not None:
        today = today or datetime.now(timezone.utc).date()
        elapsed_days = window.elapsed_days(today)
        date_range = window.describe(today)

    return CorrelationResult(
        rows=rows,
        counters=counters,
        orphans=orphans,
        buckets=buckets,
        elapsed_days=elapsed_days,
        date_range=date_range,
    )
