"""
Event fetching for snapshot_audit.

Fetches CreateSnapshot and DeleteSnapshot records (concurrently), caches the
raw result sets and merges them into one event list.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, time, timezone
from typing import Optional

from .cache import CacheStore
from .config import EVENT_FETCH_WORKERS
from .constants import CLOUDTRAIL_TAG, CREATE_SNAPSHOT_EVENT, DELETE_SNAPSHOT_EVENT
from .errors import CacheReadError
from .models import AuditWindow, Event
from .services import AuditLogService

SNAPSHOT_EVENT_NAMES = (CREATE_SNAPSHOT_EVENT, DELETE_SNAPSHOT_EVENT)


def window_bounds(window: AuditWindow) -> tuple[datetime, Optional[datetime]]:
    """Return UTC midnight datetimes for the window (end None means now)."""
    start = datetime.combine(window.start, time.min, tzinfo=timezone.utc)
    end = datetime.combine(window.end, time.min, tzinfo=timezone.utc) if window.end else None
    return start, end


def fetch_raw_result_sets(audit_log: AuditLogService, window: AuditWindow) -> list[dict]:
    """Fetch both event types and return [{"Events": creates}, {"Events": deletes}].

    Raises:
        FetchError: If either lookup fails
    """
    start, end = window_bounds(window)
    with ThreadPoolExecutor(max_workers=EVENT_FETCH_WORKERS) as executor:
        futures = []
        for event_name in SNAPSHOT_EVENT_NAMES:
            logging.info("[FETCHING] CloudTrail %s events...", event_name)
            futures.append(executor.submit(audit_log.lookup_events, event_name, start, end))
        # result() re-raises the FetchError from the worker thread
        return [{"Events": future.result()} for future in futures]


def parse_result_sets(result_sets: list[dict]) -> list[Event]:
    """Decode every record of every result set into Events."""
    if not isinstance(result_sets, list):
        raise CacheReadError("CloudTrail cache must hold a list of result sets")
    events: list[Event] = []
    for result_set in result_sets:
        if not isinstance(result_set, dict):
            raise CacheReadError("CloudTrail result set must be an object with an 'Events' list")
        for record in result_set.get("Events") or []:
            events.append(Event.from_cloudtrail_record(record))
    return events


def fetch_snapshot_events(
    audit_log: AuditLogService,
    cache: CacheStore,
    window: AuditWindow,
) -> list[Event]:
    """Return all snapshot events for the window, reading through the cache."""
    result_sets = cache.get_json(CLOUDTRAIL_TAG)
    if result_sets is None:
        result_sets = fetch_raw_result_sets(audit_log, window)
        cache_path = cache.put_json(CLOUDTRAIL_TAG, result_sets)
        logging.info("[SAVED] CloudTrail data cached to: %s", cache_path)

    events = parse_result_sets(result_sets)
    logging.info("[INFO] Total CloudTrail events found: %d", len(events))
    return events
