"""
Topology resolution for snapshot_audit.

Maps the volumes referenced by events to their currently attached instances,
and those instances to their Name tags. The inventory APIs have no cheap
fetch-by-id-list, so each inventory is enumerated in full and filtered here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, TypeVar

from .cache import CacheStore
from .constants import DETACHED, INSTANCES_TAG, NO_NAME, VOLUMES_TAG
from .errors import CacheReadError
from .models import Event, InstanceName, VolumeAttachment
from .services import InventoryService

T = TypeVar("T")


@dataclass(frozen=True)
class Topology:
    """Lookups resolved from current inventory."""

    volumes: list[VolumeAttachment] = field(default_factory=list)
    instances: list[InstanceName] = field(default_factory=list)
    volume_to_instance: dict[str, str] = field(default_factory=dict)
    instance_to_name: dict[str, str] = field(default_factory=dict)


def referenced_volume_ids(events: Iterable[Event]) -> list[str]:
    """Return the sorted distinct non-empty volume ids referenced by events."""
    return sorted({event.volume_id for event in events if event.volume_id})


def attached_instance_ids(volumes: Iterable[VolumeAttachment]) -> list[str]:
    """Return the sorted distinct instance ids attached to volumes."""
    return sorted({volume.instance_id for volume in volumes if volume.instance_id})


def build_volume_lookup(volumes: Iterable[VolumeAttachment]) -> dict[str, str]:
    """Map volume id to instance id ('detached' if none). Last occurrence wins."""
    lookup: dict[str, str] = {}
    for volume in volumes:
        if volume.volume_id is None:
            continue
        lookup[volume.volume_id] = volume.instance_id or DETACHED
    return lookup


def build_instance_lookup(instances: Iterable[InstanceName]) -> dict[str, str]:
    """Map instance id to name ('(no name)' if untagged). Last occurrence wins."""
    lookup: dict[str, str] = {}
    for instance in instances:
        if instance.instance_id is None:
            continue
        lookup[instance.instance_id] = instance.name or NO_NAME
    return lookup


def _load_filtered(
    cache: CacheStore,
    tag: str,
    wanted_ids: list[str],
    fetch_all: Callable[[], list[T]],
    id_of: Callable[[T], str],
    from_cache: Callable[[dict], T],
    label: str,
) -> list[T]:
    cached = cache.get_json(tag)
    if cached is not None:
        if not isinstance(cached, list) or not all(isinstance(item, dict) for item in cached):
            raise CacheReadError(f"{label} cache {cache.path_for(tag)} must hold a list of objects")
        return [from_cache(item) for item in cached]

    records: list[T] = []
    if wanted_ids:
        logging.info("[FETCHING] All %s in region, filtering to matches...", label)
        wanted = set(wanted_ids)
        records = [record for record in fetch_all() if id_of(record) in wanted]
    cache.put_json(tag, [record.to_cache() for record in records])
    return records


def resolve_topology(
    events: list[Event],
    inventory: InventoryService,
    cache: CacheStore,
) -> Topology:
    """Resolve volume and instance lookups for the events.

    Raises:
        FetchError: If an inventory call fails
    """
    volume_ids = referenced_volume_ids(events)
    logging.info("[INFO] Unique volume IDs: %d", len(volume_ids))
    volumes = _load_filtered(
        cache,
        VOLUMES_TAG,
        volume_ids,
        inventory.list_volume_attachments,
        lambda volume: volume.volume_id,
        VolumeAttachment.from_cache,
        "volumes",
    )
    attached = [volume for volume in volumes if volume.instance_id]
    logging.info(
        "[INFO] Volumes matched: %d, with instance attached: %d", len(volumes), len(attached)
    )

    instance_ids = attached_instance_ids(volumes)
    logging.info("[INFO] Unique instance IDs: %d", len(instance_ids))
    instances = _load_filtered(
        cache,
        INSTANCES_TAG,
        instance_ids,
        inventory.list_instance_names,
        lambda instance: instance.instance_id,
        InstanceName.from_cache,
        "instances",
    )
    logging.info("[INFO] Instances with names: %d", len(instances))

    return Topology(
        volumes=volumes,
        instances=instances,
        volume_to_instance=build_volume_lookup(volumes),
        instance_to_name=build_instance_lookup(instances),
    )
