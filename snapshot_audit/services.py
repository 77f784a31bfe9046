"""
Query services used by the audit.

The fetcher and resolver depend only on the two protocols below; the boto3
implementations are wired in by the CLI and replaced by fakes in tests.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from botocore.exceptions import BotoCoreError, ClientError

from .aws_client_factory import AwsSession, create_cloudtrail_client, create_ec2_client
from .errors import FetchError
from .models import InstanceName, VolumeAttachment


class AuditLogService(Protocol):
    """Returns raw audit records for one event name within a time range."""

    def lookup_events(
        self, event_name: str, start: datetime, end: Optional[datetime]
    ) -> list[dict]: ...


class InventoryService(Protocol):
    """Returns current volume attachments and instance names for a region."""

    def list_volume_attachments(self) -> list[VolumeAttachment]: ...

    def list_instance_names(self) -> list[InstanceName]: ...


def extract_tag_value(resource: dict, key: str, default: Optional[str] = None) -> Optional[str]:
    """
    Extract a specific tag value from an AWS resource.

    Args:
        resource: AWS resource dict containing 'Tags' key
        key: Tag key to search for
        default: Value returned when the tag is absent (default: None, which the
            topology stage renders as "(no name)")

    Returns:
        str: Tag value if found, otherwise default value
    """
    for tag in resource.get("Tags", []):
        if tag["Key"] == key:
            return tag["Value"]
    return default


class CloudTrailAuditLog:
    """AuditLogService backed by CloudTrail LookupEvents."""

    def __init__(self, client):
        self.client = client

    @classmethod
    def from_session(cls, session: AwsSession) -> "CloudTrailAuditLog":
        return cls(create_cloudtrail_client(session))

    def lookup_events(
        self, event_name: str, start: datetime, end: Optional[datetime]
    ) -> list[dict]:
        params = {
            "LookupAttributes": [{"AttributeKey": "EventName", "AttributeValue": event_name}],
            "StartTime": start,
        }
        if end is not None:
            params["EndTime"] = end

        records: list[dict] = []
        try:
            paginator = self.client.get_paginator("lookup_events")
            for page in paginator.paginate(**params):
                records.extend(page.get("Events", []))
        except (ClientError, BotoCoreError) as exc:
            raise FetchError(f"{event_name} events", exc) from exc
        return records


class Ec2Inventory:
    """InventoryService backed by EC2 DescribeVolumes/DescribeInstances."""

    def __init__(self, client):
        self.client = client

    @classmethod
    def from_session(cls, session: AwsSession) -> "Ec2Inventory":
        return cls(create_ec2_client(session))

    def list_volume_attachments(self) -> list[VolumeAttachment]:
        attachments: list[VolumeAttachment] = []
        try:
            paginator = self.client.get_paginator("describe_volumes")
            for page in paginator.paginate():
                for volume in page.get("Volumes", []):
                    volume_attachments = volume.get("Attachments", [])
                    instance_id = (
                        volume_attachments[0].get("InstanceId") if volume_attachments else None
                    )
                    attachments.append(VolumeAttachment(volume["VolumeId"], instance_id))
        except (ClientError, BotoCoreError) as exc:
            raise FetchError("volume inventory", exc) from exc
        return attachments

    def list_instance_names(self) -> list[InstanceName]:
        names: list[InstanceName] = []
        try:
            paginator = self.client.get_paginator("describe_instances")
            for page in paginator.paginate():
                for reservation in page.get("Reservations", []):
                    for instance in reservation.get("Instances", []):
                        name = extract_tag_value(instance, "Name")
                        names.append(InstanceName(instance["InstanceId"], name))
        except (ClientError, BotoCoreError) as exc:
            raise FetchError("instance inventory", exc) from exc
        return names
