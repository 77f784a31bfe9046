"""Tests for snapshot_audit/services.py."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import EndpointConnectionError

from snapshot_audit.aws_client_factory import AwsSession
from snapshot_audit.errors import FetchError
from snapshot_audit.models import InstanceName, VolumeAttachment
from snapshot_audit.services import CloudTrailAuditLog, Ec2Inventory, extract_tag_value
from tests.assertions import assert_equal

START = datetime(2025, 1, 1, tzinfo=timezone.utc)
END = datetime(2025, 2, 1, tzinfo=timezone.utc)


def _client_with_pages(pages):
    client = MagicMock()
    client.get_paginator.return_value.paginate.return_value = pages
    return client


def test_lookup_events_collects_all_pages():
    """Records from every page are returned in order."""
    client = _client_with_pages([{"Events": [{"EventId": "a"}]}, {"Events": [{"EventId": "b"}]}])

    records = CloudTrailAuditLog(client).lookup_events("CreateSnapshot", START, END)

    assert_equal([record["EventId"] for record in records], ["a", "b"])
    client.get_paginator.assert_called_once_with("lookup_events")
    client.get_paginator.return_value.paginate.assert_called_once_with(
        LookupAttributes=[{"AttributeKey": "EventName", "AttributeValue": "CreateSnapshot"}],
        StartTime=START,
        EndTime=END,
    )


def test_lookup_events_open_window_omits_end_time():
    """An open window sends no EndTime."""
    client = _client_with_pages([{"Events": []}])

    CloudTrailAuditLog(client).lookup_events("DeleteSnapshot", START, None)

    kwargs = client.get_paginator.return_value.paginate.call_args.kwargs
    assert "EndTime" not in kwargs


def test_lookup_events_client_error_wraps(client_error):
    """API errors surface as FetchError with the operation name."""
    client = MagicMock()
    client.get_paginator.return_value.paginate.side_effect = client_error()

    with pytest.raises(FetchError) as exc_info:
        CloudTrailAuditLog(client).lookup_events("CreateSnapshot", START, END)

    assert_equal(exc_info.value.operation, "CreateSnapshot events")
    assert "AccessDenied" in str(exc_info.value)


def test_lookup_events_connection_error_wraps():
    """Transport errors surface as FetchError too."""
    client = MagicMock()
    client.get_paginator.return_value.paginate.side_effect = EndpointConnectionError(
        endpoint_url="https://cloudtrail.us-east-1.amazonaws.com"
    )

    with pytest.raises(FetchError):
        CloudTrailAuditLog(client).lookup_events("CreateSnapshot", START, END)


def test_list_volume_attachments_first_attachment_only():
    """Only the first attachment's instance is recorded."""
    client = _client_with_pages(
        [
            {
                "Volumes": [
                    {
                        "VolumeId": "vol-1",
                        "Attachments": [{"InstanceId": "i-1"}, {"InstanceId": "i-2"}],
                    },
                    {"VolumeId": "vol-2", "Attachments": []},
                ]
            },
            {"Volumes": [{"VolumeId": "vol-3"}]},
        ]
    )

    attachments = Ec2Inventory(client).list_volume_attachments()

    assert_equal(
        attachments,
        [VolumeAttachment("vol-1", "i-1"), VolumeAttachment("vol-2"), VolumeAttachment("vol-3")],
    )
    client.get_paginator.assert_called_once_with("describe_volumes")


def test_list_instance_names_reads_name_tag():
    """Instance names come from the Name tag across reservations."""
    client = _client_with_pages(
        [
            {
                "Reservations": [
                    {
                        "Instances": [
                            {
                                "InstanceId": "i-1",
                                "Tags": [
                                    {"Key": "Env", "Value": "prod"},
                                    {"Key": "Name", "Value": "web"},
                                ],
                            },
                            {"InstanceId": "i-2"},
                        ]
                    },
                    {"Instances": [{"InstanceId": "i-3", "Tags": []}]},
                ]
            }
        ]
    )

    names = Ec2Inventory(client).list_instance_names()

    assert_equal(names, [InstanceName("i-1", "web"), InstanceName("i-2"), InstanceName("i-3")])
    client.get_paginator.assert_called_once_with("describe_instances")


def test_inventory_errors_wrap(client_error):
    """Inventory API errors surface as FetchError."""
    client = MagicMock()
    client.get_paginator.return_value.paginate.side_effect = client_error(
        "UnauthorizedOperation", "DescribeVolumes"
    )
    inventory = Ec2Inventory(client)

    with pytest.raises(FetchError) as exc_info:
        inventory.list_volume_attachments()
    assert_equal(exc_info.value.operation, "volume inventory")

    with pytest.raises(FetchError) as exc_info:
        inventory.list_instance_names()
    assert_equal(exc_info.value.operation, "instance inventory")


def test_extract_tag_value_missing_defaults_to_none():
    """Untagged instances have no name."""
    assert extract_tag_value({"InstanceId": "i-1"}, "Name") is None


def test_extract_tag_value_other_key_and_default():
    """Any tag key can be read, with a caller-supplied fallback."""
    resource = {"Tags": [{"Key": "Name", "Value": "web"}, {"Key": "Env", "Value": "prod"}]}

    assert_equal(extract_tag_value(resource, "Env"), "prod")
    assert_equal(extract_tag_value(resource, "Owner", "unknown"), "unknown")


@patch("snapshot_audit.services.create_cloudtrail_client")
def test_cloudtrail_from_session(mock_create):
    """from_session builds the client for the session."""
    session = AwsSession(region="us-east-1")

    audit_log = CloudTrailAuditLog.from_session(session)

    mock_create.assert_called_once_with(session)
    assert audit_log.client is mock_create.return_value


@patch("snapshot_audit.services.create_ec2_client")
def test_ec2_from_session(mock_create):
    """from_session builds the EC2 client for the session."""
    session = AwsSession(region="eu-west-1")

    inventory = Ec2Inventory.from_session(session)

    mock_create.assert_called_once_with(session)
    assert inventory.client is mock_create.return_value


def test_from_session_uses_stubbed_boto3():
    """Without patching, the autouse stub stands in for boto3.client."""
    audit_log = CloudTrailAuditLog.from_session(AwsSession(region="us-west-2"))

    assert_equal(audit_log.client.service_name, "cloudtrail")
    assert_equal(audit_log.client.region_name, "us-west-2")
    assert_equal(audit_log.lookup_events("CreateSnapshot", START, None), [])
