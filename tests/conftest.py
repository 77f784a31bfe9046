"""Shared pytest fixtures for test files."""

from __future__ import annotations

import copy
from datetime import date

import pytest
from botocore.exceptions import ClientError

from snapshot_audit.cache import CacheStore, build_cache_key
from snapshot_audit.models import AuditWindow


class _DefaultResponse(dict):
    """Dict returning empty list for missing keys."""

    def __missing__(self, key):
        return []


_DEFAULT_PAGES: dict[str, dict] = {
    "lookup_events": _DefaultResponse(Events=[]),
    "describe_volumes": _DefaultResponse(Volumes=[]),
    "describe_instances": _DefaultResponse(Reservations=[]),
}


class _StubPaginator:
    """Paginator yielding one empty page for the operation."""

    def __init__(self, operation_name: str):
        self.operation_name = operation_name

    def paginate(self, **kwargs):
        del kwargs
        yield copy.deepcopy(_DEFAULT_PAGES.get(self.operation_name, _DefaultResponse()))


class _StubBotoClient:
    """Minimal stub for boto3 clients used in tests."""

    def __init__(self, service_name: str, **kwargs):
        self.service_name = service_name
        self.region_name = kwargs.get("region_name")
        self.exceptions = ClientError

    def get_paginator(self, operation_name: str):
        return _StubPaginator(operation_name)

    def __getattr__(self, name: str):
        def _method(*args, **kwargs):
            del args, kwargs
            return _DefaultResponse()

        return _method


@pytest.fixture(autouse=True)
def stub_boto3_client(monkeypatch):
    """Replace boto3.client with a stub so tests don't call real AWS."""

    def fake_client(service_name, **kwargs):
        return _StubBotoClient(service_name, **kwargs)

    monkeypatch.setattr("boto3.client", fake_client)


@pytest.fixture
def audit_window():
    """Closed audit window used across tests."""
    return AuditWindow(start=date(2025, 1, 1), end=date(2025, 1, 31))


@pytest.fixture
def cache_store(tmp_path, audit_window):
    """CacheStore rooted in tmp_path for the shared audit window."""
    return CacheStore(cache_dir=tmp_path, key=build_cache_key(audit_window, "us-east-1"))


@pytest.fixture
def client_error():
    """Factory for botocore ClientError instances."""

    def _make(code: str = "AccessDenied", operation: str = "LookupEvents"):
        return ClientError({"Error": {"Code": code, "Message": "denied"}}, operation)

    return _make
