"""Pytest configuration and shared fixtures for the snapshot audit."""

# pylint: disable=wrong-import-position

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import pytest


@pytest.fixture(autouse=True)
def mock_aws_env_file(tmp_path_factory, monkeypatch):
    """Point AWS_ENV_FILE at a temporary .env so tests never read ~/.env.

    The file holds no keys, so anything that does load credentials falls
    through to the (stubbed) default chain.
    """
    env_file = tmp_path_factory.mktemp("aws_env") / ".env"
    env_file.write_text("# no credentials\n")
    monkeypatch.setenv("AWS_ENV_FILE", str(env_file))
    monkeypatch.delenv("SNAPSHOT_AUDIT_CACHE_DIR", raising=False)
    yield str(env_file)
