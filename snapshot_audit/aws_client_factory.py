"""
AWS Client Factory Module
Builds the boto3 clients used by the audit from an explicit per-run session.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import boto3
from dotenv import load_dotenv


def _resolve_env_path(env_path: Optional[str] = None) -> str:
    """
    Determine which .env file should be used for AWS credentials.

    Priority order:
      1. Explicit parameter
      2. AWS_ENV_FILE environment variable
      3. ~/.env
    """
    if env_path:
        return env_path
    aws_env_file = os.environ.get("AWS_ENV_FILE")
    if aws_env_file:
        return aws_env_file
    return str(Path.home() / ".env")


def load_credentials_from_env(
    env_path: Optional[str] = None,
) -> tuple[Optional[str], Optional[str], Optional[str]]:
    """
    Load AWS credentials from a .env file.

    Args:
        env_path: Optional override path (defaults to AWS_ENV_FILE, then ~/.env)

    Returns:
        tuple: (aws_access_key_id, aws_secret_access_key, aws_session_token).
        All three are None when the file holds no keys, in which case boto3's
        default credential chain applies.
    """
    resolved_path = _resolve_env_path(env_path)
    load_dotenv(resolved_path)

    aws_access_key_id = os.getenv("AWS_ACCESS_KEY_ID")
    aws_secret_access_key = os.getenv("AWS_SECRET_ACCESS_KEY")
    aws_session_token = os.getenv("AWS_SESSION_TOKEN")
    if aws_access_key_id and aws_secret_access_key:
        logging.info("✅ AWS credentials loaded from %s", resolved_path)
        return aws_access_key_id, aws_secret_access_key, aws_session_token

    logging.debug("No AWS keys in %s; using the default credential chain", resolved_path)
    return None, None, None


@dataclass(frozen=True)
class AwsSession:
    """Explicit client configuration for one audit run."""

    region: str
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_session_token: Optional[str] = None

    @classmethod
    def from_env(cls, region: str, env_path: Optional[str] = None) -> "AwsSession":
        key_id, secret, token = load_credentials_from_env(env_path)
        return cls(
            region=region,
            aws_access_key_id=key_id,
            aws_secret_access_key=secret,
            aws_session_token=token,
        )


def create_client(service_name: str, session: AwsSession):
    """
    Create a boto3 client for service_name configured from session.

    Args:
        service_name: AWS service name (e.g., 'ec2', 'cloudtrail')
        session: Region and optional credentials for the run

    Returns:
        boto3.client: Configured AWS service client
    """
    client_kwargs = {"region_name": session.region}
    if session.aws_access_key_id and session.aws_secret_access_key:
        client_kwargs["aws_access_key_id"] = session.aws_access_key_id
        client_kwargs["aws_secret_access_key"] = session.aws_secret_access_key
        if session.aws_session_token:
            client_kwargs["aws_session_token"] = session.aws_session_token

    return boto3.client(service_name, **client_kwargs)


def create_cloudtrail_client(session: AwsSession):
    """Create a CloudTrail boto3 client for the session region."""
    return create_client("cloudtrail", session)


def create_ec2_client(session: AwsSession):
    """Create an EC2 boto3 client for the session region."""
    return create_client("ec2", session)
