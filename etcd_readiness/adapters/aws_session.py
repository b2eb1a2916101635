"""boto3 client construction from explicit cloud credentials."""

from __future__ import annotations

from typing import Any, Callable

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from etcd_readiness.domain import CloudCredentials, Region

AwsClientFactory = Callable[[CloudCredentials, str, Region], Any]

# One attempt per call; the pipeline owns retry policy.
_SINGLE_ATTEMPT_CONFIG = Config(retries={"max_attempts": 1, "mode": "standard"})


def aws_create_session(credentials: CloudCredentials) -> boto3.session.Session:
    """Create a boto3 session from explicit credentials.

    Args:
        credentials: Credential source; empty fields fall back to the default chain.

    Returns:
        boto3.session.Session: Session bound to the given credentials.
    """

    return boto3.session.Session(
        aws_access_key_id=credentials.access_key_id,
        aws_secret_access_key=credentials.secret_access_key,
        aws_session_token=credentials.session_token,
        profile_name=credentials.profile_name,
    )


def aws_create_client(credentials: CloudCredentials, service_name: str, region: Region) -> Any:
    """Create one low-level boto3 service client.

    Args:
        credentials: Credential source.
        service_name: boto3 service name, e.g. `ec2`.
        region: Target region.

    Returns:
        Any: botocore client for the service.
    """

    session = aws_create_session(credentials)
    return session.client(service_name, region_name=region.code, config=_SINGLE_ATTEMPT_CONFIG)


def aws_error_code(error: Exception) -> str | None:
    """Return the AWS error code carried by a botocore ClientError.

    Args:
        error: Raised botocore exception.

    Returns:
        str | None: Error code such as `Throttling`, or None for non-client errors.
    """

    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code")
    return None
