"""Typed domain models shared across runtime layers.

This module provides immutable data contracts passed forward between the
readiness pipeline stages. Every value is created and discarded within one
process run.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class TlsCredentials:
    """TLS material used for the etcd client connection.

    Attributes:
        ca_file: Optional CA bundle path used to verify the etcd server.
        cert_file: Optional client certificate path for mutual TLS.
        key_file: Optional client private key path for mutual TLS.
    """

    ca_file: str | None = None
    cert_file: str | None = None
    key_file: str | None = None

    def __post_init__(self) -> None:
        if (self.cert_file is None) != (self.key_file is None):
            raise ValueError("cert_file and key_file must be provided together")

    def credentials_cert_and_key(self) -> tuple[str, str] | None:
        """Return the client certificate and key pair when configured.

        Returns:
            tuple[str, str] | None: Certificate and key paths, or None.
        """

        if self.cert_file is None or self.key_file is None:
            return None
        return self.cert_file, self.key_file


class HealthState(str, Enum):
    """Interpretation of one etcd health poll attempt."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    UNREACHABLE = "unreachable"


@dataclass(frozen=True)
class HealthCheckResult:
    """Outcome of a single health poll attempt.

    Attributes:
        state: Tri-state health interpretation.
        detail: Human-readable reason suitable for operator logs.
    """

    state: HealthState
    detail: str

    def health_is_healthy(self) -> bool:
        return self.state is HealthState.HEALTHY


@dataclass(frozen=True)
class Region:
    """Validated AWS region code, e.g. `us-east-1`."""

    code: str

    def __str__(self) -> str:
        return self.code


@dataclass(frozen=True)
class InstanceIdentity:
    """EC2 identity of the running node.

    Attributes:
        instance_id: EC2 instance id reported by instance metadata.
        region: Region derived from the instance availability zone.
    """

    instance_id: str
    region: Region


@dataclass(frozen=True)
class ReadinessTarget:
    """Resolved CloudFormation resource to signal for this node.

    Attributes:
        stack_name: Owning stack id taken from the stack-id tag.
        logical_resource_id: Logical resource id taken from the logical-id tag.
        unique_id: Unique signal id, the EC2 instance id.
    """

    stack_name: str
    logical_resource_id: str
    unique_id: str

    def __post_init__(self) -> None:
        for field_name in ("stack_name", "logical_resource_id", "unique_id"):
            if not str(getattr(self, field_name) or "").strip():
                raise ValueError(f"{field_name} must not be blank")


@dataclass(frozen=True)
class CloudCredentials:
    """Explicit AWS credential source for boto3 sessions.

    All fields are optional. When every field is empty the boto3 default
    credential chain (environment, shared config, instance profile) is used.

    Attributes:
        profile_name: Optional shared-config profile name.
        access_key_id: Optional static access key id.
        secret_access_key: Optional static secret access key.
        session_token: Optional session token for temporary credentials.
    """

    profile_name: str | None = None
    access_key_id: str | None = None
    secret_access_key: str | None = None
    session_token: str | None = None

    def __post_init__(self) -> None:
        if (self.access_key_id is None) != (self.secret_access_key is None):
            raise ValueError("access_key_id and secret_access_key must be provided together")
