"""Typed interfaces for adapter-layer responsibilities."""

from __future__ import annotations

from typing import Protocol

import httpx

from etcd_readiness.domain import InstanceIdentity, ReadinessTarget, Region


class HealthHttpClientPort(Protocol):
    """Port for the HTTPS client used against the etcd health endpoint."""

    def get(self, url: str) -> httpx.Response:
        """Issue one GET request.

        Args:
            url: Absolute request URL.

        Returns:
            httpx.Response: Upstream response.

        Raises:
            httpx.TransportError: Raised when the request cannot be delivered.
        """


class InstanceMetadataPort(Protocol):
    """Port for resolving this node's EC2 identity."""

    def metadata_instance_id(self) -> str:
        """Return the EC2 instance id.

        Returns:
            str: Instance id string.

        Raises:
            MetadataTransportError: Raised when the metadata service is unreachable.
        """

    def metadata_region(self) -> Region:
        """Return the region this instance runs in.

        Returns:
            Region: Validated region.

        Raises:
            MetadataTransportError: Raised when the metadata service is unreachable.
            MetadataInvalidRegionError: Raised when the zone maps to no known region.
        """

    def metadata_identity(self) -> InstanceIdentity:
        """Return instance id and region together.

        Returns:
            InstanceIdentity: Resolved identity.

        Raises:
            MetadataError: Raised when either accessor fails.
        """


class ReadinessLocatorPort(Protocol):
    """Port for locating the CloudFormation resource that owns an instance."""

    def locator_locate(self, region: Region, instance_id: str) -> ReadinessTarget:
        """Resolve the readiness target for one instance.

        Args:
            region: Region the instance lives in.
            instance_id: EC2 instance id.

        Returns:
            ReadinessTarget: Stack, logical resource and unique id triple.

        Raises:
            LocateError: Raised when tags are missing or the EC2 API fails.
        """


class ReadinessSignalPort(Protocol):
    """Port for emitting the one-shot CloudFormation success signal."""

    def signaler_signal_ready(self, target: ReadinessTarget) -> None:
        """Send one SUCCESS signal for the target.

        Args:
            target: Resolved readiness target.

        Returns:
            None: Signal is sent as a side effect.

        Raises:
            SignalError: Raised when CloudFormation rejects the signal.
        """
