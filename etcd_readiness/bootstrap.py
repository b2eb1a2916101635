"""Application bootstrap wiring for readiness and relay dependency assembly."""

from __future__ import annotations

import httpx
from fastapi import FastAPI

from etcd_readiness.adapters import (
    CloudFormationSignaler,
    Ec2InventoryLocator,
    InstanceMetadataClient,
    ReadinessSignalPort,
    tls_create_client,
)
from etcd_readiness.api import create_health_relay_application
from etcd_readiness.config import AppSettings
from etcd_readiness.domain import CloudCredentials, Region, TlsCredentials
from etcd_readiness.jobs import (
    HealthPoller,
    ReadinessJobOrchestrator,
    ReadinessOrchestratorConfig,
    health_build_url,
)


def bootstrap_create_cloud_credentials(settings: AppSettings) -> CloudCredentials:
    """Build the explicit AWS credential source from settings.

    Args:
        settings: Validated runtime settings.

    Returns:
        CloudCredentials: Profile-based credentials, or the default chain when unset.
    """

    return CloudCredentials(profile_name=settings.aws_profile_name)


def bootstrap_create_etcd_client(tls_credentials: TlsCredentials, settings: AppSettings) -> httpx.Client:
    """Build the shared TLS client for etcd.

    Args:
        tls_credentials: CA and client certificate paths.
        settings: Validated runtime settings.

    Returns:
        httpx.Client: TLS-configured client; the caller owns closing it.

    Raises:
        TlsConfigurationError: Raised when TLS material cannot be loaded.
    """

    return tls_create_client(tls_credentials, timeout_seconds=settings.etcd_request_timeout_seconds)


def bootstrap_create_readiness_orchestrator(
    server_url: str,
    etcd_client: httpx.Client,
    settings: AppSettings,
) -> ReadinessJobOrchestrator:
    """Assemble the readiness orchestrator.

    Args:
        server_url: etcd client URL to wait for.
        etcd_client: Shared TLS-configured etcd client.
        settings: Validated runtime settings.

    Returns:
        ReadinessJobOrchestrator: Fully wired orchestrator.
    """

    cloud_credentials = bootstrap_create_cloud_credentials(settings)
    metadata_client = InstanceMetadataClient(
        credentials=cloud_credentials,
        base_url=settings.metadata_base_url,
        timeout_seconds=settings.metadata_timeout_seconds,
        use_imdsv2=settings.metadata_use_imdsv2,
    )
    health_poller = HealthPoller(
        http_client=etcd_client,
        interval_seconds=settings.health_poll_interval_seconds,
        max_attempts=settings.health_poll_max_attempts,
    )
    locator = Ec2InventoryLocator(credentials=cloud_credentials)

    def _signaler_for_region(region: Region) -> ReadinessSignalPort:
        return CloudFormationSignaler(credentials=cloud_credentials, region=region)

    return ReadinessJobOrchestrator(
        metadata_client=metadata_client,
        health_poller=health_poller,
        locator=locator,
        signaler_factory=_signaler_for_region,
        config=ReadinessOrchestratorConfig(server_url=server_url),
    )


def bootstrap_create_health_relay_application(server_url: str, etcd_client: httpx.Client) -> FastAPI:
    """Assemble the health relay application.

    Args:
        server_url: etcd client URL whose `/health` is relayed.
        etcd_client: Shared TLS-configured etcd client.

    Returns:
        FastAPI: Relay application.
    """

    return create_health_relay_application(http_client=etcd_client, health_url=health_build_url(server_url))
