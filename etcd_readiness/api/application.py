"""FastAPI application factory for the local etcd health relay.

The relay lets on-host processes such as load-balancer health checks read etcd
health without holding TLS client credentials.
"""

import httpx
from fastapi import FastAPI

from .routers import api_create_health_relay_router


def create_health_relay_application(http_client: httpx.Client, health_url: str) -> FastAPI:
    """Create the FastAPI application instance for the health relay.

    Args:
        http_client: Shared TLS-configured etcd client.
        health_url: Fixed upstream etcd health URL.

    Returns:
        FastAPI: Application relaying every request upstream.

    Raises:
        ValueError: Raised when relay dependencies are invalid.
    """

    application = FastAPI(title="etcd health relay", docs_url=None, redoc_url=None, openapi_url=None)
    application.include_router(api_create_health_relay_router(http_client=http_client, health_url=health_url))
    return application
