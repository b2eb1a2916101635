"""Health relay router forwarding every request to the fixed etcd health endpoint."""

import logging
from typing import Final

import httpx
from fastapi import APIRouter, Response, status

logger = logging.getLogger(__name__)

RELAY_METHODS: Final[list[str]] = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE", "CONNECT"]

# Framing headers are recomputed for the outgoing response.
_NON_FORWARDED_HEADERS: Final[frozenset[str]] = frozenset(
    {
        "connection",
        "content-length",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "transfer-encoding",
        "upgrade",
    }
)


def api_relay_fetch_upstream(http_client: httpx.Client, health_url: str) -> Response:
    """Fetch the upstream health response and mirror it.

    Args:
        http_client: Shared TLS-configured etcd client.
        health_url: Fixed upstream health URL.

    Returns:
        Response: Upstream status, headers and raw body, or empty 500 on failure.
    """

    try:
        with http_client.stream("GET", health_url) as upstream_response:
            if upstream_response.is_stream_consumed:
                body = upstream_response.content
            else:
                body = b"".join(upstream_response.iter_raw())
            upstream_status = upstream_response.status_code
            upstream_headers = upstream_response.headers.multi_items()
    except httpx.HTTPError as error:
        logger.warning("Upstream health request to '%s' failed: %s", health_url, error)
        return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    response = Response(content=body, status_code=upstream_status)
    for header_name, header_value in upstream_headers:
        if header_name.lower() not in _NON_FORWARDED_HEADERS:
            response.headers.append(header_name, header_value)
    return response


def api_create_health_relay_router(http_client: httpx.Client, health_url: str) -> APIRouter:
    """Create a router that relays any path and method to the etcd health endpoint.

    Args:
        http_client: Shared TLS-configured etcd client.
        health_url: Fixed upstream health URL.

    Returns:
        APIRouter: Router with one catch-all relay route.

    Raises:
        ValueError: Raised when http_client is None or health_url is blank.
    """

    if http_client is None:
        raise ValueError("http_client must not be None")
    if not health_url.strip():
        raise ValueError("health_url must not be blank")

    router = APIRouter(tags=["health"])

    @router.api_route("/{relay_path:path}", methods=RELAY_METHODS, include_in_schema=False)
    def api_health_relay(relay_path: str) -> Response:
        _ = relay_path
        return api_relay_fetch_upstream(http_client=http_client, health_url=health_url)

    return router
