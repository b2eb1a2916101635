"""API router package for endpoint composition."""

from .health_relay import api_create_health_relay_router, api_relay_fetch_upstream

__all__ = ["api_create_health_relay_router", "api_relay_fetch_upstream"]
