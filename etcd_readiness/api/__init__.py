"""API layer package for the health relay application."""

from .application import create_health_relay_application

__all__ = ["create_health_relay_application"]
