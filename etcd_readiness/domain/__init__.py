"""Domain models used across application layer boundaries."""

from .models import (
    CloudCredentials,
    HealthCheckResult,
    HealthState,
    InstanceIdentity,
    ReadinessTarget,
    Region,
    TlsCredentials,
)
from .timeline import domain_build_stage_event, domain_build_stage_failure_event

__all__ = [
    "CloudCredentials",
    "HealthCheckResult",
    "HealthState",
    "InstanceIdentity",
    "ReadinessTarget",
    "Region",
    "TlsCredentials",
    "domain_build_stage_event",
    "domain_build_stage_failure_event",
]
