"""Job layer package for readiness workflow orchestration."""

from .health_poller import (
	DEFAULT_POLL_INTERVAL_SECONDS,
	HEALTH_PATH,
	HealthPoller,
	HealthPollResult,
	PollerState,
	health_build_url,
	health_interpret_response,
)
from .interfaces import JobExecutionResult, JobOrchestratorPort, ReadinessRunResult
from .readiness_orchestrator import ReadinessJobOrchestrator, ReadinessOrchestratorConfig, SignalerFactory

__all__ = [
	"DEFAULT_POLL_INTERVAL_SECONDS",
	"HEALTH_PATH",
	"HealthPollResult",
	"HealthPoller",
	"JobExecutionResult",
	"JobOrchestratorPort",
	"PollerState",
	"ReadinessJobOrchestrator",
	"ReadinessOrchestratorConfig",
	"ReadinessRunResult",
	"SignalerFactory",
	"health_build_url",
	"health_interpret_response",
]
