"""Typed interfaces for job-layer orchestration responsibilities."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from etcd_readiness.domain import ReadinessTarget


@dataclass(frozen=True)
class JobExecutionResult:
    """Result contract for workflow execution.

    Attributes:
        job_name: Job identifier.
        status: Final execution state (`success` or `failed`).
    """

    job_name: str
    status: str


@dataclass(frozen=True)
class ReadinessRunResult(JobExecutionResult):
    """Result of one readiness signal run.

    Attributes:
        failed_stage: Stage label that failed, None on success.
        error_message: Human-readable failure message, None on success.
        target: Signalled readiness target, when resolved.
        health_attempts: Number of health poll attempts performed.
        stage_timeline: Structured stage events in execution order.
    """

    failed_stage: str | None = None
    error_message: str | None = None
    target: ReadinessTarget | None = None
    health_attempts: int = 0
    stage_timeline: list[dict[str, object]] = field(default_factory=list)


class JobOrchestratorPort(Protocol):
    """Port definition for orchestrating readiness jobs."""

    def job_supported_names(self) -> tuple[str, ...]:
        """Return the set of workflow names this orchestrator can execute.

        Returns:
            tuple[str, ...]: Deterministic list of supported job names.
        """

    def job_execute(self, job_name: str) -> JobExecutionResult:
        """Execute one named workflow.

        Args:
            job_name: Workflow name.

        Returns:
            JobExecutionResult: Final execution status payload.

        Raises:
            ValueError: Raised when the job name is unsupported.
        """
