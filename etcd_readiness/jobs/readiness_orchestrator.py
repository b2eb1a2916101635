"""Job-layer readiness orchestrator: wait for etcd, locate the stack resource, signal."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable

from etcd_readiness.adapters import (
    HealthPollError,
    InstanceMetadataPort,
    LocateError,
    MetadataError,
    ReadinessError,
    ReadinessLocatorPort,
    ReadinessSignalPort,
    SignalError,
)
from etcd_readiness.domain import (
    InstanceIdentity,
    ReadinessTarget,
    Region,
    domain_build_stage_event,
    domain_build_stage_failure_event,
)

from .health_poller import HealthPoller
from .interfaces import JobOrchestratorPort, ReadinessRunResult

logger = logging.getLogger(__name__)

SignalerFactory = Callable[[Region], ReadinessSignalPort]


@dataclass(frozen=True)
class ReadinessOrchestratorConfig:
    """Configuration values for one readiness run.

    Attributes:
        server_url: etcd client URL to wait for.
    """

    server_url: str


class ReadinessJobOrchestrator(JobOrchestratorPort):
    """Runs identity, health, locate and signal stages strictly in sequence.

    Only the health stage retries. Any other stage failure stops the run and is
    reported in the result with the originating stage label.
    """

    _READINESS_JOB_NAME = "readiness_signal"

    def __init__(
        self,
        metadata_client: InstanceMetadataPort,
        health_poller: HealthPoller,
        locator: ReadinessLocatorPort,
        signaler_factory: SignalerFactory,
        config: ReadinessOrchestratorConfig,
    ):
        """Initialize readiness orchestrator dependencies.

        Args:
            metadata_client: Identity resolver.
            health_poller: Blocking etcd health poller.
            locator: Resource locator.
            signaler_factory: Builds a signaler for the resolved region.
            config: Run configuration.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies or config values are invalid.
        """

        if metadata_client is None:
            raise ValueError("metadata_client must not be None")
        if health_poller is None:
            raise ValueError("health_poller must not be None")
        if locator is None:
            raise ValueError("locator must not be None")
        if signaler_factory is None:
            raise ValueError("signaler_factory must not be None")
        if not config.server_url.strip():
            raise ValueError("config.server_url must not be blank")

        self._metadata_client = metadata_client
        self._health_poller = health_poller
        self._locator = locator
        self._signaler_factory = signaler_factory
        self._config = config

    def job_supported_names(self) -> tuple[str, ...]:
        return (self._READINESS_JOB_NAME,)

    def job_execute(self, job_name: str) -> ReadinessRunResult:
        """Execute the readiness workflow.

        Args:
            job_name: Name of job to execute.

        Returns:
            ReadinessRunResult: Final status with failing stage and timeline.

        Raises:
            ValueError: Raised when job name is unsupported.
        """

        normalized_job_name = job_name.strip()
        if normalized_job_name != self._READINESS_JOB_NAME:
            raise ValueError(f"unsupported job_name={normalized_job_name}")

        timeline: list[dict[str, object]] = [domain_build_stage_event(stage="run", status="started")]
        health_attempts = 0
        target: ReadinessTarget | None = None

        try:
            identity = self._job_resolve_identity(timeline)
            health_attempts = self._job_wait_until_healthy(timeline)
            target = self._job_locate_target(identity, timeline)
            self._job_signal(identity.region, target, timeline)
        except ReadinessError as error:
            timeline.append(domain_build_stage_failure_event(stage=error.stage, error=error))
            logger.error("Readiness run failed at stage '%s': %s", error.stage, error)
            return ReadinessRunResult(
                job_name=normalized_job_name,
                status="failed",
                failed_stage=error.stage,
                error_message=str(error),
                target=target,
                health_attempts=health_attempts,
                stage_timeline=timeline,
            )

        timeline.append(domain_build_stage_event(stage="run", status="completed"))
        return ReadinessRunResult(
            job_name=normalized_job_name,
            status="success",
            target=target,
            health_attempts=health_attempts,
            stage_timeline=timeline,
        )

    def _job_resolve_identity(self, timeline: list[dict[str, object]]) -> InstanceIdentity:
        """Resolve instance id and region.

        Raises:
            MetadataError: Raised when metadata lookups fail.
        """

        timeline.append(domain_build_stage_event(stage=MetadataError.stage, status="started"))
        identity = self._metadata_client.metadata_identity()
        timeline.append(
            domain_build_stage_event(
                stage=MetadataError.stage,
                status="completed",
                details={"instance_id": identity.instance_id, "region": identity.region.code},
            )
        )
        return identity

    def _job_wait_until_healthy(self, timeline: list[dict[str, object]]) -> int:
        """Block until etcd is healthy and return the attempt count.

        Raises:
            HealthPollError: Raised when polling stops without a healthy result.
        """

        timeline.append(domain_build_stage_event(stage=HealthPollError.stage, status="started"))
        poll_result = self._health_poller.poller_wait_until_healthy(self._config.server_url)
        timeline.extend(poll_result.stage_timeline)
        timeline.append(
            domain_build_stage_event(
                stage=HealthPollError.stage,
                status="completed",
                details={"attempts": poll_result.attempts},
            )
        )
        return poll_result.attempts

    def _job_locate_target(self, identity: InstanceIdentity, timeline: list[dict[str, object]]) -> ReadinessTarget:
        """Locate the stack resource that owns this instance.

        Raises:
            LocateError: Raised when tags are missing or the EC2 call fails.
        """

        timeline.append(domain_build_stage_event(stage=LocateError.stage, status="started"))
        target = self._locator.locator_locate(region=identity.region, instance_id=identity.instance_id)
        timeline.append(
            domain_build_stage_event(
                stage=LocateError.stage,
                status="completed",
                details={"stack_name": target.stack_name, "logical_resource_id": target.logical_resource_id},
            )
        )
        return target

    def _job_signal(self, region: Region, target: ReadinessTarget, timeline: list[dict[str, object]]) -> None:
        """Send the single SUCCESS signal.

        Raises:
            SignalError: Raised when CloudFormation rejects the signal.
        """

        timeline.append(domain_build_stage_event(stage=SignalError.stage, status="started"))
        self._signaler_factory(region).signaler_signal_ready(target)
        timeline.append(domain_build_stage_event(stage=SignalError.stage, status="completed"))
