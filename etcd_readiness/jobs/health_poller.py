"""Blocking etcd health poller modelled as an explicit state machine.

The poller sleeps before every attempt, including the first, so a member that
has not started listening yet is not hammered. Transport failures, non-200
statuses and unexpected payloads are all treated as "not yet healthy" and
retried. By default there is no attempt cap.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import json
import logging
import time
from typing import Final

import httpx

from etcd_readiness.adapters import HealthHttpClientPort, HealthPollError, HealthPollExhaustedError
from etcd_readiness.domain import HealthCheckResult, HealthState, domain_build_stage_event

logger = logging.getLogger(__name__)

HEALTH_PATH: Final[str] = "/health"
DEFAULT_POLL_INTERVAL_SECONDS: Final[float] = 1.0


class PollerState(str, Enum):
    """States of the health polling loop."""

    POLLING = "polling"
    HEALTHY = "healthy"
    FATAL_TRANSPORT_ERROR = "fatal_transport_error"


@dataclass
class HealthPollResult:
    """Final outcome of a successful poll loop.

    Attributes:
        attempts: Number of attempts performed, including the healthy one.
        stage_timeline: Per-attempt structured events.
    """

    attempts: int
    stage_timeline: list[dict[str, object]] = field(default_factory=list)


def health_build_url(base_url: str) -> str:
    """Return the etcd health endpoint for a server base URL.

    Args:
        base_url: etcd client URL, e.g. `https://10.0.0.5:2379`.

    Returns:
        str: Health endpoint URL.

    Raises:
        ValueError: Raised when base_url is blank.
    """

    normalized_base_url = base_url.strip()
    if not normalized_base_url:
        raise ValueError("base_url must not be blank")
    return normalized_base_url.rstrip("/") + HEALTH_PATH


def health_interpret_response(status_code: int, body: bytes) -> HealthCheckResult:
    """Interpret one etcd health response.

    Only a 200 response whose JSON object carries `"health": "true"` is
    healthy. Malformed JSON, a non-object payload, a missing or non-string
    `health` field and any other status are unhealthy.

    Args:
        status_code: HTTP status code.
        body: Raw response body.

    Returns:
        HealthCheckResult: Healthy or unhealthy result with a reason.
    """

    if status_code != 200:
        return HealthCheckResult(state=HealthState.UNHEALTHY, detail=f"Got HTTP {status_code}")

    try:
        payload = json.loads(body)
    except ValueError:
        return HealthCheckResult(state=HealthState.UNHEALTHY, detail="Health payload is not valid JSON")

    if not isinstance(payload, dict):
        return HealthCheckResult(state=HealthState.UNHEALTHY, detail="Health payload is not a JSON object")

    health_value = payload.get("health")
    if not isinstance(health_value, str):
        return HealthCheckResult(state=HealthState.UNHEALTHY, detail="Health payload has no string 'health' field")
    if health_value != "true":
        return HealthCheckResult(state=HealthState.UNHEALTHY, detail=f"Health is {health_value}")
    return HealthCheckResult(state=HealthState.HEALTHY, detail="Health is true")


class HealthPoller:
    """Polls the etcd health endpoint until it reports healthy."""

    def __init__(
        self,
        http_client: HealthHttpClientPort,
        interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        max_attempts: int | None = None,
    ):
        """Initialize health poller.

        Args:
            http_client: TLS-configured client for etcd requests.
            interval_seconds: Delay before each attempt.
            max_attempts: Optional attempt cap; None polls forever.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when configuration values are invalid.
        """

        if http_client is None:
            raise ValueError("http_client must not be None")
        if interval_seconds < 0:
            raise ValueError("interval_seconds must be >= 0")
        if max_attempts is not None and max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

        self._http_client = http_client
        self._interval_seconds = interval_seconds
        self._max_attempts = max_attempts
        self._state = PollerState.POLLING

    @property
    def poller_state(self) -> PollerState:
        return self._state

    def poller_check_once(self, health_url: str) -> HealthCheckResult:
        """Perform one health request and classify its outcome.

        Args:
            health_url: Full etcd health endpoint URL.

        Returns:
            HealthCheckResult: Attempt outcome.

        Raises:
            HealthPollError: Raised when the request cannot be built at all.
        """

        try:
            response = self._http_client.get(health_url)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as error:
            raise HealthPollError(f"Invalid etcd health URL '{health_url}': {error}") from error
        except httpx.TransportError as error:
            return HealthCheckResult(state=HealthState.UNREACHABLE, detail=f"Etcd not responding: {error}")
        except httpx.HTTPError as error:
            return HealthCheckResult(state=HealthState.UNHEALTHY, detail=f"Health response could not be read: {error}")

        return health_interpret_response(status_code=response.status_code, body=response.content)

    def poller_wait_until_healthy(self, base_url: str) -> HealthPollResult:
        """Block until etcd reports healthy.

        Args:
            base_url: etcd client URL without the `/health` suffix.

        Returns:
            HealthPollResult: Attempt count and per-attempt timeline.

        Raises:
            HealthPollError: Raised when the health URL is unusable.
            HealthPollExhaustedError: Raised when the configured attempt cap is reached.
        """

        health_url = health_build_url(base_url)
        stage_timeline: list[dict[str, object]] = []
        attempt = 0
        self._state = PollerState.POLLING

        while self._state is PollerState.POLLING:
            if self._max_attempts is not None and attempt >= self._max_attempts:
                self._state = PollerState.FATAL_TRANSPORT_ERROR
                raise HealthPollExhaustedError(
                    f"etcd at '{health_url}' not healthy after {attempt} attempts",
                    attempts=attempt,
                )

            time.sleep(self._interval_seconds)
            attempt += 1
            logger.info("Checking etcd status (attempt %d)...", attempt)

            try:
                result = self.poller_check_once(health_url)
            except HealthPollError:
                self._state = PollerState.FATAL_TRANSPORT_ERROR
                raise

            stage_timeline.append(
                domain_build_stage_event(
                    stage="health",
                    status=result.state.value,
                    details={"attempt": attempt, "detail": result.detail},
                )
            )
            if result.health_is_healthy():
                self._state = PollerState.HEALTHY
                continue

            if result.state is HealthState.UNREACHABLE:
                logger.warning("%s. Will try again", result.detail)
            else:
                logger.info("%s", result.detail)

        logger.info("etcd is healthy after %d attempt(s)", attempt)
        return HealthPollResult(attempts=attempt, stage_timeline=stage_timeline)
