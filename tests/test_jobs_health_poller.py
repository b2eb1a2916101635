"""Regression tests for etcd health polling state machine behavior."""

from __future__ import annotations

from typing import Callable

import httpx
import pytest

from etcd_readiness.adapters import HealthPollError, HealthPollExhaustedError
from etcd_readiness.domain import HealthState
from etcd_readiness.jobs import HealthPoller, PollerState, health_build_url, health_interpret_response
import etcd_readiness.jobs.health_poller as poller_module

_SERVER_URL = "https://etcd.internal:2379"
_HEALTH_URL = "https://etcd.internal:2379/health"


def _build_sequenced_client(outcomes: list[httpx.Response | Exception]) -> tuple[httpx.Client, list[str]]:
    """Create an httpx client replaying responses or raising errors in order.

    Args:
        outcomes: Ordered responses or exceptions to return per request.

    Returns:
        tuple[httpx.Client, list[str]]: Client and list capturing requested URLs.
    """

    requested_urls: list[str] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        requested_urls.append(str(request.url))
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    return httpx.Client(transport=httpx.MockTransport(_handler)), requested_urls


def _healthy_response() -> httpx.Response:
    return httpx.Response(200, content=b'{"health":"true"}', headers={"content-type": "application/json"})


@pytest.fixture
def sleep_calls(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Replace poller sleep with a recorder.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        list[float]: Recorded sleep durations.
    """

    recorded: list[float] = []
    sleep_recorder: Callable[[float], None] = recorded.append
    monkeypatch.setattr(poller_module.time, "sleep", sleep_recorder)
    return recorded


@pytest.mark.parametrize(
    ("status_code", "body", "expected_state"),
    [
        (200, b'{"health":"true"}', HealthState.HEALTHY),
        (200, b'{"health": "true", "reason": ""}', HealthState.HEALTHY),
        (200, b'{"health":"false"}', HealthState.UNHEALTHY),
        (200, b'{"health":true}', HealthState.UNHEALTHY),
        (200, b'{"status":"ok"}', HealthState.UNHEALTHY),
        (200, b'["health", "true"]', HealthState.UNHEALTHY),
        (200, b'{"health":"tr', HealthState.UNHEALTHY),
        (200, b"", HealthState.UNHEALTHY),
        (503, b'{"health":"true"}', HealthState.UNHEALTHY),
        (404, b"not found", HealthState.UNHEALTHY),
    ],
)
def test_jobs_health_interpret_response_states(status_code: int, body: bytes, expected_state: HealthState) -> None:
    """Classify health payloads; only 200 with string `true` is healthy.

    Args:
        status_code: Upstream status code.
        body: Upstream body.
        expected_state: Expected classification.

    Raises:
        AssertionError: Raised when classification is incorrect.
    """

    assert health_interpret_response(status_code=status_code, body=body).state is expected_state


def test_jobs_health_interpret_non_200_reports_status() -> None:
    result = health_interpret_response(status_code=503, body=b"")

    assert result.detail == "Got HTTP 503"


def test_jobs_health_build_url_appends_health_path() -> None:
    assert health_build_url("https://etcd.internal:2379") == _HEALTH_URL
    assert health_build_url("https://etcd.internal:2379/") == _HEALTH_URL


def test_jobs_health_poller_returns_after_single_healthy_attempt(sleep_calls: list[float]) -> None:
    """Return after one attempt when etcd is immediately healthy, sleeping first.

    Args:
        sleep_calls: Recorded sleep durations fixture.

    Raises:
        AssertionError: Raised when attempt count or initial delay is wrong.
    """

    client, requested_urls = _build_sequenced_client([_healthy_response()])
    poller = HealthPoller(http_client=client)

    result = poller.poller_wait_until_healthy(_SERVER_URL)

    assert result.attempts == 1
    assert requested_urls == [_HEALTH_URL]
    assert sleep_calls == [1.0]
    assert poller.poller_state is PollerState.HEALTHY


def test_jobs_health_poller_retries_non_200_until_healthy(sleep_calls: list[float]) -> None:
    """Make exactly three attempts when etcd returns 503 twice then healthy.

    Args:
        sleep_calls: Recorded sleep durations fixture.

    Raises:
        AssertionError: Raised when retry count is wrong.
    """

    client, requested_urls = _build_sequenced_client(
        [httpx.Response(503), httpx.Response(503), _healthy_response()]
    )
    poller = HealthPoller(http_client=client)

    result = poller.poller_wait_until_healthy(_SERVER_URL)

    assert result.attempts == 3
    assert len(requested_urls) == 3
    assert sleep_calls == [1.0, 1.0, 1.0]
    assert [event["status"] for event in result.stage_timeline] == ["unhealthy", "unhealthy", "healthy"]


def test_jobs_health_poller_treats_bad_payloads_as_not_ready(sleep_calls: list[float]) -> None:
    """Keep polling through negative, malformed and field-less payloads."""

    client, _ = _build_sequenced_client(
        [
            httpx.Response(200, content=b'{"health":"false"}'),
            httpx.Response(200, content=b"{not json"),
            httpx.Response(200, content=b'{"members":[]}'),
            _healthy_response(),
        ]
    )

    result = HealthPoller(http_client=client).poller_wait_until_healthy(_SERVER_URL)

    assert result.attempts == 4
    assert len(sleep_calls) == 4


def test_jobs_health_poller_retries_undecodable_body(sleep_calls: list[float]) -> None:
    """Keep polling when a 200 body cannot be content-decoded.

    Args:
        sleep_calls: Recorded sleep durations fixture.

    Raises:
        AssertionError: Raised when a decoding failure stops the loop.
    """

    client, _ = _build_sequenced_client(
        [
            httpx.Response(200, content=b"not-gzip", headers={"content-encoding": "gzip"}),
            _healthy_response(),
        ]
    )
    poller = HealthPoller(http_client=client)

    result = poller.poller_wait_until_healthy(_SERVER_URL)

    assert result.attempts == 2
    assert len(sleep_calls) == 2
    assert result.stage_timeline[0]["status"] == "unhealthy"
    assert poller.poller_state is PollerState.HEALTHY


def test_jobs_health_poller_keeps_retrying_transport_failures(sleep_calls: list[float]) -> None:
    """Retry connection failures without terminating when no attempt cap is set.

    Args:
        sleep_calls: Recorded sleep durations fixture.

    Raises:
        AssertionError: Raised when transport failures stop the loop.
    """

    failures: list[httpx.Response | Exception] = [httpx.ConnectError("connection refused") for _ in range(50)]
    failures.append(httpx.ReadTimeout("timed out"))
    failures.append(_healthy_response())
    client, _ = _build_sequenced_client(failures)

    result = HealthPoller(http_client=client, interval_seconds=0.5).poller_wait_until_healthy(_SERVER_URL)

    assert result.attempts == 52
    assert set(sleep_calls) == {0.5}
    assert result.stage_timeline[0]["status"] == "unreachable"


def test_jobs_health_poller_attempt_cap_enters_fatal_state(sleep_calls: list[float]) -> None:
    """Raise exhaustion error when an opt-in attempt cap is reached.

    Args:
        sleep_calls: Recorded sleep durations fixture.

    Raises:
        AssertionError: Raised when the cap is not honored.
    """

    client, requested_urls = _build_sequenced_client([httpx.ConnectError("refused") for _ in range(3)])
    poller = HealthPoller(http_client=client, max_attempts=3)

    with pytest.raises(HealthPollExhaustedError) as error_info:
        poller.poller_wait_until_healthy(_SERVER_URL)

    assert error_info.value.attempts == 3
    assert len(requested_urls) == 3
    assert len(sleep_calls) == 3
    assert poller.poller_state is PollerState.FATAL_TRANSPORT_ERROR


def test_jobs_health_poller_unsupported_scheme_is_fatal(sleep_calls: list[float]) -> None:
    """Stop immediately when the health URL cannot be requested at all."""

    client = httpx.Client()
    poller = HealthPoller(http_client=client)

    with pytest.raises(HealthPollError, match="Invalid etcd health URL"):
        poller.poller_wait_until_healthy("ftp://etcd.internal:2379")

    assert len(sleep_calls) == 1
    assert poller.poller_state is PollerState.FATAL_TRANSPORT_ERROR


def test_jobs_health_poller_rejects_invalid_configuration() -> None:
    client = httpx.Client()

    with pytest.raises(ValueError, match="interval_seconds"):
        HealthPoller(http_client=client, interval_seconds=-1)
    with pytest.raises(ValueError, match="max_attempts"):
        HealthPoller(http_client=client, max_attempts=0)
