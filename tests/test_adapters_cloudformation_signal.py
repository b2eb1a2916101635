"""Regression tests for the CloudFormation readiness signal."""

from __future__ import annotations

from typing import Any

from botocore.exceptions import ClientError
import pytest

from etcd_readiness.adapters import CloudFormationSignaler, SignalRejectedError
from etcd_readiness.domain import CloudCredentials, ReadinessTarget, Region

_TARGET = ReadinessTarget(stack_name="etcd-stack", logical_resource_id="EtcdAutoScalingGroup", unique_id="i-0abc")


class _CloudFormationClientStub:
    """CloudFormation client stub capturing signal calls."""

    def __init__(self, error: Exception | None = None):
        self._error = error
        self.signal_calls: list[dict[str, Any]] = []

    def signal_resource(self, **kwargs: Any) -> dict[str, Any]:
        self.signal_calls.append(kwargs)
        if self._error is not None:
            raise self._error
        return {}


def _build_signaler(stub: _CloudFormationClientStub, factory_calls: list[tuple[str, Region]]) -> CloudFormationSignaler:
    def _factory(credentials: CloudCredentials, service_name: str, region: Region) -> _CloudFormationClientStub:
        _ = credentials
        factory_calls.append((service_name, region))
        return stub

    return CloudFormationSignaler(credentials=CloudCredentials(), region=Region(code="eu-west-1"), client_factory=_factory)


def test_adapters_signal_sends_single_success_signal() -> None:
    """Send exactly one SUCCESS signal with the target triple.

    Raises:
        AssertionError: Raised when signal arguments are incorrect.
    """

    stub = _CloudFormationClientStub()
    factory_calls: list[tuple[str, Region]] = []

    _build_signaler(stub, factory_calls).signaler_signal_ready(_TARGET)

    assert stub.signal_calls == [
        {
            "StackName": "etcd-stack",
            "LogicalResourceId": "EtcdAutoScalingGroup",
            "UniqueId": "i-0abc",
            "Status": "SUCCESS",
        }
    ]
    assert factory_calls == [("cloudformation", Region(code="eu-west-1"))]


def test_adapters_signal_rejection_raises_typed_error_without_retry() -> None:
    """Raise SignalRejectedError after one failed call.

    Raises:
        AssertionError: Raised when rejection is retried or untyped.
    """

    rejected = ClientError(
        error_response={"Error": {"Code": "ValidationError", "Message": "Stack is in CREATE_COMPLETE state"}},
        operation_name="SignalResource",
    )
    stub = _CloudFormationClientStub(error=rejected)

    with pytest.raises(SignalRejectedError) as error_info:
        _build_signaler(stub, []).signaler_signal_ready(_TARGET)

    assert error_info.value.error_code == "ValidationError"
    assert len(stub.signal_calls) == 1


def test_adapters_readiness_target_rejects_blank_fields() -> None:
    with pytest.raises(ValueError, match="logical_resource_id"):
        ReadinessTarget(stack_name="etcd-stack", logical_resource_id=" ", unique_id="i-0abc")
