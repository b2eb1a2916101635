"""CloudFormation adapter emitting the one-shot readiness signal."""

from __future__ import annotations

import logging
from typing import Final

from botocore.exceptions import BotoCoreError, ClientError

from etcd_readiness.domain import CloudCredentials, ReadinessTarget, Region

from .aws_session import AwsClientFactory, aws_create_client, aws_error_code
from .errors import SignalRejectedError
from .interfaces import ReadinessSignalPort

logger = logging.getLogger(__name__)

SIGNAL_STATUS_SUCCESS: Final[str] = "SUCCESS"


class CloudFormationSignaler(ReadinessSignalPort):
    """Readiness signaler backed by CloudFormation `SignalResource`.

    The signal is sent at most once per call; re-signalling relies on process
    restart and CloudFormation's own handling of duplicate unique ids.
    """

    def __init__(
        self,
        credentials: CloudCredentials,
        region: Region,
        client_factory: AwsClientFactory = aws_create_client,
    ):
        """Initialize signaler.

        Args:
            credentials: Explicit AWS credential source.
            region: Region hosting the stack.
            client_factory: Factory returning a CloudFormation client.

        Raises:
            ValueError: Raised when credentials or region are None.
        """

        if credentials is None:
            raise ValueError("credentials must not be None")
        if region is None:
            raise ValueError("region must not be None")
        self._credentials = credentials
        self._region = region
        self._client_factory = client_factory

    def signaler_signal_ready(self, target: ReadinessTarget) -> None:
        """Send one SUCCESS signal for the target.

        Args:
            target: Resolved readiness target.

        Returns:
            None: Signal is sent as a side effect.

        Raises:
            SignalRejectedError: Raised when the call fails or is rejected.
        """

        logger.info(
            "Signaling %s for '%s' on instance '%s' in stack '%s'",
            SIGNAL_STATUS_SUCCESS,
            target.logical_resource_id,
            target.unique_id,
            target.stack_name,
        )
        try:
            cloudformation_client = self._client_factory(self._credentials, "cloudformation", self._region)
            cloudformation_client.signal_resource(
                StackName=target.stack_name,
                LogicalResourceId=target.logical_resource_id,
                UniqueId=target.unique_id,
                Status=SIGNAL_STATUS_SUCCESS,
            )
        except (BotoCoreError, ClientError) as error:
            raise SignalRejectedError(
                f"SignalResource failed for '{target.logical_resource_id}' in stack '{target.stack_name}': {error}",
                error_code=aws_error_code(error),
            ) from error
