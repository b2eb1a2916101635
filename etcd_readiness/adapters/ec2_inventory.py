"""EC2 inventory adapter resolving the CloudFormation resource that owns an instance."""

from __future__ import annotations

import logging
from typing import Any, Final, Iterable, Mapping

from botocore.exceptions import BotoCoreError, ClientError

from etcd_readiness.domain import CloudCredentials, ReadinessTarget, Region

from .aws_session import AwsClientFactory, aws_create_client, aws_error_code
from .errors import LocateProviderError, MissingResourceIdError, MissingStackNameError, NoTagsReturnedError
from .interfaces import ReadinessLocatorPort

logger = logging.getLogger(__name__)

STACK_ID_TAG: Final[str] = "aws:cloudformation:stack-id"
RESOURCE_ID_TAG: Final[str] = "aws:cloudformation:logical-id"


def inventory_find_tag_value(tags: Iterable[Mapping[str, Any]], key: str) -> str | None:
    """Return the value of the first tag whose key matches.

    Args:
        tags: EC2 tag list entries with `Key` and `Value`.
        key: Tag key to look up.

    Returns:
        str | None: First matching tag value, or None when absent.
    """

    for tag in tags:
        if tag.get("Key") == key:
            return tag.get("Value")
    return None


def inventory_extract_tags(describe_response: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    """Drill into the first reservation's first instance and return its tags.

    Args:
        describe_response: `describe_instances` response payload.

    Returns:
        list[Mapping[str, Any]]: Tag list of the first instance.

    Raises:
        NoTagsReturnedError: Raised when reservations, instances or tags are absent.
    """

    reservations = describe_response.get("Reservations") or []
    if not reservations:
        raise NoTagsReturnedError("No reservations returned for instance")
    instances = reservations[0].get("Instances") or []
    if not instances:
        raise NoTagsReturnedError("No instances returned in reservation")
    tags = instances[0].get("Tags")
    if tags is None:
        raise NoTagsReturnedError("Instance has no tags")
    return list(tags)


def inventory_build_target(tags: list[Mapping[str, Any]], instance_id: str) -> ReadinessTarget:
    """Build the readiness target from instance tags.

    The stack tag is checked before the resource tag; only the first missing tag
    is reported.

    Args:
        tags: Instance tag list.
        instance_id: EC2 instance id used as the signal unique id.

    Returns:
        ReadinessTarget: Resolved target.

    Raises:
        MissingStackNameError: Raised when the stack-id tag is absent.
        MissingResourceIdError: Raised when the logical-id tag is absent.
    """

    stack_name = inventory_find_tag_value(tags, STACK_ID_TAG)
    resource_id = inventory_find_tag_value(tags, RESOURCE_ID_TAG)
    if not stack_name:
        raise MissingStackNameError(f"Instance '{instance_id}' is missing tag '{STACK_ID_TAG}'")
    if not resource_id:
        raise MissingResourceIdError(f"Instance '{instance_id}' is missing tag '{RESOURCE_ID_TAG}'")
    return ReadinessTarget(stack_name=stack_name, logical_resource_id=resource_id, unique_id=instance_id)


class Ec2InventoryLocator(ReadinessLocatorPort):
    """Resource locator backed by EC2 `DescribeInstances`."""

    def __init__(self, credentials: CloudCredentials, client_factory: AwsClientFactory = aws_create_client):
        """Initialize locator.

        Args:
            credentials: Explicit AWS credential source.
            client_factory: Factory returning an EC2 client for a region.

        Raises:
            ValueError: Raised when credentials are None.
        """

        if credentials is None:
            raise ValueError("credentials must not be None")
        self._credentials = credentials
        self._client_factory = client_factory

    def locator_locate(self, region: Region, instance_id: str) -> ReadinessTarget:
        """Resolve stack and logical resource ids from this instance's tags.

        Args:
            region: Region the instance runs in.
            instance_id: EC2 instance id.

        Returns:
            ReadinessTarget: Stack, logical resource id and instance id.

        Raises:
            NoTagsReturnedError: Raised when the instance record or its tags are absent.
            MissingStackNameError: Raised when the stack tag is absent.
            MissingResourceIdError: Raised when the resource tag is absent.
            LocateProviderError: Raised for EC2 API failures.
        """

        normalized_instance_id = instance_id.strip()
        if not normalized_instance_id:
            raise ValueError("instance_id must not be blank")

        try:
            ec2_client = self._client_factory(self._credentials, "ec2", region)
            describe_response = ec2_client.describe_instances(InstanceIds=[normalized_instance_id])
        except (BotoCoreError, ClientError) as error:
            raise LocateProviderError(
                f"DescribeInstances failed for '{normalized_instance_id}' in '{region}': {error}",
                error_code=aws_error_code(error),
            ) from error

        tags = inventory_extract_tags(describe_response)
        target = inventory_build_target(tags, normalized_instance_id)
        logger.info(
            "Located resource '%s' in stack '%s' for instance '%s'",
            target.logical_resource_id,
            target.stack_name,
            target.unique_id,
        )
        return target
