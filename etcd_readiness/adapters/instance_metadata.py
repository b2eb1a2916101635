"""EC2 instance metadata adapter for resolving this node's identity."""

from __future__ import annotations

from functools import lru_cache
import logging
from typing import Final
from urllib.parse import urljoin

import botocore.session
import httpx

from etcd_readiness.domain import CloudCredentials, InstanceIdentity, Region

from .errors import MetadataInvalidRegionError, MetadataTransportError
from .interfaces import InstanceMetadataPort

logger = logging.getLogger(__name__)

INSTANCE_METADATA_URL: Final[str] = "http://169.254.169.254/latest/meta-data/"


@lru_cache(maxsize=1)
def metadata_known_region_codes() -> frozenset[str]:
    """Return every region code known to the bundled botocore endpoint data.

    Returns:
        frozenset[str]: Region codes across all AWS partitions.
    """

    session = botocore.session.get_session()
    region_codes: set[str] = set()
    for partition_name in session.get_available_partitions():
        region_codes.update(session.get_available_regions("ec2", partition_name=partition_name))
    return frozenset(region_codes)


def metadata_region_from_availability_zone(
    availability_zone: str,
    known_region_codes: frozenset[str] | None = None,
) -> Region:
    """Derive a validated region by dropping the zone letter.

    Args:
        availability_zone: Zone string such as `us-east-1a`.
        known_region_codes: Optional override of the accepted region codes.

    Returns:
        Region: Validated region, e.g. `us-east-1`.

    Raises:
        MetadataInvalidRegionError: Raised when the truncated value is not a known region.
    """

    region_code = availability_zone[:-1]
    accepted_codes = known_region_codes if known_region_codes is not None else metadata_known_region_codes()
    if region_code not in accepted_codes:
        raise MetadataInvalidRegionError(
            f"Availability zone '{availability_zone}' does not map to a known region",
            availability_zone=availability_zone,
        )
    return Region(code=region_code)


class InstanceMetadataClient(InstanceMetadataPort):
    """Identity resolver backed by the local EC2 instance metadata service.

    Credentials are accepted for constructor symmetry with the AWS API
    adapters; the metadata service itself is unauthenticated.
    """

    _TOKEN_TTL_HEADER: Final[str] = "X-aws-ec2-metadata-token-ttl-seconds"
    _TOKEN_HEADER: Final[str] = "X-aws-ec2-metadata-token"
    _TOKEN_TTL_SECONDS: Final[int] = 21600

    def __init__(
        self,
        credentials: CloudCredentials,
        base_url: str = INSTANCE_METADATA_URL,
        timeout_seconds: float = 2.0,
        use_imdsv2: bool = False,
        http_client: httpx.Client | None = None,
        known_region_codes: frozenset[str] | None = None,
    ):
        """Initialize metadata client.

        Args:
            credentials: Explicit AWS credential source.
            base_url: Metadata base URL ending in `meta-data/`.
            timeout_seconds: Per-request timeout.
            use_imdsv2: Whether to fetch an IMDSv2 session token first.
            http_client: Optional preconfigured client, mainly for tests.
            known_region_codes: Optional override of accepted region codes.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when configuration values are invalid.
        """

        if credentials is None:
            raise ValueError("credentials must not be None")
        normalized_base_url = base_url.strip()
        if not normalized_base_url:
            raise ValueError("base_url must not be blank")
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")

        self._credentials = credentials
        self._base_url = normalized_base_url.rstrip("/") + "/"
        self._use_imdsv2 = use_imdsv2
        self._http_client = http_client or httpx.Client(timeout=timeout_seconds)
        self._known_region_codes = known_region_codes
        self._session_token: str | None = None

    def metadata_instance_id(self) -> str:
        """Return the instance id body verbatim.

        Returns:
            str: EC2 instance id.

        Raises:
            MetadataTransportError: Raised when the metadata request fails.
        """

        instance_id = self._metadata_fetch("instance-id")
        if not instance_id.strip():
            raise MetadataTransportError("Instance metadata 'instance-id' returned an empty body")
        return instance_id

    def metadata_region(self) -> Region:
        """Return the region derived from the placement availability zone.

        Returns:
            Region: Validated region.

        Raises:
            MetadataTransportError: Raised when the metadata request fails.
            MetadataInvalidRegionError: Raised when the zone maps to no known region.
        """

        availability_zone = self._metadata_fetch("placement/availability-zone")
        return metadata_region_from_availability_zone(
            availability_zone=availability_zone,
            known_region_codes=self._known_region_codes,
        )

    def metadata_identity(self) -> InstanceIdentity:
        """Return instance id and region.

        Returns:
            InstanceIdentity: Resolved identity.

        Raises:
            MetadataError: Raised when either lookup fails.
        """

        identity = InstanceIdentity(instance_id=self.metadata_instance_id(), region=self.metadata_region())
        logger.info("Resolved instance '%s' in region '%s'", identity.instance_id, identity.region)
        return identity

    def _metadata_fetch(self, endpoint: str) -> str:
        """Fetch one metadata value relative to the `meta-data/` folder.

        Args:
            endpoint: Relative metadata path.

        Returns:
            str: Response body text.

        Raises:
            MetadataTransportError: Raised for transport failures and non-success statuses.
        """

        url = urljoin(self._base_url, endpoint)
        headers: dict[str, str] = {}
        if self._use_imdsv2:
            headers[self._TOKEN_HEADER] = self._metadata_session_token()

        try:
            response = self._http_client.get(url, headers=headers)
        except httpx.HTTPError as error:
            raise MetadataTransportError(f"Instance metadata request to '{url}' failed: {error}") from error

        if response.status_code != 200:
            raise MetadataTransportError(f"Instance metadata '{endpoint}' returned HTTP {response.status_code}")
        return response.text

    def _metadata_session_token(self) -> str:
        """Return a cached IMDSv2 session token, requesting one when needed.

        Returns:
            str: Session token value.

        Raises:
            MetadataTransportError: Raised when the token request fails.
        """

        if self._session_token is not None:
            return self._session_token

        token_url = urljoin(self._base_url, "../api/token")
        try:
            response = self._http_client.put(
                token_url,
                headers={self._TOKEN_TTL_HEADER: str(self._TOKEN_TTL_SECONDS)},
            )
        except httpx.HTTPError as error:
            raise MetadataTransportError(f"Instance metadata token request failed: {error}") from error

        if response.status_code != 200:
            raise MetadataTransportError(f"Instance metadata token request returned HTTP {response.status_code}")
        self._session_token = response.text
        return self._session_token
