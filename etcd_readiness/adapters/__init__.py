"""Adapter layer package for etcd, instance metadata and AWS API boundaries."""

from .cloudformation_signal import SIGNAL_STATUS_SUCCESS, CloudFormationSignaler
from .ec2_inventory import RESOURCE_ID_TAG, STACK_ID_TAG, Ec2InventoryLocator, inventory_find_tag_value
from .errors import (
	HealthPollError,
	HealthPollExhaustedError,
	LocateError,
	LocateProviderError,
	MetadataError,
	MetadataInvalidRegionError,
	MetadataTransportError,
	MissingResourceIdError,
	MissingStackNameError,
	NoTagsReturnedError,
	ReadinessError,
	SignalError,
	SignalRejectedError,
	TlsConfigurationError,
)
from .instance_metadata import INSTANCE_METADATA_URL, InstanceMetadataClient, metadata_region_from_availability_zone
from .interfaces import HealthHttpClientPort, InstanceMetadataPort, ReadinessLocatorPort, ReadinessSignalPort
from .tls_client import tls_create_client, tls_create_ssl_context

__all__ = [
	"CloudFormationSignaler",
	"Ec2InventoryLocator",
	"HealthHttpClientPort",
	"HealthPollError",
	"HealthPollExhaustedError",
	"INSTANCE_METADATA_URL",
	"InstanceMetadataClient",
	"InstanceMetadataPort",
	"LocateError",
	"LocateProviderError",
	"MetadataError",
	"MetadataInvalidRegionError",
	"MetadataTransportError",
	"MissingResourceIdError",
	"MissingStackNameError",
	"NoTagsReturnedError",
	"RESOURCE_ID_TAG",
	"ReadinessError",
	"ReadinessLocatorPort",
	"ReadinessSignalPort",
	"SIGNAL_STATUS_SUCCESS",
	"STACK_ID_TAG",
	"SignalError",
	"SignalRejectedError",
	"TlsConfigurationError",
	"inventory_find_tag_value",
	"metadata_region_from_availability_zone",
	"tls_create_client",
	"tls_create_ssl_context",
]
