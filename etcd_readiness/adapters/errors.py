"""Project-native typed exceptions for readiness pipeline failures.

Each pipeline stage owns one base class so the top level can tell which stage
originated a fatal failure. Concrete classes also inherit the closest builtin
exception so callers catching builtins keep working.
"""

from __future__ import annotations


class ReadinessError(Exception):
    """Base exception for readiness pipeline failures.

    Attributes:
        stage: Pipeline stage label that raised the error.
    """

    stage: str = "readiness"

    def __init__(self, message: str):
        super().__init__(message)


class TlsConfigurationError(ReadinessError, ValueError):
    """TLS material is unreadable or malformed; never retried."""

    stage = "tls"


class HealthPollError(ReadinessError, RuntimeError):
    """Health polling stopped without a healthy result."""

    stage = "health"


class HealthPollExhaustedError(HealthPollError):
    """Configured attempt cap reached before etcd reported healthy.

    Attributes:
        attempts: Number of attempts performed.
    """

    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts


class MetadataError(ReadinessError):
    """Instance metadata could not be resolved."""

    stage = "identity"


class MetadataTransportError(MetadataError, ConnectionError):
    """Transport-level failure talking to the instance metadata service."""


class MetadataInvalidRegionError(MetadataError, ValueError):
    """Availability zone did not truncate to a known region.

    Attributes:
        availability_zone: Raw availability zone string from metadata.
    """

    def __init__(self, message: str, availability_zone: str):
        super().__init__(message)
        self.availability_zone = availability_zone


class LocateError(ReadinessError):
    """CloudFormation target for this instance could not be located."""

    stage = "locate"


class NoTagsReturnedError(LocateError, LookupError):
    """Describe-instances returned no reservation, instance or tag list."""


class MissingStackNameError(LocateError, LookupError):
    """Instance tags lack the CloudFormation stack-id tag."""


class MissingResourceIdError(LocateError, LookupError):
    """Instance tags lack the CloudFormation logical-id tag."""


class LocateProviderError(LocateError, ConnectionError):
    """EC2 API failure such as throttling, auth failure or transport error.

    Attributes:
        error_code: Optional AWS error code from the provider response.
    """

    def __init__(self, message: str, error_code: str | None = None):
        super().__init__(message)
        self.error_code = error_code


class SignalError(ReadinessError):
    """CloudFormation signal could not be delivered."""

    stage = "signal"


class SignalRejectedError(SignalError, RuntimeError):
    """CloudFormation rejected or failed the signal-resource call.

    Attributes:
        error_code: Optional AWS error code from the provider response.
    """

    def __init__(self, message: str, error_code: str | None = None):
        super().__init__(message)
        self.error_code = error_code
