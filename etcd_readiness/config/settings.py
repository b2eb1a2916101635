"""Typed runtime settings with dotenv support and startup validation."""

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SettingsLoadError(RuntimeError):
    """Raised when runtime settings cannot be loaded or validated."""


class AppSettings(BaseSettings):
    """Runtime settings for the readiness signal and health relay commands.

    Environment variable names map directly to field names in uppercase.
    Example: `health_poll_interval_seconds` reads from `HEALTH_POLL_INTERVAL_SECONDS`.
    Server URL and TLS file paths come from the command line, not from here.

    Attributes:
        environment_name: Runtime environment label.
        log_level: Root logging level name.
        health_poll_interval_seconds: Delay before every health poll attempt.
        health_poll_max_attempts: Optional attempt cap; unset polls forever.
        etcd_request_timeout_seconds: Transport timeout for etcd requests.
        metadata_base_url: Instance metadata base URL ending in `meta-data/`.
        metadata_timeout_seconds: Transport timeout for metadata requests.
        metadata_use_imdsv2: Whether to request an IMDSv2 session token first.
        aws_profile_name: Optional shared-config profile for AWS API calls.
        relay_host: Interface the health relay binds to.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment_name: str = Field(default="production")
    log_level: str = Field(default="INFO")
    health_poll_interval_seconds: float = Field(default=1.0, ge=0)
    health_poll_max_attempts: int | None = Field(default=None, ge=1)
    etcd_request_timeout_seconds: float = Field(default=5.0, gt=0)
    metadata_base_url: str = Field(default="http://169.254.169.254/latest/meta-data/", min_length=1)
    metadata_timeout_seconds: float = Field(default=2.0, gt=0)
    metadata_use_imdsv2: bool = Field(default=False)
    aws_profile_name: str | None = Field(default=None)
    relay_host: str = Field(default="0.0.0.0", min_length=1)

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized_value = value.strip().upper()
        if normalized_value not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError("log_level must be one of CRITICAL, ERROR, WARNING, INFO, DEBUG")
        return normalized_value

    @field_validator("aws_profile_name")
    @classmethod
    def _validate_optional_profile(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped_value = value.strip()
        return stripped_value or None


def config_load_settings() -> AppSettings:
    """Load and validate runtime settings from environment and dotenv.

    Returns:
        AppSettings: Validated runtime settings object.

    Raises:
        SettingsLoadError: Raised when settings are invalid.
    """

    try:
        return AppSettings()
    except ValidationError as error:
        raise SettingsLoadError(
            f"Startup configuration validation failed. Update .env or environment variables. Details: {error}"
        ) from error
