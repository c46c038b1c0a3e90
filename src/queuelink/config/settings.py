"""
Module: settings.py
Description: Client configuration using pydantic-settings.

Reads region, credentials, endpoint and polling settings from
QUEUELINK_* environment variables (or a .env file). Nothing here is
global: build a Settings instance and hand it to QueueClient.from_settings().
"""

from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from queuelink.errors import ConfigurationError
from queuelink.models.credentials import Credentials


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="QUEUELINK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    log_level: str = Field(default="INFO", description="Logging level")

    # Service settings
    region: str = Field(default="us-east-1", description="Service region")
    service: str = Field(default="sqs", description="Service name used in signing")
    endpoint_url: Optional[str] = Field(
        default=None,
        description="Override for https://<service>.<region>.amazonaws.com"
    )

    # Credentials
    access_key: Optional[str] = Field(default=None, description="Access key id")
    secret_key: Optional[str] = Field(
        default=None, repr=False, description="Secret access key"
    )

    # Queue settings
    queue_prefix: str = Field(
        default="",
        description="Prefix applied to every queue name this client sees"
    )
    poll_time: int = Field(
        default=5,
        ge=1,
        le=20,
        description="Long-poll wait in seconds for listeners"
    )

    # Transport settings
    receive_timeout: float = Field(
        default=30.0,
        ge=1,
        le=120,
        description="HTTP receive timeout in seconds"
    )
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates")
    max_action_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Total attempts for an action failing with HTTP 5xx"
    )

    @field_validator('region', 'service')
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Region and service are part of every credential scope."""
        if not v or not v.strip():
            raise ValueError("must be a non-empty string")
        return v.strip()

    @field_validator('endpoint_url')
    @classmethod
    def validate_endpoint_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate endpoint override is an HTTP(S) URL."""
        if v is not None and not v.startswith(('http://', 'https://')):
            raise ValueError("endpoint_url must be a valid HTTP/HTTPS URL")
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(valid_levels)}")
        return v.upper()

    @model_validator(mode='after')
    def validate_key_pair(self) -> "Settings":
        """Access key and secret key are given together or not at all."""
        if bool(self.access_key) != bool(self.secret_key):
            raise ValueError("access_key and secret_key must be set together")
        return self

    def credentials(self) -> Credentials:
        """
        Build the Credentials value for signing.

        Raises:
            ConfigurationError: If no access key / secret key is configured
        """
        if not self.access_key or not self.secret_key:
            raise ConfigurationError(
                "QUEUELINK_ACCESS_KEY and QUEUELINK_SECRET_KEY must be set"
            )
        return Credentials(access_key=self.access_key, secret_key=self.secret_key)
