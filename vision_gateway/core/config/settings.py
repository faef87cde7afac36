#!/usr/bin/env python3
"""
Centralized Configuration Module using Pydantic Settings

This module provides type-safe, environment-based configuration for the
vision gateway. All configuration is centralized here to ensure consistency
across modules.

Architectural Decision: Pydantic Settings for type safety and validation
- Environment variable loading with .env support
- Type validation at startup (fail fast on misconfiguration)
- Easy testing with override mechanisms

Credentials are optional at this layer: a missing key or endpoint is
reported as a ConfigurationError when the gateway is constructed, so that
settings can still be loaded by tooling that never talks to the service.

Author: System Architect
Date: 2026-10-02
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from vision_gateway.core.config.constants import (
    AZURE_VISION_API_VERSION,
    CAPTURE_TIMEOUT,
    DEFAULT_CACHE_TTL_SECONDS,
    DEFAULT_QUOTA_LIMIT,
    MAX_RETRIES,
    RETRY_ATTEMPT_TIMEOUT,
    RETRY_BASE_DELAY,
    QuotaPeriod,
)


class VisionServiceSettings(BaseSettings):
    """
    Remote image-analysis service configuration.

    STAGE-0.1: Azure Computer Vision configuration
    """

    AZURE_VISION_API_KEY: str | None = Field(default=None, description="Subscription key")
    AZURE_VISION_ENDPOINT: str | None = Field(default=None, description="Resource endpoint URL")
    AZURE_VISION_API_VERSION: str = Field(default=AZURE_VISION_API_VERSION, description="REST API version")
    AZURE_VISION_TIMEOUT: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")
    AZURE_VISION_FEATURES: list[str] = Field(
        default=["Objects", "Tags"],
        description="Visual feature categories to request"
    )

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class QuotaSettings(BaseSettings):
    """
    Call quota configuration.

    STAGE-Q: Quota limits

    QUOTA_PERIOD defaults to "none": the counter only ever grows, which is
    the behavior of the headset client this gateway was built for.
    """

    QUOTA_LIMIT: int = Field(default=DEFAULT_QUOTA_LIMIT, ge=0, description="Remote calls per period")
    QUOTA_PERIOD: QuotaPeriod = Field(default=QuotaPeriod.NONE, description="Rollover policy")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class CacheSettings(BaseSettings):
    """
    Content cache configuration.

    STAGE-C: Cache TTL
    """

    CACHE_TTL_SECONDS: float = Field(default=DEFAULT_CACHE_TTL_SECONDS, gt=0, description="Entry TTL (24 hours)")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class RetrySettings(BaseSettings):
    """
    Retry / timeout configuration for remote calls.

    STAGE-R: Retry policy
    """

    RETRY_MAX_ATTEMPTS: int = Field(default=MAX_RETRIES, ge=1, description="Attempts including the first")
    RETRY_BASE_DELAY: float = Field(default=RETRY_BASE_DELAY, ge=0, description="Backoff base delay (seconds)")
    RETRY_ATTEMPT_TIMEOUT: float | None = Field(
        default=RETRY_ATTEMPT_TIMEOUT, description="Per-attempt timeout (seconds), None disables"
    )
    CAPTURE_TIMEOUT: float | None = Field(default=CAPTURE_TIMEOUT, description="Capture timeout (seconds)")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class LoggingSettings(BaseSettings):
    """
    Logging configuration for structured logging.

    STAGE-L: Logging configuration
    """

    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="console", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class ApplicationSettings(BaseSettings):
    """
    General application settings.

    STAGE-0: Application initialization
    """

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    APP_NAME: str = Field(default="Vision Gateway", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class Settings(BaseSettings):
    """
    Main settings class that aggregates all configuration sections.

    STAGE-0: Centralized configuration initialization

    Usage:
        from vision_gateway.core.config.settings import get_settings

        settings = get_settings()
        endpoint = settings.vision.AZURE_VISION_ENDPOINT
        limit = settings.quota.QUOTA_LIMIT
    """

    # Vision service settings
    AZURE_VISION_API_KEY: str | None = Field(default=None, description="Subscription key")
    AZURE_VISION_ENDPOINT: str | None = Field(default=None, description="Resource endpoint URL")
    AZURE_VISION_API_VERSION: str = Field(default=AZURE_VISION_API_VERSION, description="REST API version")
    AZURE_VISION_TIMEOUT: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")
    AZURE_VISION_FEATURES: list[str] = Field(
        default=["Objects", "Tags"],
        description="Visual feature categories to request"
    )

    # Quota settings
    QUOTA_LIMIT: int = Field(default=DEFAULT_QUOTA_LIMIT, ge=0, description="Remote calls per period")
    QUOTA_PERIOD: QuotaPeriod = Field(default=QuotaPeriod.NONE, description="Rollover policy")

    # Cache settings
    CACHE_TTL_SECONDS: float = Field(default=DEFAULT_CACHE_TTL_SECONDS, gt=0, description="Entry TTL (24 hours)")

    # Retry settings
    RETRY_MAX_ATTEMPTS: int = Field(default=MAX_RETRIES, ge=1, description="Attempts including the first")
    RETRY_BASE_DELAY: float = Field(default=RETRY_BASE_DELAY, ge=0, description="Backoff base delay (seconds)")
    RETRY_ATTEMPT_TIMEOUT: float | None = Field(
        default=RETRY_ATTEMPT_TIMEOUT, description="Per-attempt timeout (seconds), None disables"
    )
    CAPTURE_TIMEOUT: float | None = Field(default=CAPTURE_TIMEOUT, description="Capture timeout (seconds)")

    # Logging settings
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="console", description="Log output format")

    # Application settings
    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    APP_NAME: str = Field(default="Vision Gateway", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @field_validator("AZURE_VISION_ENDPOINT")
    @classmethod
    def strip_endpoint(cls, v):
        """Normalize the endpoint so paths can be appended with a single slash."""
        if v is None:
            return v
        return v.strip().rstrip("/") or None

    # Nested configuration views
    @property
    def vision(self) -> VisionServiceSettings:
        """Get vision service settings."""
        return VisionServiceSettings(
            AZURE_VISION_API_KEY=self.AZURE_VISION_API_KEY,
            AZURE_VISION_ENDPOINT=self.AZURE_VISION_ENDPOINT,
            AZURE_VISION_API_VERSION=self.AZURE_VISION_API_VERSION,
            AZURE_VISION_TIMEOUT=self.AZURE_VISION_TIMEOUT,
            AZURE_VISION_FEATURES=self.AZURE_VISION_FEATURES,
        )

    @property
    def quota(self) -> QuotaSettings:
        """Get quota settings."""
        return QuotaSettings(QUOTA_LIMIT=self.QUOTA_LIMIT, QUOTA_PERIOD=self.QUOTA_PERIOD)

    @property
    def cache(self) -> CacheSettings:
        """Get cache settings."""
        return CacheSettings(CACHE_TTL_SECONDS=self.CACHE_TTL_SECONDS)

    @property
    def retry(self) -> RetrySettings:
        """Get retry settings."""
        return RetrySettings(
            RETRY_MAX_ATTEMPTS=self.RETRY_MAX_ATTEMPTS,
            RETRY_BASE_DELAY=self.RETRY_BASE_DELAY,
            RETRY_ATTEMPT_TIMEOUT=self.RETRY_ATTEMPT_TIMEOUT,
            CAPTURE_TIMEOUT=self.CAPTURE_TIMEOUT,
        )

    @property
    def logging(self) -> LoggingSettings:
        """Get logging settings."""
        return LoggingSettings(LOG_LEVEL=self.LOG_LEVEL, LOG_FORMAT=self.LOG_FORMAT)

    @property
    def app(self) -> ApplicationSettings:
        """Get application settings."""
        return ApplicationSettings(
            ENVIRONMENT=self.ENVIRONMENT,
            APP_NAME=self.APP_NAME,
            APP_VERSION=self.APP_VERSION,
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"  # Ignore extra environment variables
    )


# Global settings instance (lazy)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance.

    STAGE-0.3: Settings initialization

    Only configuration is shared this way; quota and cache state are owned by
    each gateway instance.
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reload_settings() -> Settings:
    """
    Reload settings (useful for testing).

    Returns:
        Settings: New settings instance
    """
    global _settings
    _settings = Settings()
    return _settings
