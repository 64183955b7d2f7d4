#!/usr/bin/env python3
"""
Centralized Configuration Module using Pydantic Settings

This module provides type-safe, environment-based configuration for the cache
facade. The facade itself only reads these values; loading and validation
happen here.

Architectural Decision: Pydantic Settings for type safety and validation
- Environment variable loading with .env support
- Type validation at startup (fail fast on misconfiguration)
- Easy testing with override mechanisms
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cache_facade.core.config.constants import DEFAULT_SCAN_COUNT


class RedisSettings(BaseSettings):
    """
    Redis connection configuration.

    Connection pooling:
    - Max connections: 50 by default
    - Health checks: every 30s
    - Socket timeouts: 5s (timeouts are enforced here, not by the facade)
    """

    REDIS_HOST: str = Field(default="localhost", description="Redis server host")
    REDIS_PORT: int = Field(default=6379, description="Redis server port")
    REDIS_DB: int = Field(default=0, description="Redis database number")
    REDIS_PASSWORD: str | None = Field(default=None, description="Redis password (if required)")

    REDIS_MAX_CONNECTIONS: int = Field(default=50, description="Maximum total connections")
    REDIS_SOCKET_TIMEOUT: int = Field(default=5, description="Socket timeout in seconds")
    REDIS_SOCKET_CONNECT_TIMEOUT: int = Field(default=5, description="Connection timeout in seconds")
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(default=30, description="Health check interval in seconds")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class CacheSettings(BaseSettings):
    """
    Facade behavior configuration.

    These are captured once when the facade is constructed.
    """

    CACHE_KEY_PREFIX: str = Field(default="", description="Namespace prefix for every physical key")
    CACHE_DEFAULT_TTL: int | None = Field(default=None, description="Default TTL in seconds (None = no expiry)")
    CACHE_FIRE_AND_FORGET: bool = Field(default=False, description="Default execution mode for writes/deletes")
    CACHE_DEBUG: bool = Field(default=False, description="Log every cache operation at debug level")
    CACHE_SCAN_COUNT: int = Field(default=DEFAULT_SCAN_COUNT, description="SCAN COUNT hint per round")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class LoggingSettings(BaseSettings):
    """
    Logging configuration for structured logging.

    Architectural Decision: structlog for production-grade logging
    """

    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class Settings(BaseSettings):
    """
    Main settings class that aggregates all configuration sections.

    Usage:
        from cache_facade.core.config.settings import get_settings

        settings = get_settings()
        redis_host = settings.redis.REDIS_HOST
        prefix = settings.cache.CACHE_KEY_PREFIX
    """

    # Redis settings
    REDIS_HOST: str = Field(default="localhost", description="Redis server host")
    REDIS_PORT: int = Field(default=6379, description="Redis server port")
    REDIS_DB: int = Field(default=0, description="Redis database number")
    REDIS_PASSWORD: str | None = Field(default=None, description="Redis password (if required)")
    REDIS_MAX_CONNECTIONS: int = Field(default=50, description="Maximum total connections")
    REDIS_SOCKET_TIMEOUT: int = Field(default=5, description="Socket timeout in seconds")
    REDIS_SOCKET_CONNECT_TIMEOUT: int = Field(default=5, description="Connection timeout in seconds")
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(default=30, description="Health check interval in seconds")

    # Cache facade settings
    CACHE_KEY_PREFIX: str = Field(default="", description="Namespace prefix for every physical key")
    CACHE_DEFAULT_TTL: int | None = Field(default=None, description="Default TTL in seconds (None = no expiry)")
    CACHE_FIRE_AND_FORGET: bool = Field(default=False, description="Default execution mode for writes/deletes")
    CACHE_DEBUG: bool = Field(default=False, description="Log every cache operation at debug level")
    CACHE_SCAN_COUNT: int = Field(default=DEFAULT_SCAN_COUNT, description="SCAN COUNT hint per round")

    # Logging settings
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @field_validator("CACHE_DEFAULT_TTL")
    @classmethod
    def validate_default_ttl(cls, v):
        """A default TTL, when given, must be a positive number of seconds."""
        if v is not None and v <= 0:
            raise ValueError("CACHE_DEFAULT_TTL must be a positive number of seconds")
        return v

    @field_validator("CACHE_SCAN_COUNT")
    @classmethod
    def validate_scan_count(cls, v):
        """Validate SCAN COUNT hint."""
        if v <= 0:
            raise ValueError("CACHE_SCAN_COUNT must be positive")
        return v

    # Nested configuration objects
    @property
    def redis(self) -> RedisSettings:
        """Get Redis settings."""
        return RedisSettings(
            REDIS_HOST=self.REDIS_HOST,
            REDIS_PORT=self.REDIS_PORT,
            REDIS_DB=self.REDIS_DB,
            REDIS_PASSWORD=self.REDIS_PASSWORD,
            REDIS_MAX_CONNECTIONS=self.REDIS_MAX_CONNECTIONS,
            REDIS_SOCKET_TIMEOUT=self.REDIS_SOCKET_TIMEOUT,
            REDIS_SOCKET_CONNECT_TIMEOUT=self.REDIS_SOCKET_CONNECT_TIMEOUT,
            REDIS_HEALTH_CHECK_INTERVAL=self.REDIS_HEALTH_CHECK_INTERVAL,
        )

    @property
    def cache(self) -> CacheSettings:
        """Get cache facade settings."""
        return CacheSettings(
            CACHE_KEY_PREFIX=self.CACHE_KEY_PREFIX,
            CACHE_DEFAULT_TTL=self.CACHE_DEFAULT_TTL,
            CACHE_FIRE_AND_FORGET=self.CACHE_FIRE_AND_FORGET,
            CACHE_DEBUG=self.CACHE_DEBUG,
            CACHE_SCAN_COUNT=self.CACHE_SCAN_COUNT,
        )

    @property
    def logging(self) -> LoggingSettings:
        """Get logging settings."""
        return LoggingSettings(
            LOG_LEVEL=self.LOG_LEVEL,
            LOG_FORMAT=self.LOG_FORMAT,
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Ignore extra environment variables
    )


# Global settings instance (singleton pattern)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).

    Returns:
        Settings: Global settings instance
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
