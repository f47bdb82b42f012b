"""Configuration loading for the fanin aggregator.

This module provides centralized configuration management:
- Load settings from environment variables and .env files
- Validate configuration using pydantic
- Provide typed access to all settings
"""

from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment.

    Uses pydantic-settings for environment variable handling with
    .env file support via python-dotenv. List values are read from the
    environment as JSON, e.g. ``SERVICES='["Alpha", "Beta"]'``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Services to fan out to
    services: list[str] = Field(
        default=["Alpha", "Beta", "Gamma"],
        description="Identifiers of the simulated services",
    )
    failing_services: list[str] = Field(
        default=[],
        description="Services that always fail (must also be listed in services)",
    )
    service_min_latency_ms: int = Field(
        default=10,
        description="Lower bound of simulated service latency in milliseconds",
    )
    service_max_latency_ms: int = Field(
        default=200,
        description="Upper bound of simulated service latency in milliseconds",
    )

    # Aggregation
    policy: Literal["fail_fast", "fail_partial", "fail_soft", "completion_order"] = Field(
        default="fail_fast",
        description="Aggregation policy used in 'once' run mode",
    )
    messages: list[str] = Field(
        default=["hello"],
        description="One message shared by all services, or one per service",
    )
    fallback_value: str = Field(
        default="N/A",
        description="Substitute value for failed services under fail_soft",
    )
    result_timeout_seconds: float = Field(
        default=2.0,
        description="How long the caller waits for an aggregate result",
    )

    # Logging configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log format",
    )

    # Run mode
    run_mode: Literal["once", "cli"] = Field(
        default="once",
        description="Run mode",
    )

    # Development
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging",
    )

    @field_validator("services")
    @classmethod
    def validate_services(cls, v: list[str]) -> list[str]:
        """Ensure at least one service with non-blank names."""
        if not v:
            raise ValueError("services must not be empty")
        if any(not name.strip() for name in v):
            raise ValueError("service names must be non-empty")
        return v

    @field_validator("messages")
    @classmethod
    def validate_messages(cls, v: list[str]) -> list[str]:
        """Ensure at least one message."""
        if not v:
            raise ValueError("messages must not be empty")
        return v

    @field_validator("service_min_latency_ms", "service_max_latency_ms")
    @classmethod
    def validate_latency(cls, v: int) -> int:
        """Ensure latency bounds are non-negative."""
        if v < 0:
            raise ValueError("service latency must be non-negative")
        return v

    @field_validator("result_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Ensure the result timeout is positive."""
        if v <= 0:
            raise ValueError("result_timeout_seconds must be positive")
        return v

    @model_validator(mode="after")
    def validate_cross_fields(self) -> "Settings":
        """Check settings that depend on each other."""
        if self.service_min_latency_ms > self.service_max_latency_ms:
            raise ValueError(
                "service_min_latency_ms must not exceed service_max_latency_ms"
            )
        unknown = set(self.failing_services) - set(self.services)
        if unknown:
            raise ValueError(
                f"failing_services not listed in services: {sorted(unknown)}"
            )
        if len(self.messages) not in (1, len(self.services)):
            raise ValueError(
                "messages must hold one shared message or one per service"
            )
        return self

    def message_input(self) -> str | list[str]:
        """Messages in the form the aggregator accepts."""
        if len(self.messages) == 1:
            return self.messages[0]
        return list(self.messages)


def load_settings(env_file: str | None = None) -> Settings:
    """Load application settings from environment.

    Args:
        env_file: Optional path to .env file. If not provided,
                 uses the default .env in the current directory.

    Returns:
        Validated Settings instance.

    Raises:
        ValidationError: If settings validation fails.
    """
    if env_file:
        return Settings(_env_file=env_file)  # type: ignore[call-arg]
    return Settings()


__all__ = ["Settings", "load_settings"]
