"""
Pydantic-based configuration models for the cent gateway.

Each concern gets its own BaseSettings model with an environment prefix;
AppConfig aggregates them and additionally reads a .env file.
"""

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from ..logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)


class NATSConfig(BaseSettings):
    """NATS messaging configuration."""

    url: str = Field(default="nats://localhost:4222", description="NATS server URL")
    name: str = Field(default="cent", description="Client connection name reported to the server")
    reconnect_time_wait: int = Field(default=2, description="Reconnect wait time in seconds")
    max_reconnect_attempts: int = Field(default=60, description="Maximum reconnection attempts")
    connect_timeout: int = Field(default=2, description="Connection timeout in seconds")
    ping_interval: int = Field(default=120, description="Ping interval in seconds")
    max_outstanding_pings: int = Field(default=2, description="Maximum outstanding pings")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate the URL uses a NATS scheme."""
        if not v.startswith(("nats://", "tls://")):
            logger.error("Invalid NATS URL scheme", url=v, expected_schemes=["nats://", "tls://"])
            raise ValueError("NATS URL must start with 'nats://' or 'tls://'")
        return v

    @field_validator("connect_timeout", "ping_interval", "reconnect_time_wait")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate value is positive."""
        if v <= 0:
            raise ValueError("Value must be positive")
        return v

    model_config = {"env_prefix": "NATS_", "case_sensitive": False, "extra": "ignore"}


class GatewayConfig(BaseSettings):
    """RPC gateway configuration shared by all cooperating instances."""

    queue_group: str = Field(default="cent", description="Queue group shared by all gateway instances")
    request_timeout: float = Field(default=5.0, description="Default client request timeout in seconds")
    durable_events: bool = Field(default=True, description="Publish domain events through JetStream")
    drain_timeout: float = Field(default=10.0, description="Seconds to wait for in-flight work on shutdown")

    @field_validator("queue_group")
    @classmethod
    def validate_queue_group(cls, v: str) -> str:
        """Validate the queue group is a single non-empty token."""
        if not v or any(ch.isspace() for ch in v):
            raise ValueError("Queue group must be non-empty and contain no whitespace")
        return v

    @field_validator("request_timeout", "drain_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate timeouts are positive."""
        if v <= 0:
            raise ValueError("Timeout must be positive")
        return v

    model_config = {"env_prefix": "CENT_", "case_sensitive": False, "extra": "ignore"}


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    environment: str = Field(default="local", description="Logging environment")
    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="human", description="Log format")
    log_base: str = Field(default="logs", description="Base log directory")
    log_file: str | None = Field(default=None, description="Log file name; console only when unset")
    rotation_max_size: str = Field(default="100MB", description="Log rotation max size")
    rotation_backup_count: int = Field(default=5, description="Number of backup log files")
    disable_logging: bool = Field(default=False, description="Disable all logging")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate logging environment."""
        valid_environments = ["local", "unit_test", "production"]
        if v not in valid_environments:
            raise ValueError(f"Environment must be one of {valid_environments}, got '{v}'")
        return v

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}, got '{v}'")
        return v_upper

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format."""
        valid_formats = ["json", "human", "colored"]
        if v not in valid_formats:
            raise ValueError(f"Log format must be one of {valid_formats}, got '{v}'")
        return v

    model_config = {"env_prefix": "LOGGING_", "case_sensitive": False, "extra": "ignore"}

    def to_dict(self) -> dict[str, Any]:
        """Convert to the dict shape consumed by setup_enhanced_logging."""
        return {
            "environment": self.environment,
            "level": self.level,
            "format": self.format,
            "log_base": self.log_base,
            "log_file": self.log_file,
            "rotation": {
                "max_size": self.rotation_max_size,
                "backup_count": self.rotation_backup_count,
            },
            "disable_logging": self.disable_logging,
        }


class AppConfig(BaseSettings):
    """
    Composite application configuration.

    Access via get_config() rather than constructing directly.
    """

    nats: NATSConfig = Field(default_factory=NATSConfig)
    gateway: GatewayConfig = Field(default_factory=GatewayConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "case_sensitive": False, "extra": "ignore"}
