"""
Configuration module for the cent gateway.

Usage:
    from cent.config import get_config

    config = get_config()
    logger.info("Gateway configuration", queue_group=config.gateway.queue_group)
"""

import sys
import threading
from functools import lru_cache
from os import getenv

from .models import AppConfig, GatewayConfig, LoggingConfig, NATSConfig

__all__ = ["AppConfig", "GatewayConfig", "LoggingConfig", "NATSConfig", "get_config", "reset_config"]

_config_lock = threading.Lock()


def _is_test_mode() -> bool:
    """Detect pytest so tests always see a fresh configuration."""
    return "pytest" in sys.modules or bool(getenv("PYTEST_CURRENT_TEST"))


@lru_cache(maxsize=1)
def _get_config_cached() -> AppConfig:
    """Production config loader with caching."""
    with _config_lock:
        return AppConfig()


def get_config() -> AppConfig:
    """
    Get application configuration (singleton in production, fresh in tests).

    Configuration is loaded from environment variables and the .env file.

    Returns:
        AppConfig: The application configuration

    Raises:
        ValidationError: If configuration is invalid
    """
    if _is_test_mode():
        return AppConfig()
    return _get_config_cached()


def reset_config() -> None:
    """Reset the configuration cache so the next get_config() reloads the environment."""
    with _config_lock:
        _get_config_cached.cache_clear()
