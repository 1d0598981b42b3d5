"""
Enhanced structlog-based logging configuration for the cent gateway.

This module provides the structured logging setup shared by every component:
context variables (MDC) for per-message subject and request ids, sanitization
of payment-processor credentials, and console or rotating file output.
"""

import json
import logging
import os
import sys
import threading
import uuid
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.contextvars import (
    bind_contextvars,
    clear_contextvars,
    merge_contextvars,
)
from structlog.stdlib import BoundLogger, LoggerFactory

VALID_ENVIRONMENTS = ["local", "unit_test", "production"]

_LOGGING_INITIALIZED = False
_LOGGING_SIGNATURE: str | None = None
_setup_lock = threading.Lock()


def detect_environment() -> str:
    """
    Detect the current environment based on various indicators.

    Returns:
        Environment name: "unit_test", "local", or "production"
    """
    if "pytest" in sys.modules or "pytest" in sys.argv[0]:
        return "unit_test"

    env = os.getenv("CENT_ENV")
    if env and env in VALID_ENVIRONMENTS:
        return env

    logging_env = os.getenv("LOGGING_ENVIRONMENT", "")
    if logging_env in VALID_ENVIRONMENTS:
        return logging_env

    return "local"


def sanitize_sensitive_data(_logger: Any, _name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Remove sensitive data from log entries.

    Stripe API keys, webhook secrets and connection credentials must never
    reach a log sink, so any key that looks like one is redacted.

    Args:
        _logger: Logger instance (unused)
        _name: Logger name (unused)
        event_dict: Event dictionary to sanitize

    Returns:
        Sanitized event dictionary
    """
    sensitive_keys = [
        "password",
        "token",
        "secret",
        "api_key",
        "private_key",
        "credential",
        "authorization",
        "connection_string",
    ]

    def sanitize_dict(d: dict[str, Any]) -> dict[str, Any]:
        """Recursively sanitize dictionary values."""
        sanitized: dict[str, Any] = {}
        for key, value in d.items():
            if isinstance(value, dict):
                sanitized[key] = sanitize_dict(value)
            elif isinstance(key, str) and any(sensitive in key.lower() for sensitive in sensitive_keys):
                sanitized[key] = "[REDACTED]"
            else:
                sanitized[key] = value
        return sanitized

    return sanitize_dict(event_dict)


def _select_renderer(log_format: str) -> Any:
    """Pick the final structlog renderer for the configured format."""
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    if log_format == "colored":
        return structlog.dev.ConsoleRenderer(colors=True)
    return structlog.processors.KeyValueRenderer(key_order=["timestamp", "level", "event"])


def configure_enhanced_structlog(
    environment: str | None = None,
    log_level: str = "INFO",
    log_format: str = "human",
) -> None:
    """
    Configure Structlog with MDC and security processors.

    Args:
        environment: Environment name (auto-detected if None)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: Output format ("json", "human" or "colored")
    """
    if environment is None:
        environment = detect_environment()

    processors = [
        # Security first - sanitize sensitive data
        sanitize_sensitive_data,
        # Merge context variables (MDC)
        merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        _select_renderer(log_format),
    ]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=BoundLogger,
        cache_logger_on_first_use=False,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, str(log_level).upper(), logging.INFO))


def _parse_max_bytes(max_size: str | int) -> int:
    """Convert a size such as "100MB" into bytes."""
    if not isinstance(max_size, str):
        return max_size
    if max_size.endswith("MB"):
        return int(max_size[:-2]) * 1024 * 1024
    if max_size.endswith("KB"):
        return int(max_size[:-2]) * 1024
    if max_size.endswith("B"):
        return int(max_size[:-1])
    return int(max_size)


def _setup_handlers(environment: str, log_config: dict[str, Any], log_level: str) -> None:
    """Attach a console handler and, when configured, a rotating file handler to the root logger."""
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    level = getattr(logging, str(log_level).upper(), logging.INFO)
    formatter = logging.Formatter("%(message)s")

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    log_file = log_config.get("log_file")
    if log_file:
        log_path = Path(log_config.get("log_base", "logs")) / environment / log_file
        log_path.parent.mkdir(parents=True, exist_ok=True)
        rotation = log_config.get("rotation", {})
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=_parse_max_bytes(rotation.get("max_size", "100MB")),
            backupCount=rotation.get("backup_count", 5),
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def setup_enhanced_logging(config: dict[str, Any], *, force_reconfigure: bool = False) -> None:
    """
    Set up logging for the gateway process.

    Args:
        config: Logging configuration dictionary (see LoggingConfig.to_dict)
        force_reconfigure: When True, tear down existing handlers before reconfiguring
    """
    global _LOGGING_INITIALIZED  # pylint: disable=global-statement
    global _LOGGING_SIGNATURE  # pylint: disable=global-statement

    config_signature = json.dumps(config, sort_keys=True, default=str)

    with _setup_lock:
        if _LOGGING_INITIALIZED and not force_reconfigure:
            get_logger("cent.logging.setup").debug(
                "setup_enhanced_logging skipped; logging system already initialized",
                config_signature=_LOGGING_SIGNATURE,
            )
            return

        environment = config.get("environment") or detect_environment()
        log_level = config.get("level", "INFO")
        log_format = config.get("format", "human")

        if config.get("disable_logging", False):
            configure_enhanced_structlog(environment, "CRITICAL", log_format)
            logging.disable(logging.CRITICAL)
        else:
            logging.disable(logging.NOTSET)
            _setup_handlers(environment, config, log_level)
            configure_enhanced_structlog(environment, log_level, log_format)

        _LOGGING_INITIALIZED = True
        _LOGGING_SIGNATURE = config_signature

    get_logger("cent.logging.enhanced").info(
        "Logging system initialized",
        environment=environment,
        log_level=log_level,
        log_format=log_format,
    )


def bind_request_context(
    subject: str | None = None,
    request_id: str | None = None,
    **kwargs: Any,
) -> str:
    """
    Bind request context to the current logging context.

    Every log entry emitted by the current task afterwards carries the
    subject and request id. asyncio copies the context per task, so bindings
    made while handling one message never leak into another.

    Args:
        subject: Subject of the message being handled
        request_id: Request ID (generated when omitted)
        **kwargs: Additional context variables

    Returns:
        The request ID that was bound
    """
    if request_id is None:
        request_id = str(uuid.uuid4())

    context_vars = {"subject": subject, "request_id": request_id, **kwargs}
    bind_contextvars(**{k: v for k, v in context_vars.items() if v is not None})
    return request_id


def clear_request_context() -> None:
    """Clear the current request context from logging."""
    clear_contextvars()


def get_current_context() -> dict[str, Any]:
    """Get the current logging context."""
    return structlog.contextvars.get_contextvars()


def get_logger(name: str) -> Any:  # Returns BoundLogger but typed as Any for flexibility
    """
    Get a Structlog logger with the specified name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured Structlog logger instance
    """
    return structlog.get_logger(name)


__all__ = [
    "BoundLogger",
    "bind_request_context",
    "clear_request_context",
    "configure_enhanced_structlog",
    "detect_environment",
    "get_current_context",
    "get_logger",
    "sanitize_sensitive_data",
    "setup_enhanced_logging",
]
