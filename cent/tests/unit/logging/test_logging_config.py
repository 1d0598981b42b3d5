"""
Tests for the structured logging configuration.

Covers credential redaction, per-message context binding and the rotating
file handler.
"""

import asyncio
import logging
from logging.handlers import RotatingFileHandler

import pytest

from cent.logging import enhanced_logging_config
from cent.logging.enhanced_logging_config import (
    _parse_max_bytes,
    bind_request_context,
    clear_request_context,
    detect_environment,
    get_current_context,
    get_logger,
    sanitize_sensitive_data,
    setup_enhanced_logging,
)


@pytest.fixture
def restore_logging(monkeypatch):
    """Undo logging setup performed by a test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    monkeypatch.setattr(enhanced_logging_config, "_LOGGING_INITIALIZED", False)
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
    logging.disable(logging.NOTSET)


class TestSanitizeSensitiveData:
    """Test redaction of credentials."""

    def test_sensitive_keys_redacted(self):
        """Test keys that look like secrets are replaced."""
        event = {"event": "charge", "stripe_api_key": "sk_live_x", "webhook_secret": "whsec_y", "amount": 900}

        result = sanitize_sensitive_data(None, "info", event)

        assert result["stripe_api_key"] == "[REDACTED]"
        assert result["webhook_secret"] == "[REDACTED]"
        assert result["amount"] == 900

    def test_nested_dicts_redacted(self):
        """Test redaction applies to nested dictionaries."""
        result = sanitize_sensitive_data(None, "info", {"nats": {"token": "t", "url": "nats://x"}})

        assert result["nats"] == {"token": "[REDACTED]", "url": "nats://x"}


class TestRequestContext:
    """Test per-message context binding."""

    def test_bind_and_clear(self):
        """Test the subject and generated request id are bound, then cleared."""
        request_id = bind_request_context(subject="cent.sync")

        context = get_current_context()
        assert context["subject"] == "cent.sync"
        assert context["request_id"] == request_id

        clear_request_context()
        assert "subject" not in get_current_context()

    @pytest.mark.asyncio
    async def test_context_isolated_per_task(self):
        """Test bindings made in one task are not seen by another."""

        async def handle(subject):
            bind_request_context(subject=subject)
            await asyncio.sleep(0)
            return get_current_context()["subject"]

        results = await asyncio.gather(handle("cent.a"), handle("cent.b"))

        assert results == ["cent.a", "cent.b"]


class TestSetup:
    """Test logging setup."""

    def test_detect_environment_under_pytest(self):
        """Test the test runner is detected."""
        assert detect_environment() == "unit_test"

    @pytest.mark.parametrize(("size", "expected"), [("100MB", 104857600), ("5KB", 5120), ("10B", 10), (2048, 2048)])
    def test_parse_max_bytes(self, size, expected):
        """Test rotation sizes are converted to bytes."""
        assert _parse_max_bytes(size) == expected

    @pytest.mark.usefixtures("restore_logging")
    def test_file_handler(self, tmp_path):
        """Test a rotating file handler is added under log_base/environment."""
        setup_enhanced_logging(
            {
                "environment": "unit_test",
                "level": "DEBUG",
                "format": "json",
                "log_base": str(tmp_path),
                "log_file": "gateway.log",
                "rotation": {"max_size": "1MB", "backup_count": 2},
            }
        )
        get_logger("cent.test").info("hello", stripe_api_key="sk_test")

        handlers = [h for h in logging.getLogger().handlers if isinstance(h, RotatingFileHandler)]
        assert len(handlers) == 1
        handlers[0].flush()
        content = (tmp_path / "unit_test" / "gateway.log").read_text(encoding="utf-8")
        assert "hello" in content
        assert "sk_test" not in content

    @pytest.mark.usefixtures("restore_logging")
    def test_second_setup_is_skipped(self):
        """Test setup is idempotent unless forced."""
        setup_enhanced_logging({"environment": "unit_test", "level": "INFO"})
        setup_enhanced_logging({"environment": "unit_test", "level": "DEBUG"})

        assert logging.getLogger().level == logging.INFO

        setup_enhanced_logging({"environment": "unit_test", "level": "DEBUG"}, force_reconfigure=True)
        assert logging.getLogger().level == logging.DEBUG
