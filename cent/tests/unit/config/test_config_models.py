"""
Tests for configuration models.

Values come from environment variables under each model's prefix; invalid
values are rejected at load time.
"""

import pytest
from pydantic import ValidationError

from cent.config import AppConfig, GatewayConfig, LoggingConfig, NATSConfig, get_config, reset_config


class TestNATSConfig:
    """Test NATS connection settings."""

    def test_defaults(self, monkeypatch):
        """Test defaults point at a local server."""
        monkeypatch.delenv("NATS_URL", raising=False)

        config = NATSConfig()

        assert config.url == "nats://localhost:4222"
        assert config.max_reconnect_attempts == 60

    def test_env_prefix(self, monkeypatch):
        """Test NATS_ variables override defaults."""
        monkeypatch.setenv("NATS_URL", "tls://nats.internal:4443")
        monkeypatch.setenv("NATS_CONNECT_TIMEOUT", "5")

        config = NATSConfig()

        assert config.url == "tls://nats.internal:4443"
        assert config.connect_timeout == 5

    @pytest.mark.parametrize("url", ["http://localhost:4222", "localhost:4222", ""])
    def test_invalid_url(self, url):
        """Test non-NATS URLs are rejected."""
        with pytest.raises(ValidationError):
            NATSConfig(url=url)

    def test_non_positive_timeout(self):
        """Test timeouts must be positive."""
        with pytest.raises(ValidationError):
            NATSConfig(connect_timeout=0)


class TestGatewayConfig:
    """Test gateway settings."""

    def test_env_prefix(self, monkeypatch):
        """Test CENT_ variables override defaults."""
        monkeypatch.setenv("CENT_QUEUE_GROUP", "billing")
        monkeypatch.setenv("CENT_DURABLE_EVENTS", "false")

        config = GatewayConfig()

        assert config.queue_group == "billing"
        assert config.durable_events is False

    @pytest.mark.parametrize("queue_group", ["", "two words", "tab\tbed"])
    def test_invalid_queue_group(self, queue_group):
        """Test the queue group must be a single token."""
        with pytest.raises(ValidationError):
            GatewayConfig(queue_group=queue_group)

    def test_invalid_timeouts(self):
        """Test request and drain timeouts must be positive."""
        with pytest.raises(ValidationError):
            GatewayConfig(request_timeout=0)
        with pytest.raises(ValidationError):
            GatewayConfig(drain_timeout=-1)


class TestLoggingConfig:
    """Test logging settings."""

    def test_level_is_normalized(self):
        """Test log levels are upper-cased."""
        assert LoggingConfig(level="debug").level == "DEBUG"

    @pytest.mark.parametrize(
        "kwargs", [{"level": "LOUD"}, {"format": "xml"}, {"environment": "staging"}]
    )
    def test_invalid_values(self, kwargs):
        """Test unknown levels, formats and environments are rejected."""
        with pytest.raises(ValidationError):
            LoggingConfig(**kwargs)

    def test_to_dict(self):
        """Test the dict consumed by logging setup."""
        data = LoggingConfig(log_file="gateway.log", rotation_backup_count=2).to_dict()

        assert data["log_file"] == "gateway.log"
        assert data["rotation"] == {"max_size": "100MB", "backup_count": 2}


class TestGetConfig:
    """Test the configuration accessor."""

    def test_fresh_instance_in_tests(self):
        """Test each call under pytest loads a new configuration."""
        reset_config()

        first = get_config()
        second = get_config()

        assert isinstance(first, AppConfig)
        assert first is not second

    def test_reads_environment(self, monkeypatch):
        """Test get_config reflects the current environment."""
        monkeypatch.setenv("CENT_REQUEST_TIMEOUT", "2.5")

        assert get_config().gateway.request_timeout == 2.5
