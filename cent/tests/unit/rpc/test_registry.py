"""
Tests for the operation registry.

The registry rejects duplicate subjects, event subjects and malformed
subjects at registration time, so a bad command table fails at startup.
"""

import pytest

from cent.exceptions import DuplicateSubjectError, InvalidSubjectError, RegistryError
from cent.rpc.registry import OperationRegistry


async def handle_sync(_data: bytes) -> bytes | None:
    return None


class TestOperationRegistry:
    """Test OperationRegistry registration and lookup."""

    def test_register_and_lookup(self):
        """Test a registered handler is returned for its subject."""
        registry = OperationRegistry()
        registry.register("cent.sync", handle_sync)

        assert registry.lookup("cent.sync") is handle_sync
        assert "cent.sync" in registry
        assert len(registry) == 1

    def test_lookup_unknown_returns_none(self):
        """Test lookup of an unregistered subject returns None."""
        assert OperationRegistry().lookup("cent.nope") is None

    def test_duplicate_subject_rejected(self):
        """Test registering a subject twice raises."""
        registry = OperationRegistry()
        registry.register("cent.sync", handle_sync)

        with pytest.raises(DuplicateSubjectError) as exc_info:
            registry.register("cent.sync", handle_sync)

        assert exc_info.value.subject == "cent.sync"
        assert isinstance(exc_info.value, RegistryError)

    def test_event_subject_rejected(self):
        """Test event subjects cannot be served as commands."""
        with pytest.raises(InvalidSubjectError):
            OperationRegistry().register("cent.customer.added", handle_sync)

    @pytest.mark.parametrize("subject", ["", "cent.*", "cent..sync", "cent.>"])
    def test_malformed_subject_rejected(self, subject):
        """Test wildcard and empty-token subjects are rejected."""
        with pytest.raises(InvalidSubjectError):
            OperationRegistry().register(subject, handle_sync)

    def test_subjects_sorted(self):
        """Test subjects() and iteration return subjects in sorted order."""
        registry = OperationRegistry()
        registry.register("cent.sync", handle_sync)
        registry.register("cent.checkout", handle_sync)

        assert registry.subjects() == ["cent.checkout", "cent.sync"]
        assert list(registry) == ["cent.checkout", "cent.sync"]
