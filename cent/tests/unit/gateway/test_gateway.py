"""
Tests for the gateway lifecycle.

A started gateway serves every command subject under its queue group and
forwards provider events; stopping it releases subscriptions and flushes
pending event publishes.
"""

# pylint: disable=redefined-outer-name,protected-access

import asyncio
from unittest.mock import patch

import pytest

from cent.client import CentClient
from cent.config import AppConfig, GatewayConfig
from cent.domain.models import Customer, SubscriptionUser
from cent.gateway import CentGateway, serve
from cent.infrastructure.message_broker import RequestTimeoutError
from cent.protocol import subjects
from cent.rpc.operations import OPERATIONS
from cent.tests.fixtures.in_memory_broker import InMemoryBroker


class TestLifecycle:
    """Test start and stop."""

    @pytest.mark.asyncio
    async def test_start_binds_all_subjects(self, gateway, bus):
        """Test a started gateway subscribes every command subject in its group."""
        assert gateway.running
        assert len(bus.subscriptions) == len(OPERATIONS)
        assert {sub.queue_group for sub in bus.subscriptions.values()} == {"cent-test"}

    @pytest.mark.asyncio
    async def test_double_start_is_noop(self, gateway, bus):
        """Test starting twice does not duplicate subscriptions."""
        await gateway.start()

        assert len(bus.subscriptions) == len(OPERATIONS)

    @pytest.mark.asyncio
    async def test_stop_releases_everything(self, provider, bus, app_config):
        """Test stop unbinds subjects and disconnects the broker."""
        gateway = CentGateway(provider, config=app_config, broker=InMemoryBroker(bus))
        await gateway.start()

        await gateway.stop()

        assert not gateway.running
        assert not bus.subscriptions
        assert not gateway.broker.is_connected()

    @pytest.mark.asyncio
    async def test_restart_does_not_double_forward(self, provider, bus, app_config):
        """Test event handlers are attached only once across restarts."""
        gateway = CentGateway(provider, config=app_config, broker=InMemoryBroker(bus))
        await gateway.start()
        await gateway.stop()
        await gateway.start()

        assert len(provider.callbacks["customer_added"]) == 1
        await gateway.stop()

    @pytest.mark.asyncio
    async def test_context_manager(self, provider, bus, app_config):
        """Test async with starts and stops the gateway."""
        async with CentGateway(provider, config=app_config, broker=InMemoryBroker(bus)) as gateway:
            assert gateway.running

        assert not gateway.running

    @pytest.mark.asyncio
    async def test_stop_is_bounded_by_drain_timeout(self, provider, bus, broker, monkeypatch):
        """Test stop returns even when a command handler never finishes."""

        async def stuck():
            await asyncio.Event().wait()

        monkeypatch.setattr(provider, "sync", stuck)
        config = AppConfig(gateway=GatewayConfig(queue_group="cent-test", drain_timeout=0.1, durable_events=False))
        gateway = CentGateway(provider, config=config, broker=InMemoryBroker(bus))
        await gateway.start()
        with pytest.raises(RequestTimeoutError):
            await CentClient(broker, timeout=0.05).sync()

        await asyncio.wait_for(gateway.stop(), timeout=2.0)

        assert not gateway.running
        assert not gateway.broker.is_connected()


class TestEventsWithCommands:
    """Test commands and the events they cause."""

    @pytest.mark.asyncio
    async def test_seat_add_publishes_event(self, gateway, broker, bus):
        """Test a seat added over RPC is forwarded as an event."""
        client = CentClient(broker, timeout=1.0)

        await client.add_subscription_user(SubscriptionUser(subscription_id=7, username="barbara"))
        await gateway.forwarder.flush(timeout=1.0)

        assert bus.published_subjects() == [subjects.SUBJ_SUBSCRIPTION_USER_ADDED]

    @pytest.mark.asyncio
    async def test_publish_failure_does_not_fail_command(self, gateway, broker, bus):
        """Test the command succeeds even when its event cannot be published."""
        gateway.broker.fail_publish_on.add(subjects.SUBJ_CUSTOMER_ADDED)
        client = CentClient(broker, timeout=1.0)

        await client.add_customer(Customer(id=99, name="Barbara"))
        await gateway.forwarder.flush(timeout=1.0)

        assert not bus.published
        assert (await client.get_customer_by_id(99)).name == "Barbara"

    @pytest.mark.asyncio
    async def test_two_gateways_share_queue_group(self, gateway, provider, bus, broker, app_config):
        """Test two instances in one group handle each command exactly once."""
        second = CentGateway(provider, config=app_config, broker=InMemoryBroker(bus))
        await second.start()
        client = CentClient(broker, timeout=1.0)

        for _ in range(4):
            await client.sync()

        assert sum(1 for call, _ in provider.calls if call == "sync") == 4
        await second.stop()
        assert gateway.running


class TestServe:
    """Test the serve entry point."""

    @pytest.mark.asyncio
    async def test_serve_until_stopped(self, provider, bus, app_config):
        """Test serve runs the gateway until the stop event is set."""
        stop = asyncio.Event()

        with (
            patch("cent.gateway.setup_enhanced_logging") as mock_setup,
            patch("cent.gateway.NATSMessageBroker", side_effect=lambda _config: InMemoryBroker(bus)),
        ):
            task = asyncio.create_task(serve(provider, app_config, stop))
            while not bus.subscriptions:
                await asyncio.sleep(0.01)

            stop.set()
            await asyncio.wait_for(task, timeout=1.0)

        mock_setup.assert_called_once_with(app_config.logging.to_dict())
        assert not bus.subscriptions
