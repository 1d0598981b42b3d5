"""
Test configuration and shared fixtures for the cent test suite.

Environment variables are set before any cent module loads configuration.
"""

# pylint: disable=redefined-outer-name

import os

import pytest
import pytest_asyncio

os.environ.setdefault("LOGGING_ENVIRONMENT", "unit_test")
os.environ.setdefault("NATS_URL", "nats://localhost:4222")
os.environ.setdefault("CENT_QUEUE_GROUP", "cent-test")

from cent.config import AppConfig, GatewayConfig  # noqa: E402
from cent.gateway import CentGateway  # noqa: E402
from cent.rpc.dispatcher import RPCDispatcher  # noqa: E402
from cent.rpc.operations import build_registry  # noqa: E402
from cent.tests.fixtures.fake_provider import FakePaymentProvider  # noqa: E402
from cent.tests.fixtures.in_memory_broker import InMemoryBroker, InMemoryBus  # noqa: E402


@pytest.fixture
def provider():
    """Provide a seeded fake payment provider."""
    fake = FakePaymentProvider()
    fake.seed()
    return fake


@pytest.fixture
def bus():
    """Provide a shared in-memory bus."""
    return InMemoryBus()


@pytest_asyncio.fixture
async def broker(bus):
    """Provide a connected in-memory broker on the shared bus."""
    instance = InMemoryBroker(bus)
    await instance.connect()
    yield instance
    await instance.disconnect()


@pytest.fixture
def registry(provider):
    """Provide the full operation registry bound to the fake provider."""
    return build_registry(provider)


@pytest.fixture
def dispatcher(registry):
    """Provide a dispatcher over the full registry."""
    return RPCDispatcher(registry)


@pytest.fixture
def app_config():
    """Provide configuration with a short drain and core-NATS events."""
    return AppConfig(gateway=GatewayConfig(queue_group="cent-test", drain_timeout=1.0, durable_events=False))


@pytest_asyncio.fixture
async def gateway(provider, bus, app_config):
    """Provide a started gateway serving the fake provider on the shared bus."""
    instance = CentGateway(provider, config=app_config, broker=InMemoryBroker(bus))
    await instance.start()
    yield instance
    await instance.stop()
