"""
Gateway server lifecycle.

A CentGateway owns one broker connection, one operation registry bound to the
domain provider, the dispatcher and queue-group subscriptions serving it, and
the event forwarder attached to the same provider.
"""

import asyncio

from .config import AppConfig, get_config
from .domain.provider import PaymentProvider
from .events.forwarder import EventForwarder
from .infrastructure.message_broker import MessageBroker
from .infrastructure.nats_broker import NATSMessageBroker
from .logging.enhanced_logging_config import get_logger, setup_enhanced_logging
from .rpc.dispatcher import RPCDispatcher
from .rpc.operations import build_registry
from .rpc.subscriber import QueueGroupSubscriber

logger = get_logger(__name__)


class CentGateway:
    """
    Serves the command table over a broker and forwards provider events.

    Any number of gateways may run against the same queue group; each
    command is handled by exactly one of them, while events are published
    by whichever instance observed the provider change.
    """

    def __init__(
        self,
        provider: PaymentProvider,
        config: AppConfig | None = None,
        broker: MessageBroker | None = None,
    ):
        """
        Initialize the gateway.

        Args:
            provider: Domain provider serving the operations
            config: Application configuration (loaded from the environment if None)
            broker: Message broker (a NATSMessageBroker built from config if None)

        Raises:
            DuplicateSubjectError: If the command table is inconsistent
        """
        self.config = config or get_config()
        self.provider = provider
        self.broker = broker or NATSMessageBroker(self.config.nats)
        self.registry = build_registry(provider)
        self.dispatcher = RPCDispatcher(self.registry)
        self.subscriber = QueueGroupSubscriber(self.broker, self.config.gateway.queue_group)
        self.forwarder = EventForwarder(self.broker, durable=self.config.gateway.durable_events)
        self._events_attached = False
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """
        Connect, attach event forwarding and bind every command subject.

        Raises:
            ConnectionError: If the broker cannot be reached
            SubscribeError: If a subject cannot be bound
        """
        if self._running:
            logger.warning("Gateway already running")
            return

        await self.broker.connect()

        if not self._events_attached:
            self.forwarder.attach(self.provider)
            self._events_attached = True

        await self.subscriber.bind_registry(self.registry, self.dispatcher)
        self._running = True
        logger.info(
            "Gateway started",
            queue_group=self.config.gateway.queue_group,
            operations=len(self.registry),
        )

    async def stop(self) -> None:
        """Stop taking commands, flush pending events and disconnect, each bounded by drain_timeout."""
        if not self._running:
            return

        self._running = False
        await self.subscriber.unbind_all()
        await self.forwarder.flush(timeout=self.config.gateway.drain_timeout)
        await self.broker.disconnect(timeout=self.config.gateway.drain_timeout)
        logger.info("Gateway stopped")

    async def __aenter__(self) -> "CentGateway":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()


async def serve(
    provider: PaymentProvider,
    config: AppConfig | None = None,
    stop_event: asyncio.Event | None = None,
) -> None:
    """
    Configure logging and run a gateway until ``stop_event`` is set or the task is cancelled.

    Args:
        provider: Domain provider serving the operations
        config: Application configuration (loaded from the environment if None)
        stop_event: Event that ends the gateway when set
    """
    config = config or get_config()
    setup_enhanced_logging(config.logging.to_dict())
    stop_event = stop_event or asyncio.Event()

    async with CentGateway(provider, config):
        await stop_event.wait()
