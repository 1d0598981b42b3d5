"""
Event forwarder: domain provider callbacks -> published events.

Forwarding is best-effort. A callback serializes its event body, schedules a
single publishing task and returns at once, so the domain operation that
fired it never waits on the transport and never fails because of it.
"""

import asyncio
from collections.abc import Callable, Coroutine, Iterable
from typing import Any

from ..domain.provider import PaymentProvider
from ..infrastructure.message_broker import MessageBroker
from ..logging.enhanced_logging_config import get_logger
from ..protocol.envelope import encode_event
from .mappings import EVENT_MAPPINGS, EventMapping

logger = get_logger(__name__)

Publication = tuple[str, bytes]


class EventForwarder:
    """
    Republishes provider lifecycle events onto event subjects.

    The (event name, handler) pairs are built up front in ``handlers`` and
    registered with a provider by attach(), which makes the hookup easy to
    exercise against a test double.
    """

    def __init__(
        self,
        broker: MessageBroker,
        mappings: Iterable[EventMapping] = EVENT_MAPPINGS,
        durable: bool = True,
    ):
        """
        Initialize the forwarder.

        Args:
            broker: Broker used to publish events
            mappings: Event mapping table
            durable: Publish through JetStream rather than core NATS
        """
        self.broker = broker
        self.durable = durable
        self.handlers: list[tuple[str, Callable[..., None]]] = [
            (mapping.event, self._make_handler(mapping)) for mapping in mappings
        ]
        self._pending: set[asyncio.Task[None]] = set()
        self._loop: asyncio.AbstractEventLoop | None = None

    def attach(self, provider: PaymentProvider) -> None:
        """
        Register every handler with ``provider``.

        Must be called from the event loop that will run the publishes, or
        before it starts; callbacks fired from other threads are handed back
        to that loop.

        Raises:
            AttributeError: If the provider lacks an ``on_<event>`` setter
        """
        try:
            self._loop = asyncio.get_running_loop()
        except RuntimeError:
            self._loop = None

        for event, handler in self.handlers:
            register = getattr(provider, f"on_{event}")
            register(handler)
        logger.info("Event forwarding attached", events=len(self.handlers), durable=self.durable)

    async def flush(self, timeout: float | None = None) -> None:
        """
        Wait for scheduled publishes to finish.

        Args:
            timeout: Give up after this many seconds (None waits indefinitely)
        """
        if not self._pending:
            return
        _, still_pending = await asyncio.wait(list(self._pending), timeout=timeout)
        if still_pending:
            logger.warning("Event publishes still pending after flush", pending=len(still_pending))

    def _make_handler(self, mapping: EventMapping) -> Callable[..., None]:
        def handler(*args: Any) -> None:
            try:
                publications = self._publications(mapping, args)
            except Exception as e:  # pylint: disable=broad-exception-caught  # Reason: forwarding must never break the domain call
                logger.error(
                    "Failed to build event",
                    provider_event=mapping.event,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                return
            self._schedule(self._publish_all(mapping.event, publications))

        handler.__name__ = f"forward_{mapping.event}"
        return handler

    @staticmethod
    def _publications(mapping: EventMapping, args: tuple[Any, ...]) -> list[Publication]:
        """Serialize the body once and list the subjects to publish, primary first."""
        body = encode_event(mapping.payload(*args))
        event_subjects = list(mapping.subjects)
        if mapping.derive is not None:
            derived = mapping.derive(*args)
            if derived:
                event_subjects.append(derived)
        return [(subject, body) for subject in event_subjects]

    async def _publish_all(self, event: str, publications: list[Publication]) -> None:
        for subject, body in publications:
            try:
                await self.broker.publish(subject, body, durable=self.durable)
                logger.debug("Forwarded event", provider_event=event, event_subject=subject)
            except Exception as e:  # pylint: disable=broad-exception-caught  # Reason: best-effort forwarding
                logger.error(
                    "Failed to forward event",
                    provider_event=event,
                    event_subject=subject,
                    error=str(e),
                    error_type=type(e).__name__,
                )

    def _schedule(self, coro: Coroutine[Any, Any, None]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is not None:
            self._track(loop.create_task(coro))
        elif self._loop is not None and self._loop.is_running():
            target = self._loop
            target.call_soon_threadsafe(lambda: self._track(target.create_task(coro)))
        else:
            coro.close()
            logger.error("No running event loop, event dropped")

    def _track(self, task: asyncio.Task[None]) -> None:
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
