"""
NATS implementation of MessageBroker protocol.

This module provides a concrete implementation of the MessageBroker protocol
using nats-py. Core NATS carries request/reply traffic; JetStream carries
durable event publications.
"""

import asyncio
from collections.abc import Coroutine
from typing import Any
from uuid import uuid4

import nats
import nats.errors
from nats.aio.msg import Msg

from ..config.models import NATSConfig
from ..logging.enhanced_logging_config import get_logger
from .message_broker import (
    ConnectionError,
    MessageBrokerError,
    MessageHandler,
    PublishError,
    RequestError,
    RequestTimeoutError,
    SubscribeError,
    UnsubscribeError,
)

logger = get_logger(__name__)


class NATSMessageBroker:
    """
    NATS implementation of MessageBroker protocol.

    Every inbound message is handed to its handler in a task of its own, so
    a slow handler never holds up other messages on the same subscription.
    """

    def __init__(self, config: NATSConfig):
        """
        Initialize NATS message broker.

        Args:
            config: NATS configuration
        """
        self.config = config
        self._client: Any = None  # nats.aio.client.Client once connected
        self._jetstream: Any = None
        self._subscriptions: dict[str, Any] = {}  # subscription_id -> NATS subscription object
        self._inflight: set[asyncio.Task[Any]] = set()
        self._logger = get_logger(__name__)

    async def connect(self) -> bool:
        """
        Connect to NATS server.

        Returns:
            bool: True if connection successful

        Raises:
            ConnectionError: If the server cannot be reached
        """
        try:
            if self._client and self._client.is_connected:
                self._logger.info("Already connected to NATS")
                return True

            self._client = await nats.connect(
                servers=self.config.url,
                name=self.config.name,
                max_reconnect_attempts=self.config.max_reconnect_attempts,
                reconnect_time_wait=self.config.reconnect_time_wait,
                connect_timeout=self.config.connect_timeout,
                ping_interval=self.config.ping_interval,
                max_outstanding_pings=self.config.max_outstanding_pings,
                error_cb=self._error_callback,
                disconnected_cb=self._disconnected_callback,
                reconnected_cb=self._reconnected_callback,
            )
            self._jetstream = self._client.jetstream()

            self._logger.info("Connected to NATS", url=self.config.url)
            return True

        except Exception as e:
            self._logger.error("Failed to connect to NATS", error=str(e), exc_info=True)
            raise ConnectionError(f"Failed to connect to NATS: {e}") from e

    async def disconnect(self, timeout: float | None = None) -> None:
        """
        Disconnect from NATS server after unsubscribing and letting in-flight handlers finish.

        Args:
            timeout: Seconds to wait for in-flight handlers; those still running are cancelled
        """
        if not self._client:
            return

        try:
            for subscription_id in list(self._subscriptions.keys()):
                try:
                    await self.unsubscribe(subscription_id)
                except UnsubscribeError as e:
                    self._logger.warning("Error unsubscribing", subscription_id=subscription_id, error=str(e))

            still_running = await self.wait_inflight(timeout)
            for task in still_running:
                task.cancel()
            if still_running:
                await asyncio.wait(still_running)

            if self._client.is_connected:
                await self._client.close()

            self._logger.info("Disconnected from NATS")

        except Exception as e:
            self._logger.error("Error disconnecting from NATS", error=str(e))
            raise MessageBrokerError(f"Error disconnecting from NATS: {e}") from e

    def is_connected(self) -> bool:
        """
        Check if connected to NATS.

        Returns:
            bool: True if connected, False otherwise
        """
        return self._client is not None and self._client.is_connected

    async def publish(self, subject: str, payload: bytes, durable: bool = False) -> None:
        """
        Publish raw bytes to a NATS subject.

        Args:
            subject: NATS subject to publish to
            payload: Message bytes
            durable: Publish through JetStream and wait for the stream ack

        Raises:
            PublishError: If publishing fails
        """
        if not self.is_connected():
            raise PublishError("Not connected to NATS")

        try:
            if durable:
                ack = await self._jetstream.publish(subject, payload)
                self._logger.debug("Published durable message", subject=subject, stream=ack.stream, seq=ack.seq)
            else:
                await self._client.publish(subject, payload)
                self._logger.debug("Published message", subject=subject, message_size=len(payload))

        except Exception as e:
            self._logger.error("Failed to publish message", subject=subject, durable=durable, error=str(e))
            raise PublishError(f"Failed to publish to {subject}: {e}") from e

    async def subscribe(self, subject: str, handler: MessageHandler, queue_group: str | None = None) -> str:
        """
        Subscribe to NATS subject with message handler.

        Args:
            subject: NATS subject to subscribe to
            handler: Async callable that processes each Msg
            queue_group: Optional queue group for load balancing

        Returns:
            str: Subscription ID for later unsubscribe

        Raises:
            SubscribeError: If subscription fails
        """
        if not self.is_connected():
            raise SubscribeError("Not connected to NATS")

        try:

            async def nats_message_wrapper(msg: Msg) -> None:
                self._spawn(self._run_handler(handler, msg))

            subscription = await self._client.subscribe(subject, queue=queue_group or "", cb=nats_message_wrapper)

            subscription_id = str(uuid4())
            self._subscriptions[subscription_id] = subscription

            self._logger.info("Subscribed to NATS subject", subject=subject, queue_group=queue_group)

            return subscription_id

        except Exception as e:
            self._logger.error("Failed to subscribe to NATS subject", subject=subject, error=str(e))
            raise SubscribeError(f"Failed to subscribe to {subject}: {e}") from e

    async def unsubscribe(self, subscription_id: str) -> None:
        """
        Unsubscribe from NATS subject.

        Args:
            subscription_id: ID returned from subscribe()

        Raises:
            UnsubscribeError: If unsubscribe fails
        """
        subscription = self._subscriptions.get(subscription_id)
        if not subscription:
            self._logger.warning("Subscription not found", subscription_id=subscription_id)
            return

        try:
            await subscription.unsubscribe()
            del self._subscriptions[subscription_id]

            self._logger.info("Unsubscribed from NATS", subscription_id=subscription_id)

        except Exception as e:
            self._logger.error("Failed to unsubscribe", subscription_id=subscription_id, error=str(e))
            raise UnsubscribeError(f"Failed to unsubscribe {subscription_id}: {e}") from e

    async def request(self, subject: str, payload: bytes, timeout: float = 2.0) -> bytes:
        """
        Send request and wait for reply.

        nats-py multiplexes replies over a single inbox and matches each one
        to its own request token, so concurrent requests are independent.

        Args:
            subject: NATS subject to send request to
            payload: Request bytes
            timeout: Maximum time to wait for reply (seconds)

        Returns:
            bytes: Reply bytes

        Raises:
            RequestTimeoutError: If no reply received within timeout
            RequestError: If request fails
        """
        if not self.is_connected():
            raise RequestError("Not connected to NATS")

        try:
            reply_msg = await self._client.request(subject, payload, timeout=timeout)
            self._logger.debug("Received reply", subject=subject)
            return reply_msg.data

        except (nats.errors.TimeoutError, TimeoutError) as e:
            self._logger.warning("Request timeout", subject=subject, timeout=timeout)
            raise RequestTimeoutError(f"Request to {subject} timed out after {timeout}s") from e

        except nats.errors.NoRespondersError as e:
            self._logger.warning("No responders for request", subject=subject)
            raise RequestError(f"No responders available for {subject}") from e

        except Exception as e:
            self._logger.error("Request failed", subject=subject, error=str(e))
            raise RequestError(f"Request to {subject} failed: {e}") from e

    async def wait_inflight(self, timeout: float | None = None) -> set[asyncio.Task[Any]]:
        """
        Wait for handler tasks that are still running.

        Args:
            timeout: Give up after this many seconds (None waits indefinitely)

        Returns:
            Tasks still running when the wait ended
        """
        if not self._inflight:
            return set()
        pending = list(self._inflight)
        _, still_running = await asyncio.wait(pending, timeout=timeout)
        if still_running:
            self._logger.warning("Handlers still running after wait", pending=len(still_running))
        return still_running

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task[None]:
        """Run a coroutine as a tracked task so it is not collected mid-flight."""
        task = asyncio.create_task(coro)
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    async def _run_handler(self, handler: MessageHandler, msg: Msg) -> None:
        try:
            await handler(msg)
        except Exception as e:  # pylint: disable=broad-exception-caught  # Reason: one bad message must not kill the subscription
            self._logger.error("Error processing NATS message", subject=msg.subject, error=str(e), exc_info=True)

    # NATS event callbacks
    async def _error_callback(self, error: Exception) -> None:
        """Handle NATS errors."""
        self._logger.error("NATS error occurred", error=str(error))

    async def _disconnected_callback(self) -> None:
        """Handle NATS disconnection."""
        self._logger.warning("Disconnected from NATS")

    async def _reconnected_callback(self) -> None:
        """Handle NATS reconnection."""
        self._logger.info("Reconnected to NATS")
