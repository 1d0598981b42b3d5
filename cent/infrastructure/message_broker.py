"""
Message Broker abstraction for the cent gateway.

This module defines the MessageBroker protocol that the RPC layer, the event
forwarder and the client depend on. The NATS implementation lives in
nats_broker; tests substitute an in-memory broker with the same surface.
"""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol


class InboundMessage(Protocol):
    """A message delivered to a subscription handler (nats.aio.msg.Msg conforms)."""

    subject: str
    reply: str
    data: bytes

    async def respond(self, data: bytes) -> None:
        """Send a reply to the message's reply inbox."""
        ...


# Type alias for message handlers
MessageHandler = Callable[[Any], Awaitable[None]]


class MessageBroker(Protocol):
    """
    Protocol defining the message broker interface.

    Implementations must provide:
    - Connection management (connect, disconnect, is_connected)
    - Publishing raw payloads to subjects, optionally durably
    - Subscribing to subjects, optionally as a queue group member
    - Request/reply with a per-call timeout
    """

    async def connect(self) -> bool:
        """
        Connect to the message broker.

        Returns:
            bool: True if connection successful
        """
        ...

    async def disconnect(self, timeout: float | None = None) -> None:
        """
        Disconnect from the message broker.

        Closes all subscriptions and releases resources. Handlers still running
        after timeout seconds are cancelled; None waits for them indefinitely.
        """
        ...

    def is_connected(self) -> bool:
        """
        Check if connected to the message broker.

        Returns:
            bool: True if connected, False otherwise
        """
        ...

    async def publish(self, subject: str, payload: bytes, durable: bool = False) -> None:
        """
        Publish a payload to a subject.

        Args:
            subject: Subject to publish to
            payload: Raw message bytes
            durable: Persist the message (JetStream) instead of a core publish

        Raises:
            PublishError: If publishing fails
        """
        ...

    async def subscribe(self, subject: str, handler: MessageHandler, queue_group: str | None = None) -> str:
        """
        Subscribe to a subject with a message handler.

        Args:
            subject: Subject to subscribe to
            handler: Async callable receiving each InboundMessage
            queue_group: Optional queue group for load balancing

        Returns:
            str: Subscription ID for later unsubscribe

        Raises:
            SubscribeError: If subscription fails
        """
        ...

    async def unsubscribe(self, subscription_id: str) -> None:
        """
        Unsubscribe from a subject.

        Args:
            subscription_id: ID returned from subscribe()

        Raises:
            UnsubscribeError: If unsubscribe fails
        """
        ...

    async def request(self, subject: str, payload: bytes, timeout: float = 2.0) -> bytes:
        """
        Send a request and wait for a reply.

        Args:
            subject: Subject to send request to
            payload: Raw request bytes
            timeout: Maximum time to wait for reply (seconds)

        Returns:
            bytes: Raw reply bytes

        Raises:
            RequestTimeoutError: If no reply received within timeout
            RequestError: If the request fails for any other reason
        """
        ...


class MessageBrokerError(Exception):
    """Base exception for message broker errors."""


class ConnectionError(MessageBrokerError):  # pylint: disable=redefined-builtin
    """Exception raised when connection to message broker fails."""


class PublishError(MessageBrokerError):
    """Exception raised when publishing message fails."""


class SubscribeError(MessageBrokerError):
    """Exception raised when subscribing to subject fails."""


class UnsubscribeError(MessageBrokerError):
    """Exception raised when unsubscribing from subject fails."""


class RequestError(MessageBrokerError):
    """Exception raised when request-reply fails."""


class RequestTimeoutError(RequestError, TimeoutError):
    """No reply arrived within the caller's timeout; the server-side outcome is unknown."""
