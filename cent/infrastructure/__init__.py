"""Transport adapters for the cent gateway."""

from .message_broker import (
    ConnectionError,
    InboundMessage,
    MessageBroker,
    MessageBrokerError,
    MessageHandler,
    PublishError,
    RequestError,
    RequestTimeoutError,
    SubscribeError,
    UnsubscribeError,
)
from .nats_broker import NATSMessageBroker

__all__ = [
    "ConnectionError",
    "InboundMessage",
    "MessageBroker",
    "MessageBrokerError",
    "MessageHandler",
    "NATSMessageBroker",
    "PublishError",
    "RequestError",
    "RequestTimeoutError",
    "SubscribeError",
    "UnsubscribeError",
]
