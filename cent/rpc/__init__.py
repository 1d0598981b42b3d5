"""Request/reply side of the gateway."""

from .dispatcher import RPCDispatcher
from .operations import OPERATIONS, Operation, build_registry
from .registry import OperationRegistry, RequestHandler
from .subscriber import QueueGroupSubscriber

__all__ = [
    "OPERATIONS",
    "Operation",
    "OperationRegistry",
    "QueueGroupSubscriber",
    "RPCDispatcher",
    "RequestHandler",
    "build_registry",
]
