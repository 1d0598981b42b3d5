"""
cent: a NATS request/reply gateway and event bridge for a payment domain provider.

Commands (customers, plans, prices, subscriptions, seats, sync, checkout) are
served on queue-grouped subjects; provider lifecycle changes are republished
as events.
"""

from .client import CentClient
from .gateway import CentGateway, serve

__all__ = ["CentClient", "CentGateway", "serve"]
