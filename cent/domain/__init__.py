"""Domain boundary: entity models and the provider protocol."""

from .models import CheckoutRequest, Customer, Plan, Price, Subscription, SubscriptionUser
from .provider import PaymentProvider

__all__ = [
    "CheckoutRequest",
    "Customer",
    "PaymentProvider",
    "Plan",
    "Price",
    "Subscription",
    "SubscriptionUser",
]
