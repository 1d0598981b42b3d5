"""
Domain provider boundary.

The gateway never computes or persists anything itself. It calls a
PaymentProvider (customer, plan, price, subscription and seat storage kept in
sync with the payment processor) and listens to the lifecycle callbacks the
provider fires. Implementations must be safe for concurrent use: the gateway
invokes operations from many tasks at once without any locking of its own.
"""

from collections.abc import Callable, Sequence
from typing import Protocol

from .models import CheckoutRequest, Customer, Plan, Price, Subscription, SubscriptionUser

CustomerCallback = Callable[[Customer], None]
CustomerUpdateCallback = Callable[[Customer, Customer], None]
PlanCallback = Callable[[Plan], None]
PlanUpdateCallback = Callable[[Plan, Plan], None]
PriceCallback = Callable[[Price], None]
PriceUpdateCallback = Callable[[Price, Price], None]
SubscriptionCallback = Callable[[Subscription], None]
SubscriptionUpdateCallback = Callable[[Subscription, Subscription], None]
SeatCallback = Callable[[Subscription, str], None]


class PaymentProvider(Protocol):
    """
    Operations and lifecycle callbacks the gateway consumes.

    Operations raise on failure; the exception text is returned to callers
    verbatim. Update callbacks receive (previous, current) snapshots.
    """

    # Customers
    async def add_customer(self, customer: Customer) -> None: ...
    async def update_customer(self, customer: Customer) -> Customer: ...
    async def get_customer_by_id(self, customer_id: int) -> Customer: ...
    async def get_customer_by_provider_id(self, provider_id: str) -> Customer: ...
    async def get_customer_by_email(self, email: str) -> Customer: ...
    async def list_customers(self) -> Sequence[Customer]: ...
    async def remove_customer_by_provider_id(self, provider_id: str) -> None: ...

    # Plans
    async def add_plan(self, plan: Plan) -> None: ...
    async def update_plan(self, plan: Plan) -> Plan: ...
    async def get_plan_by_id(self, plan_id: int) -> Plan: ...
    async def get_plan_by_provider_id(self, provider_id: str) -> Plan: ...
    async def get_plan_by_name(self, name: str) -> Plan: ...
    async def get_plan_by_price_id(self, price_id: int) -> Plan: ...
    async def get_plan_by_subscription_id(self, subscription_id: int) -> Plan: ...
    async def list_plans(self) -> Sequence[Plan]: ...
    async def list_active_plans(self) -> Sequence[Plan]: ...
    async def list_plans_by_username(self, username: str) -> Sequence[Plan]: ...
    async def remove_plan_by_provider_id(self, provider_id: str) -> None: ...

    # Prices
    async def add_price(self, price: Price) -> None: ...
    async def get_price_by_id(self, price_id: int) -> Price: ...
    async def get_price_by_provider_id(self, provider_id: str) -> Price: ...
    async def list_prices(self) -> Sequence[Price]: ...
    async def list_prices_by_plan_id(self, plan_id: int) -> Sequence[Price]: ...

    # Subscriptions
    async def get_subscription_by_id(self, subscription_id: int) -> Subscription: ...
    async def get_subscription_by_provider_id(self, provider_id: str) -> Subscription: ...
    async def list_subscriptions(self) -> Sequence[Subscription]: ...
    async def list_subscriptions_by_username(self, username: str) -> Sequence[Subscription]: ...
    async def list_subscriptions_by_plan_id(self, plan_id: int) -> Sequence[Subscription]: ...
    async def list_subscriptions_by_customer_id(self, customer_id: int) -> Sequence[Subscription]: ...

    # Seats
    async def add_subscription_user(self, seat: SubscriptionUser) -> None: ...
    async def remove_subscription_user(self, seat: SubscriptionUser) -> None: ...
    async def list_subscription_usernames(self, subscription_id: int) -> Sequence[str]: ...
    async def count_subscription_users(self, subscription_id: int) -> int: ...

    # Utility
    async def sync(self) -> None: ...
    async def checkout(self, request: CheckoutRequest) -> str: ...

    # Lifecycle callbacks
    def on_customer_added(self, callback: CustomerCallback) -> None: ...
    def on_customer_removed(self, callback: CustomerCallback) -> None: ...
    def on_customer_updated(self, callback: CustomerUpdateCallback) -> None: ...
    def on_plan_added(self, callback: PlanCallback) -> None: ...
    def on_plan_removed(self, callback: PlanCallback) -> None: ...
    def on_plan_updated(self, callback: PlanUpdateCallback) -> None: ...
    def on_price_added(self, callback: PriceCallback) -> None: ...
    def on_price_removed(self, callback: PriceCallback) -> None: ...
    def on_price_updated(self, callback: PriceUpdateCallback) -> None: ...
    def on_subscription_added(self, callback: SubscriptionCallback) -> None: ...
    def on_subscription_removed(self, callback: SubscriptionCallback) -> None: ...
    def on_subscription_updated(self, callback: SubscriptionUpdateCallback) -> None: ...
    def on_seat_added(self, callback: SeatCallback) -> None: ...
    def on_seat_removed(self, callback: SeatCallback) -> None: ...
