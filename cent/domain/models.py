"""
Entity models exchanged with the domain provider and carried on the wire.

Unknown fields are ignored when parsing so that older gateways keep working
when clients start sending fields they do not know about yet.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class _Entity(BaseModel):
    model_config = ConfigDict(extra="ignore", validate_assignment=True)


class Customer(_Entity):
    """A billable customer mirrored from the payment processor."""

    id: int = Field(default=0, description="Local customer id")
    provider: str = Field(default="stripe", description="Payment processor name")
    provider_id: str = Field(default="", description="Customer id at the payment processor")
    name: str = Field(default="", description="Customer display name")
    email: str = Field(default="", description="Customer email address")


class Plan(_Entity):
    """A product customers can subscribe to."""

    id: int = Field(default=0, description="Local plan id")
    provider: str = Field(default="stripe", description="Payment processor name")
    provider_id: str = Field(default="", description="Product id at the payment processor")
    name: str = Field(default="", description="Plan name")
    description: str = Field(default="", description="Plan description")
    active: bool = Field(default=True, description="Whether the plan can be subscribed to")
    user_limit: int = Field(default=0, description="Seats per subscription, 0 for unlimited")


class Price(_Entity):
    """A recurring price attached to a plan."""

    id: int = Field(default=0, description="Local price id")
    plan_id: int = Field(default=0, description="Owning plan id")
    provider: str = Field(default="stripe", description="Payment processor name")
    provider_id: str = Field(default="", description="Price id at the payment processor")
    currency: str = Field(default="usd", description="ISO currency code")
    amount: int = Field(default=0, description="Amount in the smallest currency unit")
    schedule: str = Field(default="monthly", description="Billing schedule")
    trial_days: int = Field(default=0, description="Free trial length in days")


class Subscription(_Entity):
    """A customer's subscription to a price."""

    id: int = Field(default=0, description="Local subscription id")
    customer_id: int = Field(default=0, description="Subscribed customer id")
    price_id: int = Field(default=0, description="Subscribed price id")
    provider: str = Field(default="stripe", description="Payment processor name")
    provider_id: str = Field(default="", description="Subscription id at the payment processor")
    active: bool = Field(default=False, description="Whether the subscription grants access")
    created_at: datetime | None = Field(default=None, description="Creation time")


class SubscriptionUser(_Entity):
    """A seat: a username attached to a subscription."""

    subscription_id: int = Field(..., description="Subscription the seat belongs to")
    username: str = Field(..., description="Seat holder")


class CheckoutRequest(_Entity):
    """Parameters for creating a hosted checkout session."""

    customer_id: int = Field(..., description="Customer starting the checkout")
    price_id: int = Field(..., description="Price being purchased")
    redirect_url: str = Field(..., description="Where the processor sends the customer afterwards")
