"""
Provider lifecycle event -> published subjects.

Each EventMapping names the provider callback it hooks (registered through
``on_<event>``), the subjects published on every invocation, and optionally
a derivation that adds one more subject computed from the previous and
current snapshots.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from ..domain.models import Subscription, SubscriptionUser
from ..protocol import subjects

PayloadBuilder = Callable[..., BaseModel]
Derivation = Callable[..., str | None]


def latest(*args: Any) -> BaseModel:
    """Use the last callback argument as the event body (the current snapshot for updates)."""
    return args[-1]


def seat(subscription: Subscription, username: str) -> SubscriptionUser:
    """Build a seat event body from a seat callback's arguments."""
    return SubscriptionUser(subscription_id=subscription.id, username=username)


def flag_transition(field: str, on_rise: str, on_fall: str) -> Derivation:
    """
    Derive a subject from a boolean field changing between snapshots.

    Args:
        field: Boolean attribute compared on previous and current
        on_rise: Subject published on a false -> true transition
        on_fall: Subject published on a true -> false transition

    Returns:
        A derivation returning the subject to add, or None when unchanged
    """

    def derive(previous: Any, current: Any) -> str | None:
        before = bool(getattr(previous, field))
        after = bool(getattr(current, field))
        if not before and after:
            return on_rise
        if before and not after:
            return on_fall
        return None

    derive.__name__ = f"{field}_transition"
    return derive


@dataclass(frozen=True)
class EventMapping:
    """
    One provider callback and what it publishes.

    Attributes:
        event: Provider event name; the callback is registered via ``on_<event>``
        subjects: Subjects published, in order, on every invocation
        payload: Builds the event body from the callback arguments
        derive: Optional derivation publishing one extra subject after ``subjects``
    """

    event: str
    subjects: tuple[str, ...]
    payload: PayloadBuilder = latest
    derive: Derivation | None = None


EVENT_MAPPINGS: tuple[EventMapping, ...] = (
    EventMapping("customer_added", (subjects.SUBJ_CUSTOMER_ADDED,)),
    EventMapping("customer_removed", (subjects.SUBJ_CUSTOMER_REMOVED,)),
    EventMapping("customer_updated", (subjects.SUBJ_CUSTOMER_UPDATED,)),
    EventMapping("plan_added", (subjects.SUBJ_PLAN_ADDED,)),
    EventMapping("plan_removed", (subjects.SUBJ_PLAN_REMOVED,)),
    EventMapping("plan_updated", (subjects.SUBJ_PLAN_UPDATED,)),
    EventMapping("price_added", (subjects.SUBJ_PRICE_ADDED,)),
    EventMapping("price_removed", (subjects.SUBJ_PRICE_REMOVED,)),
    EventMapping("price_updated", (subjects.SUBJ_PRICE_UPDATED,)),
    EventMapping("subscription_added", (subjects.SUBJ_SUBSCRIPTION_ADDED, subjects.SUBJ_SUBSCRIPTION_ACTIVATED)),
    EventMapping("subscription_removed", (subjects.SUBJ_SUBSCRIPTION_REMOVED, subjects.SUBJ_SUBSCRIPTION_DEACTIVATED)),
    EventMapping(
        "subscription_updated",
        (subjects.SUBJ_SUBSCRIPTION_UPDATED,),
        derive=flag_transition(
            "active",
            on_rise=subjects.SUBJ_SUBSCRIPTION_ACTIVATED,
            on_fall=subjects.SUBJ_SUBSCRIPTION_DEACTIVATED,
        ),
    ),
    EventMapping("seat_added", (subjects.SUBJ_SUBSCRIPTION_USER_ADDED,), payload=seat),
    EventMapping("seat_removed", (subjects.SUBJ_SUBSCRIPTION_USER_REMOVED,), payload=seat),
)
