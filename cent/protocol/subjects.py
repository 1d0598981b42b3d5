"""
Subject vocabulary for the cent gateway.

Command subjects are request/reply and bound to a queue group; event subjects
are one-way publications fanned out to every subscriber. The two namespaces
are disjoint, and both are shared by the server and the client stub.
"""

PREFIX = "cent"

# Customers
SUBJ_CUSTOMER_ADD = "cent.customer.add"
SUBJ_CUSTOMER_UPDATE = "cent.customer.update"
SUBJ_CUSTOMER_GET_BY_ID = "cent.customer.get.id"
SUBJ_CUSTOMER_GET_BY_PROVIDER_ID = "cent.customer.get.provider_id"
SUBJ_CUSTOMER_GET_BY_EMAIL = "cent.customer.get.email"
SUBJ_CUSTOMER_LIST = "cent.customer.list"
SUBJ_CUSTOMER_REMOVE_BY_PROVIDER_ID = "cent.customer.remove.provider_id"

# Plans
SUBJ_PLAN_ADD = "cent.plan.add"
SUBJ_PLAN_UPDATE = "cent.plan.update"
SUBJ_PLAN_GET_BY_ID = "cent.plan.get.id"
SUBJ_PLAN_GET_BY_PROVIDER_ID = "cent.plan.get.provider_id"
SUBJ_PLAN_GET_BY_NAME = "cent.plan.get.name"
SUBJ_PLAN_GET_BY_PRICE_ID = "cent.plan.get.price_id"
SUBJ_PLAN_GET_BY_SUBSCRIPTION_ID = "cent.plan.get.subscription_id"
SUBJ_PLAN_LIST = "cent.plan.list"
SUBJ_PLAN_LIST_ACTIVE = "cent.plan.list.active"
SUBJ_PLAN_LIST_BY_USERNAME = "cent.plan.list.username"
SUBJ_PLAN_REMOVE_BY_PROVIDER_ID = "cent.plan.remove.provider_id"

# Prices
SUBJ_PRICE_ADD = "cent.price.add"
SUBJ_PRICE_GET_BY_ID = "cent.price.get.id"
SUBJ_PRICE_GET_BY_PROVIDER_ID = "cent.price.get.provider_id"
SUBJ_PRICE_LIST = "cent.price.list"
SUBJ_PRICE_LIST_BY_PLAN_ID = "cent.price.list.plan_id"

# Subscriptions
SUBJ_SUBSCRIPTION_GET_BY_ID = "cent.subscription.get.id"
SUBJ_SUBSCRIPTION_GET_BY_PROVIDER_ID = "cent.subscription.get.provider_id"
SUBJ_SUBSCRIPTION_LIST = "cent.subscription.list"
SUBJ_SUBSCRIPTION_LIST_BY_USERNAME = "cent.subscription.list.username"
SUBJ_SUBSCRIPTION_LIST_BY_PLAN_ID = "cent.subscription.list.plan_id"
SUBJ_SUBSCRIPTION_LIST_BY_CUSTOMER_ID = "cent.subscription.list.customer_id"

# Seats
SUBJ_SUBSCRIPTION_USER_ADD = "cent.subscription.user.add"
SUBJ_SUBSCRIPTION_USER_REMOVE = "cent.subscription.user.remove"
SUBJ_SUBSCRIPTION_USER_LIST = "cent.subscription.user.list"
SUBJ_SUBSCRIPTION_USER_COUNT = "cent.subscription.user.count"

# Utility
SUBJ_SYNC = "cent.sync"
SUBJ_CHECKOUT = "cent.checkout"

# Events
SUBJ_CUSTOMER_ADDED = "cent.customer.added"
SUBJ_CUSTOMER_REMOVED = "cent.customer.removed"
SUBJ_CUSTOMER_UPDATED = "cent.customer.updated"
SUBJ_PLAN_ADDED = "cent.plan.added"
SUBJ_PLAN_REMOVED = "cent.plan.removed"
SUBJ_PLAN_UPDATED = "cent.plan.updated"
SUBJ_PRICE_ADDED = "cent.price.added"
SUBJ_PRICE_REMOVED = "cent.price.removed"
SUBJ_PRICE_UPDATED = "cent.price.updated"
SUBJ_SUBSCRIPTION_ADDED = "cent.subscription.added"
SUBJ_SUBSCRIPTION_REMOVED = "cent.subscription.removed"
SUBJ_SUBSCRIPTION_UPDATED = "cent.subscription.updated"
SUBJ_SUBSCRIPTION_ACTIVATED = "cent.subscription.activated"
SUBJ_SUBSCRIPTION_DEACTIVATED = "cent.subscription.deactivated"
SUBJ_SUBSCRIPTION_USER_ADDED = "cent.subscription.user.added"
SUBJ_SUBSCRIPTION_USER_REMOVED = "cent.subscription.user.removed"

COMMAND_SUBJECTS: frozenset[str] = frozenset(
    {
        SUBJ_CUSTOMER_ADD,
        SUBJ_CUSTOMER_UPDATE,
        SUBJ_CUSTOMER_GET_BY_ID,
        SUBJ_CUSTOMER_GET_BY_PROVIDER_ID,
        SUBJ_CUSTOMER_GET_BY_EMAIL,
        SUBJ_CUSTOMER_LIST,
        SUBJ_CUSTOMER_REMOVE_BY_PROVIDER_ID,
        SUBJ_PLAN_ADD,
        SUBJ_PLAN_UPDATE,
        SUBJ_PLAN_GET_BY_ID,
        SUBJ_PLAN_GET_BY_PROVIDER_ID,
        SUBJ_PLAN_GET_BY_NAME,
        SUBJ_PLAN_GET_BY_PRICE_ID,
        SUBJ_PLAN_GET_BY_SUBSCRIPTION_ID,
        SUBJ_PLAN_LIST,
        SUBJ_PLAN_LIST_ACTIVE,
        SUBJ_PLAN_LIST_BY_USERNAME,
        SUBJ_PLAN_REMOVE_BY_PROVIDER_ID,
        SUBJ_PRICE_ADD,
        SUBJ_PRICE_GET_BY_ID,
        SUBJ_PRICE_GET_BY_PROVIDER_ID,
        SUBJ_PRICE_LIST,
        SUBJ_PRICE_LIST_BY_PLAN_ID,
        SUBJ_SUBSCRIPTION_GET_BY_ID,
        SUBJ_SUBSCRIPTION_GET_BY_PROVIDER_ID,
        SUBJ_SUBSCRIPTION_LIST,
        SUBJ_SUBSCRIPTION_LIST_BY_USERNAME,
        SUBJ_SUBSCRIPTION_LIST_BY_PLAN_ID,
        SUBJ_SUBSCRIPTION_LIST_BY_CUSTOMER_ID,
        SUBJ_SUBSCRIPTION_USER_ADD,
        SUBJ_SUBSCRIPTION_USER_REMOVE,
        SUBJ_SUBSCRIPTION_USER_LIST,
        SUBJ_SUBSCRIPTION_USER_COUNT,
        SUBJ_SYNC,
        SUBJ_CHECKOUT,
    }
)

EVENT_SUBJECTS: frozenset[str] = frozenset(
    {
        SUBJ_CUSTOMER_ADDED,
        SUBJ_CUSTOMER_REMOVED,
        SUBJ_CUSTOMER_UPDATED,
        SUBJ_PLAN_ADDED,
        SUBJ_PLAN_REMOVED,
        SUBJ_PLAN_UPDATED,
        SUBJ_PRICE_ADDED,
        SUBJ_PRICE_REMOVED,
        SUBJ_PRICE_UPDATED,
        SUBJ_SUBSCRIPTION_ADDED,
        SUBJ_SUBSCRIPTION_REMOVED,
        SUBJ_SUBSCRIPTION_UPDATED,
        SUBJ_SUBSCRIPTION_ACTIVATED,
        SUBJ_SUBSCRIPTION_DEACTIVATED,
        SUBJ_SUBSCRIPTION_USER_ADDED,
        SUBJ_SUBSCRIPTION_USER_REMOVED,
    }
)


def is_valid_subject(subject: str) -> bool:
    """
    Check a subject is a concrete NATS subject: non-empty dot-separated tokens,
    no wildcards, no whitespace.
    """
    if not subject or subject.startswith(".") or subject.endswith("."):
        return False
    for token in subject.split("."):
        if not token or token in ("*", ">"):
            return False
        if any(ch.isspace() for ch in token):
            return False
    return True


def is_command_subject(subject: str) -> bool:
    """True when the subject belongs to the request/reply namespace."""
    return subject in COMMAND_SUBJECTS


def is_event_subject(subject: str) -> bool:
    """True when the subject belongs to the one-way event namespace."""
    return subject in EVENT_SUBJECTS
