"""
The command table: every request/reply operation the gateway serves.

Each Operation names its subject, how the request payload is decoded, which
provider method is called, and how the result is encoded. build_registry
binds the table to a concrete provider.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from ..domain.models import CheckoutRequest, Customer, Plan, Price, Subscription, SubscriptionUser
from ..domain.provider import PaymentProvider
from ..logging.enhanced_logging_config import get_logger
from ..protocol import subjects
from ..protocol.scalars import (
    decode_int,
    decode_text,
    encode_int,
    encode_model,
    encode_text,
    list_encoder,
    model_decoder,
)
from .registry import OperationRegistry, RequestHandler

logger = get_logger(__name__)

Decoder = Callable[[bytes], Any]
Encoder = Callable[[Any], bytes]


@dataclass(frozen=True)
class Operation:
    """
    Descriptor for one command subject.

    Attributes:
        subject: Command subject the operation is served on
        call: Name of the PaymentProvider method to invoke
        decode: Request payload decoder; None for operations without input
        encode: Result encoder; None for operations that reply with no data
    """

    subject: str
    call: str
    decode: Decoder | None = None
    encode: Encoder | None = None

    def bind(self, provider: PaymentProvider) -> RequestHandler:
        """
        Build the request handler for this operation against ``provider``.

        The payload is decoded before the provider is touched, so a bad
        request never reaches the domain.
        """
        method = getattr(provider, self.call)
        decode = self.decode
        encode = self.encode

        async def handle(data: bytes) -> bytes | None:
            if decode is None:
                result = await method()
            else:
                result = await method(decode(data))
            return None if encode is None else encode(result)

        handle.__name__ = f"handle_{self.call}"
        return handle


_customer = model_decoder(Customer)
_plan = model_decoder(Plan)
_price = model_decoder(Price)
_seat = model_decoder(SubscriptionUser)
_checkout = model_decoder(CheckoutRequest)

_customers = list_encoder(Customer)
_plans = list_encoder(Plan)
_prices = list_encoder(Price)
_subscriptions = list_encoder(Subscription)
_usernames = list_encoder(str)

OPERATIONS: tuple[Operation, ...] = (
    # Customers
    Operation(subjects.SUBJ_CUSTOMER_ADD, "add_customer", _customer),
    Operation(subjects.SUBJ_CUSTOMER_UPDATE, "update_customer", _customer, encode_model),
    Operation(subjects.SUBJ_CUSTOMER_GET_BY_ID, "get_customer_by_id", decode_int, encode_model),
    Operation(subjects.SUBJ_CUSTOMER_GET_BY_PROVIDER_ID, "get_customer_by_provider_id", decode_text, encode_model),
    Operation(subjects.SUBJ_CUSTOMER_GET_BY_EMAIL, "get_customer_by_email", decode_text, encode_model),
    Operation(subjects.SUBJ_CUSTOMER_LIST, "list_customers", None, _customers),
    Operation(subjects.SUBJ_CUSTOMER_REMOVE_BY_PROVIDER_ID, "remove_customer_by_provider_id", decode_text),
    # Plans
    Operation(subjects.SUBJ_PLAN_ADD, "add_plan", _plan),
    Operation(subjects.SUBJ_PLAN_UPDATE, "update_plan", _plan, encode_model),
    Operation(subjects.SUBJ_PLAN_GET_BY_ID, "get_plan_by_id", decode_int, encode_model),
    Operation(subjects.SUBJ_PLAN_GET_BY_PROVIDER_ID, "get_plan_by_provider_id", decode_text, encode_model),
    Operation(subjects.SUBJ_PLAN_GET_BY_NAME, "get_plan_by_name", decode_text, encode_model),
    Operation(subjects.SUBJ_PLAN_GET_BY_PRICE_ID, "get_plan_by_price_id", decode_int, encode_model),
    Operation(subjects.SUBJ_PLAN_GET_BY_SUBSCRIPTION_ID, "get_plan_by_subscription_id", decode_int, encode_model),
    Operation(subjects.SUBJ_PLAN_LIST, "list_plans", None, _plans),
    Operation(subjects.SUBJ_PLAN_LIST_ACTIVE, "list_active_plans", None, _plans),
    Operation(subjects.SUBJ_PLAN_LIST_BY_USERNAME, "list_plans_by_username", decode_text, _plans),
    Operation(subjects.SUBJ_PLAN_REMOVE_BY_PROVIDER_ID, "remove_plan_by_provider_id", decode_text),
    # Prices
    Operation(subjects.SUBJ_PRICE_ADD, "add_price", _price),
    Operation(subjects.SUBJ_PRICE_GET_BY_ID, "get_price_by_id", decode_int, encode_model),
    Operation(subjects.SUBJ_PRICE_GET_BY_PROVIDER_ID, "get_price_by_provider_id", decode_text, encode_model),
    Operation(subjects.SUBJ_PRICE_LIST, "list_prices", None, _prices),
    Operation(subjects.SUBJ_PRICE_LIST_BY_PLAN_ID, "list_prices_by_plan_id", decode_int, _prices),
    # Subscriptions
    Operation(subjects.SUBJ_SUBSCRIPTION_GET_BY_ID, "get_subscription_by_id", decode_int, encode_model),
    Operation(
        subjects.SUBJ_SUBSCRIPTION_GET_BY_PROVIDER_ID, "get_subscription_by_provider_id", decode_text, encode_model
    ),
    Operation(subjects.SUBJ_SUBSCRIPTION_LIST, "list_subscriptions", None, _subscriptions),
    Operation(subjects.SUBJ_SUBSCRIPTION_LIST_BY_USERNAME, "list_subscriptions_by_username", decode_text, _subscriptions),
    Operation(subjects.SUBJ_SUBSCRIPTION_LIST_BY_PLAN_ID, "list_subscriptions_by_plan_id", decode_int, _subscriptions),
    Operation(
        subjects.SUBJ_SUBSCRIPTION_LIST_BY_CUSTOMER_ID, "list_subscriptions_by_customer_id", decode_int, _subscriptions
    ),
    # Seats
    Operation(subjects.SUBJ_SUBSCRIPTION_USER_ADD, "add_subscription_user", _seat),
    Operation(subjects.SUBJ_SUBSCRIPTION_USER_REMOVE, "remove_subscription_user", _seat),
    Operation(subjects.SUBJ_SUBSCRIPTION_USER_LIST, "list_subscription_usernames", decode_int, _usernames),
    Operation(subjects.SUBJ_SUBSCRIPTION_USER_COUNT, "count_subscription_users", decode_int, encode_int),
    # Utility
    Operation(subjects.SUBJ_SYNC, "sync"),
    Operation(subjects.SUBJ_CHECKOUT, "checkout", _checkout, encode_text),
)


def build_registry(provider: PaymentProvider, operations: Iterable[Operation] = OPERATIONS) -> OperationRegistry:
    """
    Bind every operation to ``provider`` and register it.

    Args:
        provider: Domain provider the handlers call
        operations: Operation table (defaults to the full command table)

    Returns:
        A populated OperationRegistry

    Raises:
        DuplicateSubjectError: If two operations share a subject
        InvalidSubjectError: If an operation uses an event subject
    """
    registry = OperationRegistry()
    for operation in operations:
        registry.register(operation.subject, operation.bind(provider))
    logger.info("Operation registry built", operations=len(registry))
    return registry
