"""
Client stub for the cent gateway.

Wraps the command table in typed coroutines: arguments are encoded with the
same codecs the gateway decodes with, replies are unwrapped from their
envelope, and a failure envelope is raised as RemoteError.

Example:
    broker = NATSMessageBroker(config.nats)
    await broker.connect()
    client = CentClient.from_config(broker, config.gateway)
    customer = await client.get_customer_by_id(42)
"""

from collections.abc import Callable
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from .config.models import GatewayConfig
from .domain.models import CheckoutRequest, Customer, Plan, Price, Subscription, SubscriptionUser
from .exceptions import BadRequestError, EnvelopeDecodeError, RemoteError
from .infrastructure.message_broker import MessageBroker
from .logging.enhanced_logging_config import get_logger
from .protocol import subjects
from .protocol.envelope import UNKNOWN_ERROR, decode
from .protocol.scalars import decode_int, decode_text, encode_int, encode_model, encode_text, list_decoder

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

_customers = list_decoder(Customer)
_plans = list_decoder(Plan)
_prices = list_decoder(Price)
_subscriptions = list_decoder(Subscription)
_usernames = list_decoder(str)


def _parse(decoder: Callable[[bytes], Any], data: bytes, what: str) -> Any:
    try:
        return decoder(data)
    except (ValidationError, ValueError, BadRequestError) as e:
        raise EnvelopeDecodeError(f"invalid {what} in reply") from e


class CentClient:
    """
    Request/reply client for the gateway's command subjects.

    One instance may be shared by many concurrent callers: every call is
    timed independently and matched to its own reply by the broker.
    """

    def __init__(self, broker: MessageBroker, timeout: float = 5.0):
        """
        Initialize the client.

        Args:
            broker: Connected message broker
            timeout: Default per-call timeout in seconds
        """
        self.broker = broker
        self.timeout = timeout

    @classmethod
    def from_config(cls, broker: MessageBroker, config: GatewayConfig) -> "CentClient":
        """Build a client whose default timeout is the configured request timeout."""
        return cls(broker, timeout=config.request_timeout)

    async def call(self, subject: str, payload: bytes = b"", timeout: float | None = None) -> bytes:
        """
        Send a command and unwrap its reply.

        Args:
            subject: Command subject
            payload: Encoded request payload
            timeout: Per-call timeout, defaults to the client timeout

        Returns:
            The reply payload (empty when the operation returns no value)

        Raises:
            RemoteError: If the gateway replied with a failure envelope
            RequestTimeoutError: If no reply arrived in time
            RequestError: If the request could not be made
            EnvelopeDecodeError: If the reply is not a valid envelope
        """
        raw = await self.broker.request(subject, payload, timeout=self.timeout if timeout is None else timeout)
        envelope = decode(raw)
        if not envelope.success:
            error = RemoteError(envelope.error or UNKNOWN_ERROR, subject=subject)
            logger.debug("Remote operation failed", **error.to_dict())
            raise error
        return envelope.data or b""

    async def _get(self, subject: str, payload: bytes, model: type[M]) -> M:
        data = await self.call(subject, payload)
        return _parse(model.model_validate_json, data, model.__name__)

    # Customers
    async def add_customer(self, customer: Customer) -> None:
        await self.call(subjects.SUBJ_CUSTOMER_ADD, encode_model(customer))

    async def update_customer(self, customer: Customer) -> Customer:
        return await self._get(subjects.SUBJ_CUSTOMER_UPDATE, encode_model(customer), Customer)

    async def get_customer_by_id(self, customer_id: int) -> Customer:
        return await self._get(subjects.SUBJ_CUSTOMER_GET_BY_ID, encode_int(customer_id), Customer)

    async def get_customer_by_provider_id(self, provider_id: str) -> Customer:
        return await self._get(subjects.SUBJ_CUSTOMER_GET_BY_PROVIDER_ID, encode_text(provider_id), Customer)

    async def get_customer_by_email(self, email: str) -> Customer:
        return await self._get(subjects.SUBJ_CUSTOMER_GET_BY_EMAIL, encode_text(email), Customer)

    async def list_customers(self) -> list[Customer]:
        data = await self.call(subjects.SUBJ_CUSTOMER_LIST)
        return _parse(_customers, data, "customer list")

    async def remove_customer_by_provider_id(self, provider_id: str) -> None:
        await self.call(subjects.SUBJ_CUSTOMER_REMOVE_BY_PROVIDER_ID, encode_text(provider_id))

    # Plans
    async def add_plan(self, plan: Plan) -> None:
        await self.call(subjects.SUBJ_PLAN_ADD, encode_model(plan))

    async def update_plan(self, plan: Plan) -> Plan:
        return await self._get(subjects.SUBJ_PLAN_UPDATE, encode_model(plan), Plan)

    async def get_plan_by_id(self, plan_id: int) -> Plan:
        return await self._get(subjects.SUBJ_PLAN_GET_BY_ID, encode_int(plan_id), Plan)

    async def get_plan_by_provider_id(self, provider_id: str) -> Plan:
        return await self._get(subjects.SUBJ_PLAN_GET_BY_PROVIDER_ID, encode_text(provider_id), Plan)

    async def get_plan_by_name(self, name: str) -> Plan:
        return await self._get(subjects.SUBJ_PLAN_GET_BY_NAME, encode_text(name), Plan)

    async def get_plan_by_price_id(self, price_id: int) -> Plan:
        return await self._get(subjects.SUBJ_PLAN_GET_BY_PRICE_ID, encode_int(price_id), Plan)

    async def get_plan_by_subscription_id(self, subscription_id: int) -> Plan:
        return await self._get(subjects.SUBJ_PLAN_GET_BY_SUBSCRIPTION_ID, encode_int(subscription_id), Plan)

    async def list_plans(self) -> list[Plan]:
        data = await self.call(subjects.SUBJ_PLAN_LIST)
        return _parse(_plans, data, "plan list")

    async def list_active_plans(self) -> list[Plan]:
        data = await self.call(subjects.SUBJ_PLAN_LIST_ACTIVE)
        return _parse(_plans, data, "plan list")

    async def list_plans_by_username(self, username: str) -> list[Plan]:
        data = await self.call(subjects.SUBJ_PLAN_LIST_BY_USERNAME, encode_text(username))
        return _parse(_plans, data, "plan list")

    async def remove_plan_by_provider_id(self, provider_id: str) -> None:
        await self.call(subjects.SUBJ_PLAN_REMOVE_BY_PROVIDER_ID, encode_text(provider_id))

    # Prices
    async def add_price(self, price: Price) -> None:
        await self.call(subjects.SUBJ_PRICE_ADD, encode_model(price))

    async def get_price_by_id(self, price_id: int) -> Price:
        return await self._get(subjects.SUBJ_PRICE_GET_BY_ID, encode_int(price_id), Price)

    async def get_price_by_provider_id(self, provider_id: str) -> Price:
        return await self._get(subjects.SUBJ_PRICE_GET_BY_PROVIDER_ID, encode_text(provider_id), Price)

    async def list_prices(self) -> list[Price]:
        data = await self.call(subjects.SUBJ_PRICE_LIST)
        return _parse(_prices, data, "price list")

    async def list_prices_by_plan_id(self, plan_id: int) -> list[Price]:
        data = await self.call(subjects.SUBJ_PRICE_LIST_BY_PLAN_ID, encode_int(plan_id))
        return _parse(_prices, data, "price list")

    # Subscriptions
    async def get_subscription_by_id(self, subscription_id: int) -> Subscription:
        return await self._get(subjects.SUBJ_SUBSCRIPTION_GET_BY_ID, encode_int(subscription_id), Subscription)

    async def get_subscription_by_provider_id(self, provider_id: str) -> Subscription:
        return await self._get(subjects.SUBJ_SUBSCRIPTION_GET_BY_PROVIDER_ID, encode_text(provider_id), Subscription)

    async def list_subscriptions(self) -> list[Subscription]:
        data = await self.call(subjects.SUBJ_SUBSCRIPTION_LIST)
        return _parse(_subscriptions, data, "subscription list")

    async def list_subscriptions_by_username(self, username: str) -> list[Subscription]:
        data = await self.call(subjects.SUBJ_SUBSCRIPTION_LIST_BY_USERNAME, encode_text(username))
        return _parse(_subscriptions, data, "subscription list")

    async def list_subscriptions_by_plan_id(self, plan_id: int) -> list[Subscription]:
        data = await self.call(subjects.SUBJ_SUBSCRIPTION_LIST_BY_PLAN_ID, encode_int(plan_id))
        return _parse(_subscriptions, data, "subscription list")

    async def list_subscriptions_by_customer_id(self, customer_id: int) -> list[Subscription]:
        data = await self.call(subjects.SUBJ_SUBSCRIPTION_LIST_BY_CUSTOMER_ID, encode_int(customer_id))
        return _parse(_subscriptions, data, "subscription list")

    # Seats
    async def add_subscription_user(self, seat: SubscriptionUser) -> None:
        await self.call(subjects.SUBJ_SUBSCRIPTION_USER_ADD, encode_model(seat))

    async def remove_subscription_user(self, seat: SubscriptionUser) -> None:
        await self.call(subjects.SUBJ_SUBSCRIPTION_USER_REMOVE, encode_model(seat))

    async def list_subscription_usernames(self, subscription_id: int) -> list[str]:
        data = await self.call(subjects.SUBJ_SUBSCRIPTION_USER_LIST, encode_int(subscription_id))
        return _parse(_usernames, data, "username list")

    async def count_subscription_users(self, subscription_id: int) -> int:
        data = await self.call(subjects.SUBJ_SUBSCRIPTION_USER_COUNT, encode_int(subscription_id))
        return _parse(decode_int, data, "seat count")

    # Utility
    async def sync(self) -> None:
        """Ask the gateway to resynchronize with the payment processor."""
        await self.call(subjects.SUBJ_SYNC)

    async def checkout(self, request: CheckoutRequest) -> str:
        """Create a checkout session and return its URL."""
        data = await self.call(subjects.SUBJ_CHECKOUT, encode_model(request))
        return _parse(decode_text, data, "checkout url")
