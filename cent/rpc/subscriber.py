"""
Queue-group subscriber.

Binds command subjects to the broker under a shared queue group, so every
gateway instance started with the same group name shares the load and each
command is handled by exactly one of them.
"""

from ..infrastructure.message_broker import MessageBroker
from ..logging.enhanced_logging_config import get_logger
from .dispatcher import RPCDispatcher
from .registry import OperationRegistry

logger = get_logger(__name__)


class QueueGroupSubscriber:
    """Owns the queue-group subscriptions of one gateway instance."""

    def __init__(self, broker: MessageBroker, queue_group: str):
        """
        Initialize the subscriber.

        Args:
            broker: Connected message broker
            queue_group: Queue group shared by all cooperating instances
        """
        self.broker = broker
        self.queue_group = queue_group
        self._subscriptions: dict[str, str] = {}  # subject -> subscription id

    @property
    def bound_subjects(self) -> list[str]:
        """Subjects currently bound, sorted."""
        return sorted(self._subscriptions)

    async def bind(self, subject: str, dispatcher: RPCDispatcher) -> str:
        """
        Subscribe ``dispatcher`` to ``subject`` as a member of the queue group.

        Args:
            subject: Command subject
            dispatcher: Dispatcher receiving each message

        Returns:
            Subscription ID

        Raises:
            SubscribeError: If the broker refuses the subscription
        """
        subscription_id = await self.broker.subscribe(subject, dispatcher.dispatch, queue_group=self.queue_group)
        self._subscriptions[subject] = subscription_id
        return subscription_id

    async def bind_registry(self, registry: OperationRegistry, dispatcher: RPCDispatcher) -> None:
        """
        Bind every subject in ``registry``.

        Raises:
            SubscribeError: On the first subject that cannot be bound
        """
        for subject in registry.subjects():
            await self.bind(subject, dispatcher)
        logger.info("Bound command subjects", count=len(self._subscriptions), queue_group=self.queue_group)

    async def unbind_all(self) -> None:
        """Release every subscription held by this subscriber."""
        for subject, subscription_id in list(self._subscriptions.items()):
            try:
                await self.broker.unsubscribe(subscription_id)
            except Exception as e:  # pylint: disable=broad-exception-caught  # Reason: keep releasing the rest
                logger.warning("Error unbinding subject", subject=subject, error=str(e))
            del self._subscriptions[subject]
