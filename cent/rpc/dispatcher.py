"""
RPC dispatcher: one inbound command message in, exactly one reply out.

received -> handler invoked -> replied (success | failure). Nothing is
retried: a reply that cannot be sent is logged as lost, and the caller's
own timeout is the only recovery.
"""

import asyncio

from ..exceptions import BadRequestError, describe_error
from ..infrastructure.message_broker import InboundMessage
from ..logging.enhanced_logging_config import (
    bind_request_context,
    clear_request_context,
    get_current_context,
    get_logger,
)
from ..protocol.envelope import encode_failure, encode_success
from .registry import OperationRegistry

logger = get_logger(__name__)


class RPCDispatcher:
    """
    Turns inbound command messages into reply envelopes.

    Handler errors of any kind are recovered into a failure envelope carrying
    the error's text; the dispatcher never inspects domain errors further and
    never lets one escape into the serving task.
    """

    def __init__(self, registry: OperationRegistry):
        """
        Initialize the dispatcher.

        Args:
            registry: Registry used to resolve subjects to handlers
        """
        self.registry = registry

    async def dispatch(self, msg: InboundMessage) -> None:
        """
        Handle one inbound message and send its reply.

        Args:
            msg: Message delivered by the broker
        """
        bind_request_context(subject=msg.subject)
        try:
            reply = await self.process(msg.subject, msg.data)
            await self._send_reply(msg, reply)
        finally:
            clear_request_context()

    async def process(self, subject: str, data: bytes) -> bytes:
        """
        Run the handler for ``subject`` and build the reply envelope.

        Args:
            subject: Command subject
            data: Raw request payload

        Returns:
            Envelope bytes; never raises except on cancellation
        """
        handler = self.registry.lookup(subject)
        if handler is None:
            logger.warning("No handler registered for subject")
            return encode_failure(f"unknown subject: {subject}")

        try:
            result = await handler(data)
        except asyncio.CancelledError:
            raise
        except BadRequestError as e:
            e.context.subject = subject
            e.context.request_id = get_current_context().get("request_id")
            logger.info("Rejected bad request", **e.to_dict())
            return encode_failure(e.message)
        except Exception as e:  # pylint: disable=broad-exception-caught  # Reason: domain errors are opaque and must become a reply
            error = describe_error(e)
            logger.warning("Operation failed", error=error, error_type=type(e).__name__)
            return encode_failure(error)

        try:
            return encode_success(result)
        except Exception as e:  # pylint: disable=broad-exception-caught  # Reason: a bad result must still produce a reply
            logger.error("Failed to encode operation result", error=describe_error(e), exc_info=True)
            return encode_failure(describe_error(e))

    async def _send_reply(self, msg: InboundMessage, reply: bytes) -> None:
        if not msg.reply:
            logger.warning("Message has no reply inbox, reply dropped")
            return
        try:
            await msg.respond(reply)
        except Exception as e:  # pylint: disable=broad-exception-caught  # Reason: transport faults end in a lost reply, not a crash
            logger.error("Failed to send reply, reply lost", error=str(e), error_type=type(e).__name__)
