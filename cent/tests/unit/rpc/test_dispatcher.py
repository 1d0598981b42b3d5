"""
Tests for the RPC dispatcher.

Every inbound message gets exactly one reply envelope: success with the
encoded result, "bad request" for undecodable payloads, the provider's error
text for domain failures, and a failure for unknown subjects.
"""

# pylint: disable=redefined-outer-name,protected-access

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from structlog.testing import capture_logs

from cent.protocol import subjects
from cent.protocol.envelope import FALLBACK_FAILURE, decode
from cent.rpc.dispatcher import RPCDispatcher
from cent.rpc.registry import OperationRegistry
from cent.tests.fixtures.in_memory_broker import FakeMessage


def _message(subject: str, data: bytes = b"", reply: str = "_INBOX.test") -> FakeMessage:
    msg = FakeMessage(subject=subject, data=data, reply=reply)
    msg.respond = AsyncMock()  # type: ignore[method-assign]
    return msg


class TestProcess:
    """Test envelope construction for each handler outcome."""

    @pytest.mark.asyncio
    async def test_success(self, dispatcher):
        """Test a successful call replies with the encoded entity."""
        env = decode(await dispatcher.process(subjects.SUBJ_CUSTOMER_GET_BY_ID, b"42"))

        assert env.success is True
        assert json.loads(env.data)["name"] == "Ada"

    @pytest.mark.asyncio
    async def test_success_without_value(self, dispatcher):
        """Test a no-value operation replies with success and no data."""
        env = decode(await dispatcher.process(subjects.SUBJ_SYNC, b""))

        assert env.success is True
        assert env.data is None

    @pytest.mark.asyncio
    async def test_bad_request(self, dispatcher, provider):
        """Test an undecodable payload replies "bad request" without calling the provider."""
        env = decode(await dispatcher.process(subjects.SUBJ_PLAN_GET_BY_ID, b"abc"))

        assert env.success is False
        assert env.error == "bad request"
        assert not provider.called("get_plan_by_id")

    @pytest.mark.asyncio
    async def test_bad_request_logged_with_context(self, dispatcher):
        """Test a rejected payload is logged with its subject and error type."""
        with capture_logs() as logs:
            await dispatcher.process(subjects.SUBJ_PLAN_GET_BY_ID, b"abc")

        entry = next(log for log in logs if log["event"] == "Rejected bad request")
        assert entry["error_type"] == "BadRequestError"
        assert entry["message"] == "bad request"
        assert entry["context"]["subject"] == subjects.SUBJ_PLAN_GET_BY_ID

    @pytest.mark.asyncio
    async def test_provider_error_text_verbatim(self, dispatcher):
        """Test a provider failure replies with its error text."""
        env = decode(await dispatcher.process(subjects.SUBJ_PLAN_GET_BY_NAME, b"Missing"))

        assert env.success is False
        assert env.error == "plan not found"

    @pytest.mark.asyncio
    async def test_checkout_failure_is_reported(self, dispatcher, provider):
        """Test a checkout provider error reaches the caller."""
        provider.failures["checkout"] = RuntimeError("card declined")
        payload = b'{"customer_id": 42, "price_id": 10, "redirect_url": "https://x"}'

        env = decode(await dispatcher.process(subjects.SUBJ_CHECKOUT, payload))

        assert env.error == "card declined"

    @pytest.mark.asyncio
    async def test_undecodable_error_text_verbatim(self, dispatcher, provider):
        """Test error text with lone surrogates reaches the caller unchanged."""
        provider.failures["get_customer_by_provider_id"] = RuntimeError("cus_\udcff not found")

        raw = await dispatcher.process(subjects.SUBJ_CUSTOMER_GET_BY_PROVIDER_ID, b"cus_x")

        assert raw != FALLBACK_FAILURE
        assert decode(raw).error == "cus_\udcff not found"

    @pytest.mark.asyncio
    async def test_empty_error_text_uses_type_name(self, dispatcher, provider):
        """Test an exception without text is described by its type."""
        provider.failures["sync"] = KeyError()

        env = decode(await dispatcher.process(subjects.SUBJ_SYNC, b""))

        assert env.error == "KeyError"

    @pytest.mark.asyncio
    async def test_unknown_subject(self, dispatcher):
        """Test an unregistered subject replies with a failure."""
        env = decode(await dispatcher.process("cent.unknown", b""))

        assert env.success is False
        assert env.error == "unknown subject: cent.unknown"

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self):
        """Test cancellation is not turned into a reply."""
        registry = OperationRegistry()
        registry.register("cent.sync", AsyncMock(side_effect=asyncio.CancelledError()))

        with pytest.raises(asyncio.CancelledError):
            await RPCDispatcher(registry).process("cent.sync", b"")

    @pytest.mark.asyncio
    async def test_unencodable_result_becomes_failure(self):
        """Test a handler result that cannot be enveloped still produces a reply."""
        registry = OperationRegistry()
        registry.register("cent.sync", AsyncMock(return_value="not bytes"))

        env = decode(await RPCDispatcher(registry).process("cent.sync", b""))

        assert env.success is False


class TestDispatch:
    """Test reply delivery for inbound messages."""

    @pytest.mark.asyncio
    async def test_reply_sent_once(self, dispatcher):
        """Test dispatch responds exactly once with the envelope."""
        msg = _message(subjects.SUBJ_SUBSCRIPTION_USER_COUNT, b"7")

        await dispatcher.dispatch(msg)

        msg.respond.assert_awaited_once()
        env = decode(msg.respond.await_args.args[0])
        assert env.data == b"3"

    @pytest.mark.asyncio
    async def test_missing_reply_inbox_drops_reply(self, dispatcher, provider):
        """Test a message without a reply inbox is processed but not answered."""
        msg = _message(subjects.SUBJ_SYNC, reply="")

        await dispatcher.dispatch(msg)

        assert provider.called("sync")
        msg.respond.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_lost_reply_does_not_raise(self, dispatcher, provider):
        """Test a failing respond is logged, not raised."""
        msg = FakeMessage(subject=subjects.SUBJ_SYNC, data=b"", reply="_INBOX.x", fail_respond=True)

        await dispatcher.dispatch(msg)

        assert provider.called("sync")

    @pytest.mark.asyncio
    async def test_concurrent_dispatch(self, dispatcher):
        """Test many messages handled concurrently each get their own reply."""
        messages = [_message(subjects.SUBJ_CUSTOMER_GET_BY_ID, b"42") for _ in range(20)]

        await asyncio.gather(*(dispatcher.dispatch(msg) for msg in messages))

        for msg in messages:
            msg.respond.assert_awaited_once()
