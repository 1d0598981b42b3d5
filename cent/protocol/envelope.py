"""
Reply envelope codec.

Every reply on a command subject is a JSON envelope::

    {"success": true, "data": "<base64>"}
    {"success": false, "error": "bad request"}

``error`` is present exactly when ``success`` is false; ``data`` only when
the operation produced a value. Events are not wrapped: they carry the JSON
entity alone (see encode_event).
"""

import base64
import json

from pydantic import BaseModel, ConfigDict, ValidationError, field_serializer, field_validator, model_validator

from ..exceptions import EnvelopeDecodeError
from ..logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)

UNKNOWN_ERROR = "unknown error"

# Pre-serialized so the failure path never depends on the serializer working.
FALLBACK_FAILURE = b'{"success":false,"error":"internal error"}'


class Envelope(BaseModel):
    """Uniform success/error/data wrapper for request/reply traffic."""

    model_config = ConfigDict(frozen=True)

    success: bool
    error: str | None = None
    data: bytes | None = None

    @field_validator("data", mode="before")
    @classmethod
    def decode_data(cls, v: object) -> object:
        """Accept standard base64 text, as produced by every envelope encoder."""
        if isinstance(v, str):
            return base64.b64decode(v, validate=True)
        return v

    @field_serializer("data", when_used="json")
    def encode_data(self, v: bytes | None) -> str | None:
        return None if v is None else base64.b64encode(v).decode("ascii")

    @model_validator(mode="after")
    def check_invariants(self) -> "Envelope":
        """Enforce that error and data never appear on the wrong side."""
        if self.success and self.error is not None:
            raise ValueError("successful envelope cannot carry an error")
        if not self.success and self.error is None:
            raise ValueError("failed envelope must carry an error")
        if not self.success and self.data is not None:
            raise ValueError("failed envelope cannot carry data")
        return self

    def to_bytes(self) -> bytes:
        """Serialize to wire form, omitting absent fields."""
        return self.model_dump_json(exclude_none=True).encode("utf-8")


def encode_success(payload: bytes | None = None) -> bytes:
    """
    Encode a successful reply.

    Args:
        payload: Encoded result, or None when the operation produces no value

    Returns:
        Envelope bytes
    """
    return Envelope(success=True, data=payload).to_bytes()


def _escaped_failure(message: str) -> bytes:
    """Serialize a failure with every non-ASCII character escaped, lone surrogates included."""
    return json.dumps({"success": False, "error": message}, separators=(",", ":")).encode("ascii")


def encode_failure(message: str) -> bytes:
    """
    Encode a failed reply.

    Never raises. Text the native serializer rejects (lone surrogates from
    ``surrogateescape``-decoded bytes, for instance) is serialized again with
    ASCII escapes, which decode() reads back to the identical text. Only if
    that also fails is FALLBACK_FAILURE returned.

    Args:
        message: Error text; an empty message becomes UNKNOWN_ERROR

    Returns:
        Envelope bytes
    """
    message = message or UNKNOWN_ERROR
    try:
        return Envelope(success=False, error=message).to_bytes()
    except Exception as e:  # pylint: disable=broad-exception-caught  # Reason: reply path must survive any serializer fault
        logger.warning("Failure envelope rejected by serializer, escaping", error_type=type(e).__name__)

    try:
        return _escaped_failure(message)
    except Exception as e:  # pylint: disable=broad-exception-caught  # Reason: reply path must survive any serializer fault
        logger.error("Failed to serialize failure envelope, using fallback", error_type=type(e).__name__)
        return FALLBACK_FAILURE


def decode(raw: bytes) -> Envelope:
    """
    Decode envelope bytes.

    The native JSON parser rejects escaped lone surrogates, so a reply it
    refuses is parsed once more with the json module before giving up.

    Args:
        raw: Reply bytes

    Returns:
        The decoded Envelope

    Raises:
        EnvelopeDecodeError: If the bytes are not a valid envelope
    """
    try:
        return Envelope.model_validate_json(raw)
    except ValidationError as e:
        native_error = e

    try:
        parsed = json.loads(raw)
    except ValueError:
        raise EnvelopeDecodeError(
            f"invalid reply envelope: {native_error.error_count()} error(s)"
        ) from native_error

    try:
        return Envelope.model_validate(parsed)
    except ValidationError as e:
        raise EnvelopeDecodeError(f"invalid reply envelope: {e.error_count()} error(s)") from e


def encode_event(entity: BaseModel) -> bytes:
    """Encode an event body: the entity JSON with no envelope around it."""
    return entity.model_dump_json().encode("utf-8")
