"""
Payload codecs for request arguments and reply values.

Wire contract:

- integers travel as base-10 ASCII digits with an optional sign
  (``42`` ⇄ ``b"42"``), limited to the signed 64-bit range;
- strings travel as raw UTF-8 text, no quoting;
- entities and lists travel as JSON.

Decoders raise BadRequestError on malformed input so a handler can reject
the request before touching the domain provider.
"""

import re
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from ..exceptions import BadRequestError

_INT_PATTERN = re.compile(rb"[+-]?[0-9]+")
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

M = TypeVar("M", bound=BaseModel)


def encode_int(value: int) -> bytes:
    """Encode an integer as base-10 ASCII."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected int, got {type(value).__name__}")
    return str(value).encode("ascii")


def decode_int(data: bytes) -> int:
    """
    Decode a base-10 ASCII integer.

    Stricter than int(): surrounding whitespace, underscores and non-ASCII
    digits are all rejected.

    Args:
        data: Raw payload

    Returns:
        The decoded integer

    Raises:
        BadRequestError: If the payload is not a signed 64-bit decimal integer
    """
    if not _INT_PATTERN.fullmatch(data or b""):
        raise BadRequestError("integer payload expected")
    value = int(data)
    if not INT64_MIN <= value <= INT64_MAX:
        raise BadRequestError("integer payload out of range")
    return value


def encode_text(value: str) -> bytes:
    """Encode a string as raw UTF-8."""
    return value.encode("utf-8")


def decode_text(data: bytes) -> str:
    """
    Decode raw UTF-8 text.

    Raises:
        BadRequestError: If the payload is not valid UTF-8
    """
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise BadRequestError("utf-8 payload expected") from e


def encode_model(value: BaseModel) -> bytes:
    """Encode an entity as JSON."""
    return value.model_dump_json().encode("utf-8")


def model_decoder(model: type[M]):
    """
    Build a decoder that parses a JSON payload into ``model``.

    Unknown fields are ignored by the entity models so newer clients can talk
    to older gateways.
    """

    def decode(data: bytes) -> M:
        try:
            return model.model_validate_json(data)
        except ValidationError as e:
            raise BadRequestError(f"invalid {model.__name__} payload: {e.error_count()} error(s)") from e

    decode.__name__ = f"decode_{model.__name__.lower()}"
    return decode


def list_encoder(item_type: Any):
    """Build an encoder that serializes a sequence of ``item_type`` as a JSON array."""
    adapter = TypeAdapter(list[item_type])

    def encode(values: Any) -> bytes:
        return adapter.dump_json(list(values))

    return encode


def list_decoder(item_type: Any):
    """Build a decoder for a JSON array of ``item_type``."""
    adapter = TypeAdapter(list[item_type])

    def decode(data: bytes) -> list[Any]:
        return adapter.validate_json(data)

    return decode
