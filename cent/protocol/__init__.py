"""Wire protocol: subjects, reply envelope and payload codecs."""

from . import scalars, subjects
from .envelope import FALLBACK_FAILURE, Envelope, decode, encode_event, encode_failure, encode_success

__all__ = [
    "FALLBACK_FAILURE",
    "Envelope",
    "decode",
    "encode_event",
    "encode_failure",
    "encode_success",
    "scalars",
    "subjects",
]
