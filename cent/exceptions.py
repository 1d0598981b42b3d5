"""
Exception hierarchy for the cent gateway.

Errors raised while decoding a request are owned by the gateway; errors raised
by the domain provider are not part of this hierarchy and are passed through
to callers verbatim as envelope error text.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

BAD_REQUEST = "bad request"


@dataclass
class ErrorContext:
    """
    Contextual information for error handling.

    Captures which message an error belongs to so it can be logged and
    correlated with the reply that carried it.
    """

    subject: str | None = None
    request_id: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for logging."""
        return {
            "subject": self.subject,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat(),
            "metadata": self.metadata,
        }


class CentError(Exception):
    """
    Base exception for all gateway errors.

    Carries an optional context and free-form details for structured logging.
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize gateway error.

        Args:
            message: Error message, also used as the envelope error text
            context: Error context information
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context.to_dict(),
            "details": self.details,
        }


class BadRequestError(CentError):
    """Request payload could not be decoded; the provider is never called."""

    def __init__(self, reason: str | None = None, context: ErrorContext | None = None):
        details = {"reason": reason} if reason else None
        super().__init__(BAD_REQUEST, context, details)
        self.reason = reason


class RemoteError(CentError):
    """A reply envelope reported failure; str() is the remote error text."""

    def __init__(self, message: str, subject: str | None = None):
        super().__init__(message, ErrorContext(subject=subject))
        self.subject = subject


class EnvelopeDecodeError(CentError):
    """Reply bytes are not a valid envelope."""


class RegistryError(CentError):
    """Operation registry configuration error raised at startup."""


class DuplicateSubjectError(RegistryError):
    """A command subject was registered twice."""

    def __init__(self, subject: str):
        super().__init__(f"subject '{subject}' is already registered", ErrorContext(subject=subject))
        self.subject = subject


class InvalidSubjectError(RegistryError):
    """A subject is malformed or belongs to the event namespace."""

    def __init__(self, subject: str, reason: str):
        super().__init__(f"invalid command subject '{subject}': {reason}", ErrorContext(subject=subject))
        self.subject = subject


def describe_error(exc: BaseException) -> str:
    """
    Render an exception as envelope error text.

    Never raises: an exception whose __str__ fails or is empty is described
    by its type name.

    Args:
        exc: The exception to describe

    Returns:
        Non-empty error text
    """
    try:
        text = str(exc)
    except Exception:  # pylint: disable=broad-exception-caught  # Reason: __str__ of foreign exceptions is arbitrary code
        text = ""
    return text or type(exc).__name__
