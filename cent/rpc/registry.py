"""
Operation registry: command subject -> request handler.

A registry is built once at startup and owned by a single gateway instance,
so several independent gateways can live in one process.
"""

from collections.abc import Awaitable, Callable, Iterator

from ..exceptions import DuplicateSubjectError, InvalidSubjectError
from ..logging.enhanced_logging_config import get_logger
from ..protocol.subjects import is_event_subject, is_valid_subject

logger = get_logger(__name__)

# Takes the raw request payload; returns the encoded result (None for no value)
# and raises on failure.
RequestHandler = Callable[[bytes], Awaitable[bytes | None]]


class OperationRegistry:
    """
    Static table mapping command subjects to request handlers.

    Example:
        >>> registry = OperationRegistry()
        >>> registry.register("cent.sync", handle_sync)
        >>> registry.lookup("cent.sync") is handle_sync
        True
    """

    def __init__(self) -> None:
        self._handlers: dict[str, RequestHandler] = {}

    def register(self, subject: str, handler: RequestHandler) -> None:
        """
        Register the handler for a command subject.

        Args:
            subject: Command subject
            handler: Async request handler

        Raises:
            InvalidSubjectError: If the subject is malformed or is an event subject
            DuplicateSubjectError: If the subject already has a handler
        """
        if not is_valid_subject(subject):
            raise InvalidSubjectError(subject, "not a concrete dot-delimited subject")
        if is_event_subject(subject):
            raise InvalidSubjectError(subject, "subject belongs to the event namespace")
        if subject in self._handlers:
            raise DuplicateSubjectError(subject)

        self._handlers[subject] = handler
        logger.debug("Registered operation", subject=subject, handler=getattr(handler, "__name__", repr(handler)))

    def lookup(self, subject: str) -> RequestHandler | None:
        """Return the handler for ``subject``, or None when it is not registered."""
        return self._handlers.get(subject)

    def subjects(self) -> list[str]:
        """All registered subjects, sorted."""
        return sorted(self._handlers)

    def __contains__(self, subject: object) -> bool:
        return subject in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

    def __iter__(self) -> Iterator[str]:
        return iter(self.subjects())
