"""Event side of the gateway: provider callbacks republished as events."""

from .forwarder import EventForwarder
from .mappings import EVENT_MAPPINGS, EventMapping, flag_transition

__all__ = ["EVENT_MAPPINGS", "EventForwarder", "EventMapping", "flag_transition"]
