"""Order event decoding, content building and routing."""

from .content import KNOWN_EVENTS, ContentBuilder
from .models import ConsumedRecord, DomainEvent, EventDecodeError, OrderEventData, decode_event
from .router import EventRouter

__all__ = [
    "ConsumedRecord",
    "DomainEvent",
    "OrderEventData",
    "EventDecodeError",
    "decode_event",
    "ContentBuilder",
    "KNOWN_EVENTS",
    "EventRouter",
]
