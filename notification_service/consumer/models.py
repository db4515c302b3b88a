"""Consumer lifecycle states."""

from enum import Enum


class ConsumerState(str, Enum):
    """Lifecycle of a StreamConsumer.

    DISCONNECTED -> CONNECTED -> SUBSCRIBED -> CONSUMING -> DISCONNECTED
    """

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    SUBSCRIBED = "subscribed"
    CONSUMING = "consuming"
