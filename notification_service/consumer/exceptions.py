"""Custom exceptions for the stream consumer.

Only these errors are allowed to reach the process boundary; everything
raised while handling an individual record is contained by the consumer.
"""


class StreamConsumerError(Exception):
    """Base exception for consumer transport failures."""

    pass


class ConsumerConnectionError(StreamConsumerError):
    """The broker could not be reached, or the session failed fatally."""

    pass


class ConsumerSubscriptionError(StreamConsumerError):
    """Joining the consumer group or subscribing to topics failed."""

    pass
