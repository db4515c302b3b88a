"""Kafka stream consumption with per-partition ordered dispatch."""

from .exceptions import ConsumerConnectionError, ConsumerSubscriptionError, StreamConsumerError
from .kafka import StreamConsumer, to_consumed_record
from .models import ConsumerState
from .workers import PartitionWorker

__all__ = [
    "StreamConsumer",
    "ConsumerState",
    "PartitionWorker",
    "to_consumed_record",
    "StreamConsumerError",
    "ConsumerConnectionError",
    "ConsumerSubscriptionError",
]
