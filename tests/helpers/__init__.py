"""Test helper utilities for notification service tests."""

from .kafka import FakeKafkaConsumer, FakeMessage, wait_for
from .providers import RecordingProvider, make_record

__all__ = ["FakeKafkaConsumer", "FakeMessage", "RecordingProvider", "make_record", "wait_for"]
