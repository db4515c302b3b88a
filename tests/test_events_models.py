"""Tests for record and event envelope decoding."""

import json

import pytest

from notification_service.events.models import (
    ConsumedRecord,
    DomainEvent,
    EventDecodeError,
    OrderEventData,
    decode_event,
)


class TestDecodeEvent:
    def test_bytes_envelope(self):
        value = json.dumps({"event": "order-created", "data": {"_id": "abc123"}}).encode("utf-8")

        event = decode_event(value)

        assert event.name == "order-created"
        assert event.data == {"_id": "abc123"}

    def test_text_envelope_without_data(self):
        event = decode_event('{"event": "order-deleted"}')

        assert event.data == {}

    def test_unknown_envelope_fields_ignored(self):
        event = decode_event('{"event": "order-created", "data": {}, "version": 3}')

        assert event.name == "order-created"

    @pytest.mark.parametrize(
        "value,message",
        [
            (b"not json", "not valid JSON"),
            (b"\xff\xfe", "not valid JSON"),
            ("[1, 2, 3]", "must be a JSON object, got list"),
            ('{"data": {}}', "Invalid event envelope"),
            ('{"event": "", "data": {}}', "Invalid event envelope"),
            ('{"event": "order-created", "data": "abc"}', "Invalid event envelope"),
        ],
    )
    def test_rejects_malformed_values(self, value, message):
        with pytest.raises(EventDecodeError, match=message):
            decode_event(value)


class TestOrderEventData:
    def test_reads_wire_field_names(self):
        data = DomainEvent(
            event="order-created",
            data={
                "_id": "665f1c2ab1e8a9d3c4e5f601",
                "customerName": "Asha",
                "customerEmail": "asha@example.com",
                "customerPhone": "+919876543210",
                "deviceToken": "token-1",
                "preferredChannel": "sms",
                "status": "confirmed",
                "total": 450,
                "finalTotal": 499.5,
                "items": [{"name": "Margherita"}],
            },
        ).order_data()

        assert data.id == "665f1c2ab1e8a9d3c4e5f601"
        assert data.customer_name == "Asha"
        assert data.customer_email == "asha@example.com"
        assert data.customer_phone == "+919876543210"
        assert data.device_token == "token-1"
        assert data.preferred_channel == "sms"
        assert data.total == 450
        assert data.final_total == 499.5
        assert data.has_contact is True

    def test_numeric_id_is_coerced(self):
        assert OrderEventData.model_validate({"_id": 42}).id == "42"

    def test_phone_alone_is_contact(self):
        assert OrderEventData.model_validate({"_id": "a", "customerPhone": "+919876543210"}).has_contact is True

    def test_device_token_alone_is_not_contact(self):
        assert OrderEventData.model_validate({"_id": "a", "deviceToken": "t"}).has_contact is False

    @pytest.mark.parametrize("data", [{}, {"_id": ""}, {"_id": None}, {"_id": True}])
    def test_missing_id(self, data):
        with pytest.raises(EventDecodeError, match="Invalid order data"):
            DomainEvent(event="order-created", data=data).order_data()


class TestConsumedRecord:
    def test_key_text_decodes_bytes(self):
        record = ConsumedRecord(topic="order", partition=0, offset=5, key=b"abc123")

        assert record.key_text == "abc123"

    def test_key_text_without_key(self):
        assert ConsumedRecord(topic="order", partition=0, offset=5).key_text is None
