"""Unit tests for per-channel notification strategies.

Tests:
- Payload validation rules per channel
- Pipeline order: provider bound, provider configured, payload valid, delegate
- Exact failure messages
"""

import pytest

from notification_service.notifications.models import Channel, EmailPayload, PushPayload, SmsPayload
from notification_service.notifications.strategies import EmailStrategy, PushStrategy, SmsStrategy
from tests.helpers import RecordingProvider


class TestEmailValidation:
    @pytest.mark.parametrize(
        "to,subject,body,expected",
        [
            ("a@b.com", "Hello", "Body", True),
            ("first.last+tag@mail.example.co.in", "Hello", "Body", True),
            ("not-an-email", "Hello", "Body", False),
            ("a@b", "Hello", "Body", False),
            ("a b@c.com", "Hello", "Body", False),
            ("a@b.com\n", "Hello", "Body", False),
            ("", "Hello", "Body", False),
            ("a@b.com", "   ", "Body", False),
            ("a@b.com", "Hello", "", False),
        ],
    )
    def test_validate(self, to, subject, body, expected):
        assert EmailStrategy().validate(EmailPayload(to=to, subject=subject, body=body)) is expected


class TestSmsValidation:
    @pytest.mark.parametrize(
        "to,expected",
        [
            ("+919876543210", True),
            ("9876543210", True),
            ("+91 98765-43210", True),
            ("+1 555 000 1111", True),
            ("0123456789", False),
            ("12345", False),
            ("+1234567890123456", False),
            ("+91abc3210987", False),
            ("+1٢٣٤٥٦٧٨٩٠", False),
            ("", False),
        ],
    )
    def test_validate_phone(self, to, expected):
        assert SmsStrategy().validate(SmsPayload(to=to, body="Order confirmed")) is expected

    def test_empty_body_is_invalid(self):
        assert SmsStrategy().validate(SmsPayload(to="+919876543210", body=" ")) is False


class TestPushValidation:
    @pytest.mark.parametrize(
        "to,title,body,expected",
        [
            ("token", "Title", "Body", True),
            ("", "Title", "Body", False),
            ("token", "", "Body", False),
            ("token", "Title", "  ", False),
        ],
    )
    def test_validate(self, to, title, body, expected):
        assert PushStrategy().validate(PushPayload(to=to, title=title, body=body)) is expected


class TestSendPipeline:
    def test_channel_types(self):
        assert EmailStrategy.type is Channel.EMAIL
        assert SmsStrategy.type is Channel.SMS
        assert PushStrategy.type is Channel.PUSH

    @pytest.mark.parametrize(
        "strategy,payload,error",
        [
            (EmailStrategy(), EmailPayload(to="a@b.com", subject="s", body="b"), "No email provider configured"),
            (SmsStrategy(), SmsPayload(to="+919876543210", body="b"), "No SMS provider configured"),
            (
                PushStrategy(),
                PushPayload(to="token", title="t", body="b"),
                "No push notification provider configured",
            ),
        ],
    )
    def test_no_provider(self, strategy, payload, error):
        result = strategy.send(payload)

        assert result.success is False
        assert result.error == error
        assert result.provider == "none"

    def test_unconfigured_provider_is_checked_before_validation(self):
        provider = RecordingProvider(name="stub-email", configured=False)
        strategy = EmailStrategy(provider)

        result = strategy.send(EmailPayload(to="broken", subject="", body=""))

        assert result.error == "Provider stub-email is not configured"
        assert result.provider == "stub-email"
        assert provider.calls == []

    @pytest.mark.parametrize(
        "strategy,payload,error",
        [
            (EmailStrategy, EmailPayload(to="broken", subject="s", body="b"), "Invalid email notification payload"),
            (SmsStrategy, SmsPayload(to="123", body="b"), "Invalid SMS notification payload"),
            (PushStrategy, PushPayload(to="", title="t", body="b"), "Invalid push notification payload"),
        ],
    )
    def test_invalid_payload_never_reaches_provider(self, strategy, payload, error):
        provider = RecordingProvider()

        result = strategy(provider).send(payload)

        assert result.success is False
        assert result.error == error
        assert result.provider == provider.name
        assert provider.calls == []

    def test_valid_payload_is_delegated(self):
        provider = RecordingProvider(name="stub-sms")
        payload = SmsPayload(to="+919876543210", body="Order confirmed")

        result = SmsStrategy(provider).send(payload)

        assert result.success is True
        assert result.provider == "stub-sms"
        assert provider.calls == [payload]

    def test_provider_failure_is_returned_unchanged(self):
        provider = RecordingProvider(success=False, error="quota exceeded")

        result = EmailStrategy(provider).send(EmailPayload(to="a@b.com", subject="s", body="b"))

        assert result.success is False
        assert result.error == "quota exceeded"
        assert result.provider == "stub-email"

    def test_set_provider_replaces_binding(self):
        first, second = RecordingProvider(name="first"), RecordingProvider(name="second")
        strategy = PushStrategy(first)

        strategy.set_provider(second)
        strategy.send(PushPayload(to="token", title="t", body="b"))

        assert strategy.get_provider() is second
        assert first.calls == []
        assert len(second.calls) == 1
