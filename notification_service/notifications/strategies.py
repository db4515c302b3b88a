"""Per-channel strategies: validate a payload, then hand it to the bound provider.

Every strategy runs the same pipeline (provider bound, provider configured,
payload valid, delegate) and always returns a SendResult.
"""

import re
from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

from notification_service.logging import get_logger

from .models import Channel, EmailPayload, PushPayload, SendResult, SmsPayload
from .providers.base import NotificationProvider

logger = get_logger(__name__, component="strategy")

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{9,14}$", re.ASCII)

PayloadT = TypeVar("PayloadT", EmailPayload, SmsPayload, PushPayload)


def _has_text(value: Optional[str]) -> bool:
    return bool(value and value.strip())


class NotificationStrategy(ABC, Generic[PayloadT]):
    """Binds at most one provider to a channel and enforces payload validity.

    Attributes:
        type: Channel handled by this strategy
        label: Channel wording used in error messages
        invalid_error: Error reported when validation rejects a payload
    """

    type: Channel
    label: str
    invalid_error: str

    def __init__(self, provider: Optional[NotificationProvider] = None):
        self._provider = provider

    def set_provider(self, provider: NotificationProvider) -> None:
        """Bind (or replace) the provider used by this strategy."""
        self._provider = provider

    def get_provider(self) -> Optional[NotificationProvider]:
        return self._provider

    @abstractmethod
    def validate(self, payload: PayloadT) -> bool:
        """Return True when the payload satisfies this channel's rules."""

    def send(self, payload: PayloadT) -> SendResult:
        provider = self._provider

        if provider is None:
            return SendResult.failure(f"No {self.label} provider configured")

        if not provider.is_configured():
            return SendResult.failure(
                f"Provider {provider.name} is not configured", provider=provider.name
            )

        if not self.validate(payload):
            logger.debug(
                f"Rejected invalid {self.type.value} payload",
                extra={"event": "strategy.payload.invalid", "channel": self.type.value},
            )
            return SendResult.failure(self.invalid_error, provider=provider.name)

        return provider.send(payload)


class EmailStrategy(NotificationStrategy[EmailPayload]):
    type = Channel.EMAIL
    label = "email"
    invalid_error = "Invalid email notification payload"

    def validate(self, payload: EmailPayload) -> bool:
        return (
            bool(payload.to and EMAIL_PATTERN.fullmatch(payload.to))
            and _has_text(payload.subject)
            and _has_text(payload.body)
        )


class SmsStrategy(NotificationStrategy[SmsPayload]):
    type = Channel.SMS
    label = "SMS"
    invalid_error = "Invalid SMS notification payload"

    def validate(self, payload: SmsPayload) -> bool:
        if not payload.to:
            return False
        digits = re.sub(r"[\s-]", "", payload.to)
        return bool(PHONE_PATTERN.fullmatch(digits)) and _has_text(payload.body)


class PushStrategy(NotificationStrategy[PushPayload]):
    type = Channel.PUSH
    label = "push notification"
    invalid_error = "Invalid push notification payload"

    def validate(self, payload: PushPayload) -> bool:
        return _has_text(payload.to) and _has_text(payload.title) and _has_text(payload.body)
