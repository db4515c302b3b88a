"""Provider contract and the shared send pipeline for vendor implementations.

A provider wraps exactly one vendor API for one channel. Whatever the vendor
does (network errors, rejected credentials, quota errors) comes back as a
SendResult; nothing raised by the vendor call crosses the provider boundary.
"""

from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

from notification_service.logging import get_logger
from notification_service.notifications.models import (
    EmailPayload,
    PushPayload,
    SendResult,
    SmsPayload,
)

from .exceptions import ProviderError

logger = get_logger(__name__, component="provider")

PayloadT = TypeVar("PayloadT", EmailPayload, SmsPayload, PushPayload)


class NotificationProvider(ABC, Generic[PayloadT]):
    """Uniform contract every vendor implementation fulfils.

    Attributes:
        name: Stable provider identifier reported in every SendResult
    """

    name: str = "unknown"

    @abstractmethod
    def send(self, payload: PayloadT) -> SendResult:
        """Send one payload. Must return, never raise."""

    @abstractmethod
    def is_configured(self) -> bool:
        """Report whether required credentials/endpoints were supplied."""


class BaseProvider(NotificationProvider[PayloadT]):
    """Base class for vendor providers.

    Subclasses implement ``is_configured`` and ``_deliver``; ``_deliver``
    performs the vendor call and returns the vendor message id, raising a
    ProviderError (or anything else) on failure.

    Attributes:
        vendor_label: Human-readable vendor name used in error messages
    """

    vendor_label: str = "Provider"

    def send(self, payload: PayloadT) -> SendResult:
        if not self.is_configured():
            logger.warning(
                f"[{self.name}] {self.vendor_label} is not configured",
                extra={"event": "provider.send.unconfigured", "provider": self.name},
            )
            return SendResult.failure(f"{self.vendor_label} is not configured", provider=self.name)

        try:
            message_id = self._deliver(payload)
        except ProviderError as e:
            logger.error(
                f"[{self.name}] Failed to send {payload.channel.value}: {e}",
                extra={
                    "event": "provider.send.failed",
                    "provider": self.name,
                    "error_type": type(e).__name__,
                },
            )
            return SendResult.failure(str(e) or type(e).__name__, provider=self.name)
        except Exception as e:
            logger.error(
                f"[{self.name}] Unexpected error sending {payload.channel.value}: {e}",
                extra={
                    "event": "provider.send.failed",
                    "provider": self.name,
                    "error_type": type(e).__name__,
                },
                exc_info=True,
            )
            return SendResult.failure(str(e) or type(e).__name__, provider=self.name)

        logger.info(
            f"[{self.name}] {payload.channel.value} sent to {payload.to}",
            extra={
                "event": "provider.send.succeeded",
                "provider": self.name,
                "message_id": message_id,
            },
        )
        return SendResult.ok(provider=self.name, message_id=message_id)

    @abstractmethod
    def _deliver(self, payload: PayloadT) -> Optional[str]:
        """Perform the vendor call and return its message id."""
