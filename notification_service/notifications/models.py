"""Data models and exceptions for notification dispatch.

Payloads are tagged with the channel they belong to; SendResult is the one
outcome type for every send attempt, successful or not.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Union

from notification_service.utils.timestamps import utc_now


class Channel(str, Enum):
    """Notification delivery channels."""

    EMAIL = "email"
    SMS = "sms"
    PUSH = "push"


NO_PROVIDER = "none"


class NotificationError(Exception):
    """Base exception for notification-related errors."""

    pass


class NotificationTemplateError(NotificationError):
    """Raised when content templates cannot be rendered."""

    pass


@dataclass
class EmailPayload:
    to: str
    subject: str
    body: str
    html: Optional[str] = None
    from_address: Optional[str] = None
    cc: List[str] = field(default_factory=list)
    bcc: List[str] = field(default_factory=list)

    channel: ClassVar[Channel] = Channel.EMAIL


@dataclass
class SmsPayload:
    to: str
    body: str
    from_number: Optional[str] = None

    channel: ClassVar[Channel] = Channel.SMS


@dataclass
class PushPayload:
    to: str
    title: str
    body: str
    data: Optional[Dict[str, Any]] = None
    image_url: Optional[str] = None

    channel: ClassVar[Channel] = Channel.PUSH


ChannelPayload = Union[EmailPayload, SmsPayload, PushPayload]


@dataclass
class SendResult:
    """Outcome of one send attempt.

    Attributes:
        success: Whether the provider accepted the message
        provider: Name of the provider that handled (or refused) the send,
            "none" when no provider was involved
        message_id: Vendor message identifier on success
        error: Human-readable failure reason
        timestamp: When the outcome was produced (UTC)
    """

    success: bool
    provider: str
    message_id: Optional[str] = None
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=utc_now)

    @classmethod
    def ok(cls, provider: str, message_id: Optional[str] = None) -> "SendResult":
        return cls(success=True, provider=provider, message_id=message_id)

    @classmethod
    def failure(cls, error: str, provider: str = NO_PROVIDER) -> "SendResult":
        return cls(success=False, provider=provider, error=error)


@dataclass
class NotificationContent:
    """Channel-agnostic notification content, built once per event."""

    subject: str
    body: str
    html: Optional[str] = None
    data: Optional[Dict[str, Any]] = None


@dataclass
class RecipientPreference:
    """Where and how a recipient wants to be reached.

    A channel is only satisfiable when its contact field is present; that is
    checked at dispatch time by NotificationManager.send_to_user.
    """

    preferred_channel: Union[Channel, str] = Channel.EMAIL
    email: Optional[str] = None
    phone: Optional[str] = None
    device_token: Optional[str] = None
