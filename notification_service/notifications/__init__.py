"""Notification dispatch engine.

This package provides the complete dispatch pipeline:
- NotificationManager: Channel registry and entry point (send, send_multiple, send_to_user)
- Strategies: Per-channel payload validation bound to one provider
- Providers: Vendor implementations (SMTP, SES, Twilio, FCM)
- TemplateRenderer: Jinja2-based notification content rendering
"""

from .manager import NotificationManager
from .models import (
    NO_PROVIDER,
    Channel,
    ChannelPayload,
    EmailPayload,
    NotificationContent,
    NotificationError,
    NotificationTemplateError,
    PushPayload,
    RecipientPreference,
    SendResult,
    SmsPayload,
)
from .strategies import EmailStrategy, NotificationStrategy, PushStrategy, SmsStrategy
from .templates import TemplateRenderer

__all__ = [
    # Entry point
    "NotificationManager",
    # Strategies
    "NotificationStrategy",
    "EmailStrategy",
    "SmsStrategy",
    "PushStrategy",
    # Models and results
    "Channel",
    "ChannelPayload",
    "EmailPayload",
    "SmsPayload",
    "PushPayload",
    "NotificationContent",
    "RecipientPreference",
    "SendResult",
    "NO_PROVIDER",
    # Exceptions
    "NotificationError",
    "NotificationTemplateError",
    # Components
    "TemplateRenderer",
]
