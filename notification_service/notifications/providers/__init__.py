"""Vendor providers for email, SMS and push delivery."""

from .base import BaseProvider, NotificationProvider
from .exceptions import (
    ProviderConfigurationError,
    ProviderDeliveryError,
    ProviderError,
    ProviderHTTPError,
    ProviderTimeoutError,
)
from .factory import get_email_provider, get_push_provider, get_sms_provider
from .firebase import FirebasePushProvider
from .smtp import SesEmailProvider, SMTPClient, SmtpConnectionSettings, SmtpEmailProvider
from .twilio import TwilioSmsProvider

__all__ = [
    "NotificationProvider",
    "BaseProvider",
    "ProviderError",
    "ProviderConfigurationError",
    "ProviderDeliveryError",
    "ProviderHTTPError",
    "ProviderTimeoutError",
    "SMTPClient",
    "SmtpConnectionSettings",
    "SmtpEmailProvider",
    "SesEmailProvider",
    "TwilioSmsProvider",
    "FirebasePushProvider",
    "get_email_provider",
    "get_sms_provider",
    "get_push_provider",
]
