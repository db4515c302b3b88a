"""Configuration management for the notification service."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config, validate_config_file
from .models import (
    AppConfig,
    EmailProviderType,
    EmailSettings,
    FirebaseSettings,
    FrontendConfig,
    KafkaConfig,
    LogFormat,
    LogLevel,
    LoggingConfig,
    NotificationsConfig,
    OffsetReset,
    PushProviderType,
    PushSettings,
    SaslMechanism,
    SesSettings,
    SmsProviderType,
    SmsSettings,
    SmtpSettings,
    TwilioSettings,
)

__all__ = [
    # Loader functions
    "load_config",
    "validate_config_file",
    "load_environment_config",
    # Configuration models
    "AppConfig",
    "KafkaConfig",
    "NotificationsConfig",
    "EmailSettings",
    "SmtpSettings",
    "SesSettings",
    "SmsSettings",
    "TwilioSettings",
    "PushSettings",
    "FirebaseSettings",
    "FrontendConfig",
    "LoggingConfig",
    "EnvironmentConfig",
    # Enums
    "EmailProviderType",
    "SmsProviderType",
    "PushProviderType",
    "OffsetReset",
    "SaslMechanism",
    "LogLevel",
    "LogFormat",
    # Exceptions
    "ConfigurationError",
]
