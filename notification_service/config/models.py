"""Configuration schema models using Pydantic."""

from enum import Enum
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class EmailProviderType(str, Enum):
    """Supported email vendors."""

    SMTP = "smtp"
    SES = "ses"


class SmsProviderType(str, Enum):
    """Supported SMS vendors."""

    TWILIO = "twilio"


class PushProviderType(str, Enum):
    """Supported push vendors."""

    FIREBASE = "firebase"


class OffsetReset(str, Enum):
    """Where a consumer group starts when it has no committed offset."""

    EARLIEST = "earliest"
    LATEST = "latest"


class SaslMechanism(str, Enum):
    """SASL mechanisms accepted by the broker client."""

    PLAIN = "PLAIN"
    SCRAM_SHA_256 = "SCRAM-SHA-256"
    SCRAM_SHA_512 = "SCRAM-SHA-512"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class KafkaConfig(BaseModel):
    """Event stream connection and consumption settings."""

    brokers: List[str] = Field(..., min_length=1, description="Bootstrap broker addresses")
    client_id: str = Field("notification-service", min_length=1)
    group_id: Optional[str] = Field(None, description="Consumer group (defaults to client_id)")
    topics: List[str] = Field(default_factory=lambda: ["order"], min_length=1)
    from_beginning: bool = Field(False, description="Start new groups at the earliest offset")
    auto_offset_reset: OffsetReset = Field(OffsetReset.LATEST)
    session_timeout_ms: int = Field(45000, ge=6000, le=300000)
    connect_timeout_seconds: int = Field(10, ge=1, le=120)
    max_pending_per_partition: int = Field(
        100, ge=1, le=10000, description="Queued records per partition before pausing it"
    )
    sasl_mechanism: Optional[SaslMechanism] = None

    @field_validator("brokers", "topics")
    @classmethod
    def strip_entries(cls, v: List[str]) -> List[str]:
        """Strip whitespace and drop empty entries."""
        cleaned = [item.strip() for item in v if item and item.strip()]
        if not cleaned:
            raise ValueError("List must contain at least one non-empty entry")
        return cleaned

    @property
    def effective_group_id(self) -> str:
        return self.group_id or self.client_id

    model_config = {"use_enum_values": True, "validate_default": True}


class SmtpSettings(BaseModel):
    """Generic SMTP relay (credentials come from SMTP_USER / SMTP_PASS)."""

    host: Optional[str] = None
    port: int = Field(587, ge=1, le=65535)
    use_tls: bool = Field(True, description="STARTTLS on non-465 ports")
    from_email: Optional[str] = None
    timeout: int = Field(30, ge=1, le=300)


class SesSettings(BaseModel):
    """Amazon SES SMTP interface (credentials come from SES_SMTP_USER / SES_SMTP_PASS)."""

    region: str = Field("us-east-1", min_length=1)
    host: Optional[str] = Field(None, description="Defaults to email-smtp.<region>.amazonaws.com")
    port: int = Field(587, ge=1, le=65535)
    use_tls: bool = True
    from_email: Optional[str] = None
    timeout: int = Field(30, ge=1, le=300)

    @property
    def effective_host(self) -> str:
        return self.host or f"email-smtp.{self.region}.amazonaws.com"


class EmailSettings(BaseModel):
    provider: EmailProviderType = EmailProviderType.SMTP
    smtp: SmtpSettings = Field(default_factory=SmtpSettings)
    ses: SesSettings = Field(default_factory=SesSettings)

    model_config = {"use_enum_values": True, "validate_default": True}


class TwilioSettings(BaseModel):
    """Twilio sender settings (account credentials come from the environment)."""

    from_number: Optional[str] = None
    api_base_url: str = "https://api.twilio.com/2010-04-01"


class SmsSettings(BaseModel):
    provider: SmsProviderType = SmsProviderType.TWILIO
    twilio: TwilioSettings = Field(default_factory=TwilioSettings)

    model_config = {"use_enum_values": True, "validate_default": True}


class FirebaseSettings(BaseModel):
    """FCM settings (service account credentials come from the environment)."""

    project_id: Optional[str] = None
    api_base_url: str = "https://fcm.googleapis.com/v1"


class PushSettings(BaseModel):
    provider: PushProviderType = PushProviderType.FIREBASE
    firebase: FirebaseSettings = Field(default_factory=FirebaseSettings)

    model_config = {"use_enum_values": True, "validate_default": True}


class NotificationsConfig(BaseModel):
    """Per-channel vendor selection."""

    email: EmailSettings = Field(default_factory=EmailSettings)
    sms: SmsSettings = Field(default_factory=SmsSettings)
    push: PushSettings = Field(default_factory=PushSettings)
    request_timeout: int = Field(
        10, ge=1, le=120, description="Timeout for vendor HTTP calls (seconds)"
    )


class FrontendConfig(BaseModel):
    """Links and branding used when rendering notification content."""

    url: str = Field(..., min_length=1)
    order_path: str = Field("/orders", description="Path appended to url for order links")
    support_email: str = "support@example.com"
    brand_name: str = "Pizza Palace"

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        stripped = v.strip().rstrip("/")
        if not stripped:
            raise ValueError("url cannot be empty")
        return stripped

    @field_validator("order_path")
    @classmethod
    def normalize_order_path(cls, v: str) -> str:
        path = v.strip().rstrip("/")
        if path and not path.startswith("/"):
            path = "/" + path
        return path


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(LogFormat.KEY_VALUE, description="json or key-value")
    silent: bool = Field(False, description="Suppress all log output")
    directory: Optional[Path] = Field(
        None, description="Also write combined.log and error.log here"
    )

    model_config = {"use_enum_values": True, "validate_default": True}


class AppConfig(BaseModel):
    """Root configuration object for the notification service."""

    kafka: KafkaConfig
    notifications: NotificationsConfig = Field(default_factory=NotificationsConfig)
    frontend: FrontendConfig
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def validate_topics_unique(self):
        """Reject duplicate topic subscriptions."""
        seen = set()
        for topic in self.kafka.topics:
            if topic in seen:
                raise ValueError(f"Duplicate topic: {topic} appears multiple times")
            seen.add(topic)
        return self
