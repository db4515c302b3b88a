"""Environment variable loading and validation.

Secrets never live in the YAML file; they are read here. Every credential
is optional at load time: a provider whose credentials are absent is still
built but reports itself as not configured.
"""

import os
from typing import List, Optional, Tuple

from .exceptions import ConfigurationError


class EnvironmentConfig:
    """Environment variable configuration holder."""

    def __init__(
        self,
        smtp_user: Optional[str] = None,
        smtp_pass: Optional[str] = None,
        ses_smtp_user: Optional[str] = None,
        ses_smtp_pass: Optional[str] = None,
        twilio_account_sid: Optional[str] = None,
        twilio_auth_token: Optional[str] = None,
        firebase_project_id: Optional[str] = None,
        firebase_client_email: Optional[str] = None,
        firebase_private_key: Optional[str] = None,
        kafka_sasl_username: Optional[str] = None,
        kafka_sasl_password: Optional[str] = None,
        log_level: Optional[str] = None,
        environment: Optional[str] = None,
    ):
        self.smtp_user = smtp_user
        self.smtp_pass = smtp_pass
        self.ses_smtp_user = ses_smtp_user
        self.ses_smtp_pass = ses_smtp_pass
        self.twilio_account_sid = twilio_account_sid
        self.twilio_auth_token = twilio_auth_token
        self.firebase_project_id = firebase_project_id
        self.firebase_client_email = firebase_client_email
        self.firebase_private_key = firebase_private_key
        self.kafka_sasl_username = kafka_sasl_username
        self.kafka_sasl_password = kafka_sasl_password
        self.log_level = log_level
        self.environment = environment or "local"

    @property
    def has_kafka_sasl(self) -> bool:
        return bool(self.kafka_sasl_username and self.kafka_sasl_password)


# Variables that only make sense together
_PAIRED_VARIABLES: List[Tuple[str, str]] = [
    ("SMTP_USER", "SMTP_PASS"),
    ("SES_SMTP_USER", "SES_SMTP_PASS"),
    ("TWILIO_ACCOUNT_SID", "TWILIO_AUTH_TOKEN"),
    ("KAFKA_SASL_USERNAME", "KAFKA_SASL_PASSWORD"),
    ("FIREBASE_CLIENT_EMAIL", "FIREBASE_PRIVATE_KEY"),
]

_VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _getenv(name: str) -> Optional[str]:
    """Read a variable, treating blank values as unset."""
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def load_environment_config() -> EnvironmentConfig:
    """
    Load and validate environment variables.

    Optional environment variables:
    - SMTP_USER / SMTP_PASS: generic SMTP relay credentials
    - SES_SMTP_USER / SES_SMTP_PASS: Amazon SES SMTP credentials
    - TWILIO_ACCOUNT_SID / TWILIO_AUTH_TOKEN: Twilio account credentials
    - FIREBASE_PROJECT_ID, FIREBASE_CLIENT_EMAIL, FIREBASE_PRIVATE_KEY:
      FCM service account (literal "\\n" in the key is expanded)
    - KAFKA_SASL_USERNAME / KAFKA_SASL_PASSWORD: broker SASL credentials
    - LOG_LEVEL: override log level
    - ENVIRONMENT: environment label for logs (default: local)

    Returns:
        EnvironmentConfig object with validated values

    Raises:
        ConfigurationError: If paired variables are half-set or LOG_LEVEL is invalid
    """
    errors = []

    for first, second in _PAIRED_VARIABLES:
        has_first = _getenv(first) is not None
        has_second = _getenv(second) is not None
        if has_first and not has_second:
            errors.append(f"{first} is set but {second} is not. Both must be set.")
        elif has_second and not has_first:
            errors.append(f"{second} is set but {first} is not. Both must be set.")

    log_level = _getenv("LOG_LEVEL")
    if log_level and log_level.upper() not in _VALID_LOG_LEVELS:
        errors.append(
            f"Invalid LOG_LEVEL: '{log_level}'. Must be one of: {', '.join(_VALID_LOG_LEVELS)}"
        )

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Copy .env.example to .env and fill in your credentials",
                "Set credential variables in pairs (user and password, sid and token)",
            ],
        )

    private_key = _getenv("FIREBASE_PRIVATE_KEY")
    if private_key:
        private_key = private_key.replace("\\n", "\n")

    return EnvironmentConfig(
        smtp_user=_getenv("SMTP_USER"),
        smtp_pass=_getenv("SMTP_PASS"),
        ses_smtp_user=_getenv("SES_SMTP_USER"),
        ses_smtp_pass=_getenv("SES_SMTP_PASS"),
        twilio_account_sid=_getenv("TWILIO_ACCOUNT_SID"),
        twilio_auth_token=_getenv("TWILIO_AUTH_TOKEN"),
        firebase_project_id=_getenv("FIREBASE_PROJECT_ID"),
        firebase_client_email=_getenv("FIREBASE_CLIENT_EMAIL"),
        firebase_private_key=private_key,
        kafka_sasl_username=_getenv("KAFKA_SASL_USERNAME"),
        kafka_sasl_password=_getenv("KAFKA_SASL_PASSWORD"),
        log_level=log_level.upper() if log_level else None,
        environment=_getenv("ENVIRONMENT"),
    )
