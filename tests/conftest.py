"""Shared pytest fixtures for notification service tests."""

import logging

import pytest

from notification_service.config.models import FrontendConfig, KafkaConfig
from notification_service.logging.context import clear_log_context

_ENV_VARS = [
    "SMTP_USER",
    "SMTP_PASS",
    "SES_SMTP_USER",
    "SES_SMTP_PASS",
    "TWILIO_ACCOUNT_SID",
    "TWILIO_AUTH_TOKEN",
    "FIREBASE_PROJECT_ID",
    "FIREBASE_CLIENT_EMAIL",
    "FIREBASE_PRIVATE_KEY",
    "KAFKA_SASL_USERNAME",
    "KAFKA_SASL_PASSWORD",
    "LOG_LEVEL",
    "ENVIRONMENT",
]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Remove service variables so a developer's .env never leaks into tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def clean_context():
    """Clear logging context before and after each test."""
    clear_log_context()
    yield
    clear_log_context()


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo configure_logging side effects on the root logger."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def frontend_config():
    return FrontendConfig(
        url="https://pizza.example.com/",
        order_path="/orders",
        support_email="help@pizza.example.com",
        brand_name="Pizza Palace",
    )


@pytest.fixture
def kafka_config():
    return KafkaConfig(
        brokers=["localhost:9092"],
        client_id="notification-service",
        topics=["order"],
        max_pending_per_partition=10,
    )
