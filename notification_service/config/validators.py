"""Non-fatal configuration checks."""

import warnings
from typing import Any, Dict, List


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Check raw configuration for settings that are valid but likely unintended.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []

    kafka = config_dict.get("kafka", {})
    if isinstance(kafka, dict):
        if kafka.get("from_beginning") is True:
            warning_messages.append(
                "kafka.from_beginning is enabled: a new consumer group will replay "
                "the whole topic and re-send every notification"
            )

        pending = kafka.get("max_pending_per_partition")
        if isinstance(pending, int) and pending > 1000:
            warning_messages.append(
                f"Large max_pending_per_partition ({pending}) may hold many records in memory"
            )

    frontend = config_dict.get("frontend", {})
    if isinstance(frontend, dict):
        url = frontend.get("url")
        if isinstance(url, str) and url.strip().lower().startswith("http://"):
            warning_messages.append(
                f"frontend.url ({url}) is not HTTPS; order links in notifications will be insecure"
            )

    notifications = config_dict.get("notifications", {})
    if isinstance(notifications, dict):
        email = notifications.get("email", {})
        if isinstance(email, dict):
            smtp = email.get("smtp", {})
            if isinstance(smtp, dict) and smtp.get("use_tls") is False:
                warning_messages.append(
                    "notifications.email.smtp.use_tls is disabled; mail will be sent in clear text"
                )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """Emit warning messages using Python's warnings module."""
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
