"""SMTP-based email providers.

SMTPClient is a thin wrapper around smtplib handling TLS/SSL negotiation,
authentication and connection cleanup. SmtpEmailProvider sends through any
SMTP relay; SesEmailProvider sends through the Amazon SES SMTP interface.
"""

import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Callable, List, Optional

from email_validator import EmailNotValidError, validate_email

from notification_service.logging import get_logger
from notification_service.notifications.models import EmailPayload

from .base import BaseProvider
from .exceptions import ProviderDeliveryError

logger = get_logger(__name__, component="provider")


@dataclass
class SmtpConnectionSettings:
    """Everything needed to open an authenticated SMTP session."""

    host: Optional[str]
    port: int = 587
    username: Optional[str] = None
    password: Optional[str] = None
    use_tls: bool = True
    timeout: int = 30


class SMTPClient:
    """Wrapper around smtplib for sending email messages.

    Factories are injectable so tests can substitute smtplib.
    """

    def __init__(
        self,
        smtp_factory: Optional[Callable] = None,
        smtp_ssl_factory: Optional[Callable] = None,
    ):
        self.smtp_factory = smtp_factory or smtplib.SMTP
        self.smtp_ssl_factory = smtp_ssl_factory or smtplib.SMTP_SSL

    def send(
        self,
        message: EmailMessage,
        settings: SmtpConnectionSettings,
        recipients: Optional[List[str]] = None,
    ) -> None:
        """Send an email message via SMTP.

        Port 465 uses implicit TLS; other ports upgrade with STARTTLS when
        ``settings.use_tls`` is set.

        Args:
            message: Fully constructed EmailMessage to send
            settings: Connection settings
            recipients: Envelope recipients (defaults to the message headers)

        Raises:
            ProviderDeliveryError: If message delivery fails
        """
        smtp = None
        try:
            if settings.port == 465:
                logger.debug(f"Connecting to {settings.host}:{settings.port} with implicit TLS")
                smtp = self.smtp_ssl_factory(
                    settings.host,
                    settings.port,
                    context=ssl.create_default_context(),
                    timeout=settings.timeout,
                )
            else:
                logger.debug(f"Connecting to {settings.host}:{settings.port}")
                smtp = self.smtp_factory(settings.host, settings.port, timeout=settings.timeout)

                if settings.use_tls:
                    smtp.starttls(context=ssl.create_default_context())

            if settings.username and settings.password:
                smtp.login(settings.username, settings.password)

            smtp.send_message(message, to_addrs=recipients)

        except smtplib.SMTPException as e:
            raise ProviderDeliveryError(f"SMTP error during message delivery: {e}") from e
        except OSError as e:
            raise ProviderDeliveryError(f"Network error during SMTP connection: {e}") from e
        finally:
            if smtp is not None:
                try:
                    smtp.quit()
                except (smtplib.SMTPException, OSError) as e:
                    logger.warning(f"Error closing SMTP connection: {e}")


def normalize_address(address: str) -> str:
    """Validate a single email address and return its normalized form.

    Raises:
        ValueError: If the address is not a valid email address
    """
    try:
        return validate_email(address.strip(), check_deliverability=False).normalized
    except EmailNotValidError as e:
        raise ValueError(f"Invalid email address '{address}': {e}") from e


def build_message(payload: EmailPayload, sender: str) -> EmailMessage:
    """Build a multipart message (plain text plus optional HTML alternative)."""
    message = EmailMessage()
    message["Subject"] = payload.subject
    message["From"] = sender
    message["To"] = payload.to
    if payload.cc:
        message["Cc"] = ", ".join(payload.cc)

    sender_domain = sender.rpartition("@")[2].strip(">") or None
    message["Message-ID"] = make_msgid(domain=sender_domain)

    message.set_content(payload.body)
    if payload.html:
        message.add_alternative(payload.html, subtype="html")

    return message


class SmtpEmailProvider(BaseProvider[EmailPayload]):
    """Email provider for a generic SMTP relay."""

    name = "smtp"
    vendor_label = "SMTP"

    def __init__(
        self,
        settings: SmtpConnectionSettings,
        from_email: Optional[str],
        smtp_client: Optional[SMTPClient] = None,
    ):
        self.settings = settings
        self.from_email = from_email
        self.smtp_client = smtp_client or SMTPClient()

    def is_configured(self) -> bool:
        return bool(self.settings.host and self.from_email)

    def _deliver(self, payload: EmailPayload) -> Optional[str]:
        sender = payload.from_address or self.from_email
        try:
            recipients = [normalize_address(addr) for addr in [payload.to, *payload.cc, *payload.bcc]]
        except ValueError as e:
            raise ProviderDeliveryError(str(e)) from e

        message = build_message(payload, sender)
        self.smtp_client.send(message, self.settings, recipients=recipients)
        return message["Message-ID"]


class SesEmailProvider(SmtpEmailProvider):
    """Email provider for the Amazon SES SMTP interface.

    SES only accepts authenticated sessions, so SMTP credentials are
    required in addition to host and sender.
    """

    name = "aws-ses"
    vendor_label = "AWS SES"

    def __init__(
        self,
        settings: SmtpConnectionSettings,
        from_email: Optional[str],
        region: str,
        smtp_client: Optional[SMTPClient] = None,
    ):
        super().__init__(settings, from_email, smtp_client=smtp_client)
        self.region = region

    def is_configured(self) -> bool:
        return super().is_configured() and bool(self.settings.username and self.settings.password)
