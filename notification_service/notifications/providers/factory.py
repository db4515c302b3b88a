"""Factory functions for instantiating notification providers from configuration."""

from notification_service.config.environment import EnvironmentConfig
from notification_service.config.models import NotificationsConfig
from notification_service.logging import get_logger

from .base import NotificationProvider
from .exceptions import ProviderConfigurationError
from .firebase import FirebasePushProvider
from .smtp import SesEmailProvider, SmtpConnectionSettings, SmtpEmailProvider
from .twilio import TwilioSmsProvider

logger = get_logger(__name__, component="provider")


def _build_smtp(config: NotificationsConfig, env: EnvironmentConfig) -> SmtpEmailProvider:
    smtp = config.email.smtp
    settings = SmtpConnectionSettings(
        host=smtp.host,
        port=smtp.port,
        username=env.smtp_user,
        password=env.smtp_pass,
        use_tls=smtp.use_tls,
        timeout=smtp.timeout,
    )
    return SmtpEmailProvider(settings, from_email=smtp.from_email)


def _build_ses(config: NotificationsConfig, env: EnvironmentConfig) -> SesEmailProvider:
    ses = config.email.ses
    settings = SmtpConnectionSettings(
        host=ses.effective_host,
        port=ses.port,
        username=env.ses_smtp_user,
        password=env.ses_smtp_pass,
        use_tls=ses.use_tls,
        timeout=ses.timeout,
    )
    return SesEmailProvider(settings, from_email=ses.from_email, region=ses.region)


def _build_twilio(config: NotificationsConfig, env: EnvironmentConfig) -> TwilioSmsProvider:
    twilio = config.sms.twilio
    return TwilioSmsProvider(
        account_sid=env.twilio_account_sid,
        auth_token=env.twilio_auth_token,
        from_number=twilio.from_number,
        api_base_url=twilio.api_base_url,
        timeout=config.request_timeout,
    )


def _build_firebase(config: NotificationsConfig, env: EnvironmentConfig) -> FirebasePushProvider:
    firebase = config.push.firebase
    return FirebasePushProvider(
        project_id=firebase.project_id or env.firebase_project_id,
        client_email=env.firebase_client_email,
        private_key=env.firebase_private_key,
        api_base_url=firebase.api_base_url,
        timeout=config.request_timeout,
    )


_EMAIL_BUILDERS = {"smtp": _build_smtp, "ses": _build_ses}
_SMS_BUILDERS = {"twilio": _build_twilio}
_PUSH_BUILDERS = {"firebase": _build_firebase}


def _select(builders, provider_type, channel: str, config, env) -> NotificationProvider:
    key = provider_type.lower() if isinstance(provider_type, str) else str(provider_type.value)
    builder = builders.get(key)

    if not builder:
        supported = ", ".join(sorted(builders.keys()))
        raise ProviderConfigurationError(
            f"Unknown {channel} provider: {provider_type}. Supported providers: {supported}"
        )

    provider = builder(config, env)

    logger.debug(
        "Created provider instance",
        extra={
            "event": "provider.created",
            "channel": channel,
            "provider": provider.name,
            "configured": provider.is_configured(),
        },
    )
    if not provider.is_configured():
        logger.warning(
            f"{channel} provider '{provider.name}' is missing credentials; "
            f"{channel} notifications will fail until it is configured",
            extra={"event": "provider.unconfigured", "channel": channel, "provider": provider.name},
        )
    return provider


def get_email_provider(config: NotificationsConfig, env: EnvironmentConfig) -> NotificationProvider:
    """Build the email provider selected by ``notifications.email.provider``.

    Raises:
        ProviderConfigurationError: If the provider type is not supported
    """
    return _select(_EMAIL_BUILDERS, config.email.provider, "email", config, env)


def get_sms_provider(config: NotificationsConfig, env: EnvironmentConfig) -> NotificationProvider:
    """Build the SMS provider selected by ``notifications.sms.provider``."""
    return _select(_SMS_BUILDERS, config.sms.provider, "sms", config, env)


def get_push_provider(config: NotificationsConfig, env: EnvironmentConfig) -> NotificationProvider:
    """Build the push provider selected by ``notifications.push.provider``."""
    return _select(_PUSH_BUILDERS, config.push.provider, "push", config, env)
