"""Channel registry and dispatch entry point for notifications."""

from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from notification_service.logging import get_logger

from .models import (
    Channel,
    ChannelPayload,
    EmailPayload,
    NotificationContent,
    PushPayload,
    RecipientPreference,
    SendResult,
    SmsPayload,
)
from .strategies import NotificationStrategy

logger = get_logger(__name__, component="manager")

_PAYLOAD_TYPES = {
    Channel.EMAIL: EmailPayload,
    Channel.SMS: SmsPayload,
    Channel.PUSH: PushPayload,
}


def _coerce_channel(value: Union[Channel, str]) -> Optional[Channel]:
    if isinstance(value, Channel):
        return value
    try:
        return Channel(value)
    except ValueError:
        return None


def _channel_text(value: Union[Channel, str]) -> str:
    return value.value if isinstance(value, Channel) else str(value)


class NotificationManager:
    """Maps each channel to one strategy and sends payloads through it.

    Strategies are registered at startup; afterwards the registry is only
    read, so sends from several worker threads need no locking.
    """

    def __init__(
        self,
        strategies: Optional[Iterable[NotificationStrategy]] = None,
        max_workers: int = 4,
    ):
        self._strategies: Dict[Channel, NotificationStrategy] = {}
        self.max_workers = max_workers
        for strategy in strategies or []:
            self.register_strategy(strategy)

    def register_strategy(self, strategy: NotificationStrategy) -> None:
        """Register a strategy, replacing any existing one for its channel."""
        self._strategies[strategy.type] = strategy
        logger.info(
            f"Registered {strategy.type.value} strategy",
            extra={"event": "manager.strategy.registered", "channel": strategy.type.value},
        )

    def get_strategy(self, channel: Union[Channel, str]) -> Optional[NotificationStrategy]:
        resolved = _coerce_channel(channel)
        return self._strategies.get(resolved) if resolved else None

    def remove_strategy(self, channel: Union[Channel, str]) -> None:
        """Remove the strategy for a channel; removing an absent one is a no-op."""
        resolved = _coerce_channel(channel)
        if resolved is None or self._strategies.pop(resolved, None) is None:
            return
        logger.info(
            f"Removed {resolved.value} strategy",
            extra={"event": "manager.strategy.removed", "channel": resolved.value},
        )

    def send_email(self, payload: EmailPayload) -> SendResult:
        return self.send(Channel.EMAIL, payload)

    def send_sms(self, payload: SmsPayload) -> SendResult:
        return self.send(Channel.SMS, payload)

    def send_push(self, payload: PushPayload) -> SendResult:
        return self.send(Channel.PUSH, payload)

    def send(self, channel: Union[Channel, str], payload: ChannelPayload) -> SendResult:
        """Send a payload through the strategy registered for ``channel``.

        Returns:
            SendResult from the strategy, or a failed result when no strategy
            is registered or the payload belongs to another channel
        """
        strategy = self.get_strategy(channel)
        channel_text = _channel_text(channel)

        if strategy is None:
            logger.error(
                f"No strategy registered for {channel_text}",
                extra={"event": "manager.strategy.missing", "channel": channel_text},
            )
            return SendResult.failure(f"No strategy registered for {channel_text}")

        expected = _PAYLOAD_TYPES[strategy.type]
        if not isinstance(payload, expected):
            return SendResult.failure(
                f"Payload type {type(payload).__name__} does not match channel {channel_text}"
            )

        provider = strategy.get_provider()
        logger.info(
            f"Sending {channel_text} notification using {provider.name if provider else None}",
            extra={
                "event": "manager.send.started",
                "channel": channel_text,
                "provider": provider.name if provider else None,
            },
        )
        return strategy.send(payload)

    def _send_isolated(self, channel: Union[Channel, str], payload: ChannelPayload) -> SendResult:
        try:
            return self.send(channel, payload)
        except Exception as e:
            logger.error(
                f"Unexpected error sending {_channel_text(channel)} notification: {e}",
                extra={"event": "manager.send.crashed", "channel": _channel_text(channel)},
                exc_info=True,
            )
            return SendResult.failure(str(e) or type(e).__name__)

    def send_multiple(
        self, notifications: Sequence[Tuple[Union[Channel, str], ChannelPayload]]
    ) -> List[SendResult]:
        """Send several payloads concurrently.

        Each entry is independent: a failure in one never affects the others.
        Results are returned in the same order as the input.
        """
        if not notifications:
            return []

        workers = min(self.max_workers, len(notifications))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="notify") as pool:
            futures = [
                pool.submit(self._send_isolated, channel, payload)
                for channel, payload in notifications
            ]
            return [future.result() for future in futures]

    def send_to_user(
        self, preference: RecipientPreference, content: NotificationContent
    ) -> SendResult:
        """Send content through the recipient's preferred channel.

        The contact field for that channel must be present; there is no
        fallback to another channel and no retry.
        """
        channel = _coerce_channel(preference.preferred_channel)
        channel_text = _channel_text(preference.preferred_channel)

        logger.info(
            f"Sending notification to user via {channel_text}",
            extra={"event": "manager.send_to_user", "channel": channel_text},
        )

        if channel is Channel.EMAIL:
            if not preference.email:
                return SendResult.failure("User email not provided")
            return self.send_email(
                EmailPayload(
                    to=preference.email,
                    subject=content.subject,
                    body=content.body,
                    html=content.html,
                )
            )

        if channel is Channel.SMS:
            if not preference.phone:
                return SendResult.failure("User phone not provided")
            return self.send_sms(SmsPayload(to=preference.phone, body=content.body))

        if channel is Channel.PUSH:
            if not preference.device_token:
                return SendResult.failure("User device token not provided")
            return self.send_push(
                PushPayload(
                    to=preference.device_token,
                    title=content.subject,
                    body=content.body,
                    data=content.data,
                )
            )

        return SendResult.failure(f"Unknown notification channel: {channel_text}")
