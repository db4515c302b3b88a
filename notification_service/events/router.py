"""Turn one consumed record into at most one notification.

The router is the record handler given to the stream consumer. It never
raises: decode problems, unroutable events and send failures all end as a
log entry, and the record counts as consumed.
"""

from notification_service.logging import get_logger
from notification_service.logging.context import log_context
from notification_service.notifications.manager import NotificationManager
from notification_service.notifications.models import (
    Channel,
    NotificationTemplateError,
    RecipientPreference,
    SendResult,
)
from notification_service.utils.timestamps import format_timestamp_for_log

from .content import ContentBuilder
from .models import ConsumedRecord, EventDecodeError, decode_event

logger = get_logger(__name__, component="router")


class EventRouter:
    """Routes order events to the notification manager."""

    def __init__(self, manager: NotificationManager, content_builder: ContentBuilder):
        self.manager = manager
        self.content_builder = content_builder

    def handle(self, record: ConsumedRecord) -> None:
        """Handle one record; all failures are logged, none are raised."""
        with log_context(topic=record.topic, partition=record.partition, offset=record.offset):
            logger.info(
                "Received record",
                extra={
                    "event": "router.record.received",
                    "key": record.key_text,
                    "record_timestamp": format_timestamp_for_log(record.timestamp),
                },
            )
            try:
                self._route(record)
            except Exception as e:
                logger.error(
                    f"Unexpected error handling record: {e}",
                    extra={"event": "router.record.crashed", "error_type": type(e).__name__},
                    exc_info=True,
                )

    def _route(self, record: ConsumedRecord) -> None:
        if not record.value:
            logger.warning("Empty record value", extra={"event": "router.record.empty"})
            return

        try:
            event = decode_event(record.value)
            data = event.order_data()
        except EventDecodeError as e:
            logger.warning(
                f"Discarding undecodable record: {e}",
                extra={"event": "router.record.undecodable"},
            )
            return

        with log_context(order_id=data.id, event_name=event.name):
            if not data.has_contact:
                logger.warning(
                    f"No contact info provided for notification (order {data.id})",
                    extra={"event": "router.recipient.unreachable", "order_id": data.id},
                )
                return

            if not self.content_builder.supports(event.name):
                logger.warning(
                    f"Unknown event: {event.name}",
                    extra={"event": "router.event.unknown"},
                )
                return

            try:
                content = self.content_builder.build(event.name, data)
            except NotificationTemplateError as e:
                logger.error(
                    f"Could not build notification content: {e}",
                    extra={"event": "router.content.failed"},
                )
                return

            preference = RecipientPreference(
                preferred_channel=data.preferred_channel or Channel.EMAIL,
                email=data.customer_email,
                phone=data.customer_phone,
                device_token=data.device_token,
            )

            channel = getattr(preference.preferred_channel, "value", preference.preferred_channel)
            with log_context(channel=channel):
                result = self.manager.send_to_user(preference, content)
                self._log_result(result)

    @staticmethod
    def _log_result(result: SendResult) -> None:
        if result.success:
            logger.info(
                f"Notification sent via {result.provider}",
                extra={
                    "event": "router.notification.sent",
                    "provider": result.provider,
                    "message_id": result.message_id,
                },
            )
        else:
            logger.warning(
                f"Notification failed: {result.error}",
                extra={
                    "event": "router.notification.failed",
                    "provider": result.provider,
                    "error": result.error,
                },
            )
