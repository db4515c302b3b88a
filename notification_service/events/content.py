"""Build channel-agnostic notification content for order events.

The builder computes the template context (display order id, order link,
status badge, ...) and renders the event's subject, text and HTML
templates. The same content is used whatever channel is finally chosen.
"""

from typing import Any, Dict, Optional, Tuple

from notification_service.config.models import FrontendConfig
from notification_service.logging import get_logger
from notification_service.notifications.models import NotificationContent
from notification_service.notifications.templates import TemplateRenderer
from notification_service.utils.timestamps import utc_now

from .models import OrderEventData

logger = get_logger(__name__, component="content")

KNOWN_EVENTS = (
    "order-created",
    "order-status-updated",
    "order-payment-completed",
    "order-payment-refunded",
    "order-deleted",
)

DEFAULT_CUSTOMER_NAME = "Valued Customer"
DEFAULT_STATUS = "updated"

# status -> (background, text colour)
STATUS_COLORS: Dict[str, Tuple[str, str]] = {
    "confirmed": ("#e8f5e9", "#2e7d32"),
    "preparing": ("#fff3e0", "#ef6c00"),
    "out_for_delivery": ("#e3f2fd", "#1565c0"),
    "delivered": ("#e8f5e9", "#2e7d32"),
    "cancelled": ("#ffebee", "#c62828"),
    "refunded": ("#fce4ec", "#ad1457"),
}
DEFAULT_STATUS_COLORS = ("#f5f5f5", "#616161")


def format_order_id(order_id: str) -> str:
    """Short display form of an order id: last 8 characters, upper-cased."""
    return order_id[-8:].upper()


def format_amount(amount: Optional[float]) -> str:
    """Render an amount without a trailing '.0' for whole numbers."""
    if not amount:
        return "0"
    if float(amount).is_integer():
        return str(int(amount))
    return str(amount)


def status_badge(status: str) -> Dict[str, str]:
    background, color = STATUS_COLORS.get(status.lower(), DEFAULT_STATUS_COLORS)
    return {"background": background, "color": color}


class ContentBuilder:
    """Turns an order event into NotificationContent via templates."""

    def __init__(self, frontend: FrontendConfig, renderer: Optional[TemplateRenderer] = None):
        self.frontend = frontend
        self.renderer = renderer or TemplateRenderer()

    def supports(self, event_name: str) -> bool:
        """Known events whose templates are installed."""
        return event_name in KNOWN_EVENTS and self.renderer.has_templates(event_name)

    def order_link(self, order_id: str) -> str:
        return f"{self.frontend.url}{self.frontend.order_path}/{order_id}"

    def build_context(self, event_name: str, data: OrderEventData) -> Dict[str, Any]:
        status = data.status or DEFAULT_STATUS
        return {
            "event_name": event_name,
            "order_id": format_order_id(data.id),
            "customer_name": data.customer_name or DEFAULT_CUSTOMER_NAME,
            "total": format_amount(data.final_total or data.total),
            "order_link": self.order_link(data.id),
            "status": status,
            "status_display": status.replace("_", " "),
            "status_badge": status_badge(status),
            "frontend_url": self.frontend.url,
            "support_email": self.frontend.support_email,
            "brand_name": self.frontend.brand_name,
            "year": utc_now().year,
        }

    def build(self, event_name: str, data: OrderEventData) -> Optional[NotificationContent]:
        """Build content for an event.

        Returns:
            NotificationContent, or None when the event has no templates

        Raises:
            NotificationTemplateError: If rendering fails
        """
        if not self.supports(event_name):
            return None

        context = self.build_context(event_name, data)
        rendered = self.renderer.render(event_name, context)

        return NotificationContent(
            subject=rendered["subject"],
            body=rendered["text_body"],
            html=rendered["html_body"],
            data={"orderId": data.id, "event": event_name, "link": context["order_link"]},
        )
