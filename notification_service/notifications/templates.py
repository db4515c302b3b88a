"""Template rendering for notification content using Jinja2.

This module wraps Jinja2 template rendering with strict undefined
checking to catch template errors early. Each event has three
templates named after it: ``<name>_subject.j2``, ``<name>_body.txt.j2`` and
``<name>_body.html.j2``.
"""

from typing import Any, Dict

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError, select_autoescape

from notification_service.logging import get_logger

from .models import NotificationTemplateError

logger = get_logger(__name__, component="templates")


def template_prefix(event_name: str) -> str:
    """Map an event name such as ``order-created`` to its template prefix."""
    return event_name.strip().lower().replace("-", "_")


class TemplateRenderer:
    """Renders notification templates using Jinja2.

    Provides methods to render subject lines and body content (HTML and plain text)
    from template files in the notification_service.notifications.email_templates
    package.
    """

    def __init__(self, template_dir: str = "email_templates"):
        """Initialize template renderer with Jinja2 environment.

        Args:
            template_dir: Directory name within notification_service.notifications package
        """
        # Only HTML bodies are escaped; subjects and text bodies go out verbatim.
        self.env = Environment(
            loader=PackageLoader("notification_service.notifications", template_dir),
            autoescape=select_autoescape(enabled_extensions=("html.j2",), default=False),
            undefined=StrictUndefined,
        )

        logger.debug(f"Initialized TemplateRenderer with templates from {template_dir}")

    def has_templates(self, event_name: str) -> bool:
        """Return True when a subject template exists for ``event_name``."""
        return f"{template_prefix(event_name)}_subject.j2" in self.env.list_templates()

    def render(self, event_name: str, context: Dict[str, Any]) -> Dict[str, str]:
        """Render all templates for an event with the provided context.

        Args:
            event_name: Event whose templates to render
            context: Dictionary of template variables

        Returns:
            Dictionary containing:
            - subject: Rendered subject line (single line, no newlines)
            - html_body: Rendered HTML body
            - text_body: Rendered plain text body

        Raises:
            NotificationTemplateError: If template rendering fails
        """
        prefix = template_prefix(event_name)
        try:
            subject_template = self.env.get_template(f"{prefix}_subject.j2")
            html_template = self.env.get_template(f"{prefix}_body.html.j2")
            text_template = self.env.get_template(f"{prefix}_body.txt.j2")

            subject = subject_template.render(context).strip().replace("\n", " ")
            html_body = html_template.render(context)
            text_body = text_template.render(context)

            logger.debug(
                f"Rendered templates for {event_name}",
                extra={"event": "templates.rendered", "event_name": event_name},
            )

            return {
                "subject": subject,
                "html_body": html_body,
                "text_body": text_body,
            }

        except TemplateError as e:
            error_msg = f"Template rendering failed for {event_name}: {e}"
            logger.error(error_msg, extra={"event": "templates.render.failed"}, exc_info=True)
            raise NotificationTemplateError(error_msg) from e
        except Exception as e:
            error_msg = f"Unexpected error during template rendering for {event_name}: {e}"
            logger.error(error_msg, extra={"event": "templates.render.failed"}, exc_info=True)
            raise NotificationTemplateError(error_msg) from e
